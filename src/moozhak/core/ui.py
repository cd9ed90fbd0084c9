"""
Console output helpers built on Rich.

Every user-facing message goes through these functions so the command
handlers stay free of styling concerns. Messages are printed with markup
disabled, since Discogs titles routinely contain square brackets.
"""

from rich.console import Console
from rich.prompt import Prompt

console = Console()

DIVIDER_WIDTH = 60


def _emit(message: str, style: str | None = None) -> None:
    console.print(message, style=style, markup=False, highlight=False, soft_wrap=True)


def plain(message: str = "") -> None:
    _emit(message)


def info(message: str) -> None:
    _emit(message, "cyan")


def success(message: str) -> None:
    _emit(message, "green")


def warn(message: str) -> None:
    _emit(message, "yellow")


def error(message: str) -> None:
    _emit(message, "bold red")


def header(message: str) -> None:
    _emit(message, "bold magenta")


def debug(message: str) -> None:
    _emit(message, "dim")


def divider(heavy: bool = False) -> None:
    _emit(("━" if heavy else "─") * DIVIDER_WIDTH, "dim")


def boxed(title: str, lines: list[str]) -> None:
    """Print lines inside a light box, used for verbose request/response echo."""
    debug(f"┌─ {title} " + "─" * max(0, DIVIDER_WIDTH - len(title) - 4))
    for line in lines:
        debug(f"│ {line}")
    debug("└" + "─" * (DIVIDER_WIDTH - 1))


def ask(message: str, choices: list[str] | None = None, default: str | None = None) -> str:
    """Ask one question on the console; Ctrl-C propagates as KeyboardInterrupt."""
    kwargs = {"console": console, "choices": choices}
    if default is not None:
        kwargs["default"] = default
    return Prompt.ask(message, **kwargs)


def read_line(prompt: str) -> str:
    """Read one raw session line. Raises EOFError/KeyboardInterrupt on interrupt."""
    return console.input(prompt, markup=False)
