"""Session housekeeping commands: clean, help and exit."""

from typing import TYPE_CHECKING

from ..core import ui
from .registry import CommandDescriptor

if TYPE_CHECKING:
    from ..session import ExecutionContext

HELP_TEXT = """
  Available Commands:
    search               Show current search settings
    search <query>       Search Discogs for a release or artist
    tracks <id>          Get tracklist using current tracks_type setting
    tracks <type> <id>   Get tracklist (type: master or release)
    settings             Interactive settings menu
    set [option] [val]   Quick set: type, per_page, tracks_type, tracks_output, verbose
    clean                Delete all files in the output folder
    help                 Show this help message
    exit                 Exit the session

  Examples:
    search Daft Punk
    tracks 1234
    tracks release 249504
    set type master
    set verbose on"""


def show_help() -> None:
    ui.plain(HELP_TEXT)


async def _clean_handler(args: list[str], ctx: "ExecutionContext") -> bool:
    ctx.output.clean()
    return True


async def _help_handler(args: list[str], ctx: "ExecutionContext") -> bool:
    show_help()
    return True


async def _exit_handler(args: list[str], ctx: "ExecutionContext") -> bool:
    ctx.log("Session ended by user")
    ui.plain("")
    ui.success("Goodbye!")
    return False


BUILTIN_COMMANDS = (
    CommandDescriptor(
        name="clean",
        handler=_clean_handler,
        usage="clean",
        description="Delete all files in the output folder",
    ),
    CommandDescriptor(
        name="help",
        handler=_help_handler,
        aliases=("?", "h"),
        usage="help",
        description="Show available commands",
    ),
    CommandDescriptor(
        name="exit",
        handler=_exit_handler,
        aliases=("quit", "q"),
        usage="exit",
        description="Exit the session",
    ),
)
