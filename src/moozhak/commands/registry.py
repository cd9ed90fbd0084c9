"""
Command registry, input tokenizer and dispatcher for the interactive session.

Commands are plain data: a `CommandDescriptor` per command, collected into a
`CommandRegistry` that indexes every name and alias once at construction.
Two descriptors claiming the same token is a configuration error and fails
immediately with `CommandRegistryError`.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Optional

from ..core import ui
from ..core.errors import CommandRegistryError

if TYPE_CHECKING:
    from ..session import ExecutionContext

Handler = Callable[[list[str], "ExecutionContext"], Awaitable[bool]]

_TOKEN_RE = re.compile(r'(?:[^\s"]+|"[^"]*")+')
_EDGE_QUOTES_RE = re.compile(r'^"|"$')

SEPARATOR = "─" * 52


@dataclass(frozen=True)
class CommandDescriptor:
    name: str
    handler: Handler
    aliases: tuple[str, ...] = ()
    min_args: int = 0
    usage: str = ""
    description: str = ""


@dataclass(frozen=True)
class ParsedInput:
    command: str
    args: list[str] = field(default_factory=list)


def parse_input(raw: str) -> ParsedInput:
    """Split a raw line into a lower-cased command and its arguments.

    Double-quoted spans form a single token; the surrounding quotes are
    removed and everything inside is kept verbatim.
    """
    trimmed = (raw or "").strip()
    if not trimmed:
        return ParsedInput("", [])
    parts = _TOKEN_RE.findall(trimmed)
    if not parts:
        return ParsedInput("", [])
    return ParsedInput(parts[0].lower(), [_EDGE_QUOTES_RE.sub("", p) for p in parts[1:]])


class CommandRegistry:
    """Name/alias lookup over a fixed set of command descriptors."""

    def __init__(self, descriptors: Iterable[CommandDescriptor] = ()):
        self._commands: dict[str, CommandDescriptor] = {}
        self._index: dict[str, CommandDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: CommandDescriptor) -> None:
        tokens = [descriptor.name.lower()] + [a.lower() for a in descriptor.aliases]
        for token in tokens:
            owner = self._index.get(token)
            if owner is not None:
                raise CommandRegistryError(
                    f"'{token}' of command '{descriptor.name}' is already registered by '{owner.name}'"
                )
        if len(set(tokens)) != len(tokens):
            raise CommandRegistryError(f"Command '{descriptor.name}' repeats one of its own aliases")

        self._commands[descriptor.name.lower()] = descriptor
        for token in tokens:
            self._index[token] = descriptor

    def find_command(self, name: str) -> Optional[CommandDescriptor]:
        if not name:
            return None
        return self._index.get(name.lower())

    def command_names(self) -> list[str]:
        return list(self._commands)

    def __iter__(self):
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)


class Dispatcher:
    """Turns one raw input line into at most one handler call.

    Handler exceptions are not caught here; the session loop owns recovery.
    """

    def __init__(self, registry: CommandRegistry):
        self.registry = registry

    async def execute(self, raw: str, ctx: "ExecutionContext") -> bool:
        parsed = parse_input(raw)
        if not parsed.command:
            return True

        trimmed = raw.strip()
        ctx.log(f"Command: {trimmed}")

        if ctx.flags.verbose:
            ui.boxed("Command", [f"Input: {trimmed}"])
        else:
            ui.header(f"\n{SEPARATOR}\n")

        try:
            descriptor = self.registry.find_command(parsed.command)
            if descriptor is None:
                ui.error(f"Unknown command: {parsed.command}")
                ui.info("Type 'help' for available commands.")
                return True

            if len(parsed.args) < descriptor.min_args:
                ui.error("Missing arguments")
                ui.info(f"Usage: {descriptor.usage}")
                return True

            return await descriptor.handler(parsed.args, ctx)
        finally:
            ui.header(f"\n{SEPARATOR}\n")
