"""Commands for the moozhak CLI.

The interactive session commands are descriptors collected by
`build_registry`; `lookup` and `config` are Typer sub-apps mounted by
moozhak.cli.
"""

from .builtin import BUILTIN_COMMANDS
from .registry import CommandDescriptor, CommandRegistry, Dispatcher, parse_input
from .search import SEARCH_COMMAND
from .settings import SETTINGS_COMMANDS
from .tracks import TRACKS_COMMAND


def build_registry() -> CommandRegistry:
    """Registry holding every interactive session command."""
    return CommandRegistry([SEARCH_COMMAND, TRACKS_COMMAND, *SETTINGS_COMMANDS, *BUILTIN_COMMANDS])


__all__ = [
    "CommandDescriptor",
    "CommandRegistry",
    "Dispatcher",
    "build_registry",
    "parse_input",
]
