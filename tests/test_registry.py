import pytest

from moozhak.commands import build_registry
from moozhak.commands.registry import CommandDescriptor, CommandRegistry, parse_input
from moozhak.core.errors import CommandRegistryError


async def _noop(args, ctx):
    return True


@pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
def test_parse_input_blank(raw):
    parsed = parse_input(raw)
    assert parsed.command == ""
    assert parsed.args == []


def test_parse_input_quoted_argument():
    parsed = parse_input('search "Daft Punk"')
    assert parsed.command == "search"
    assert parsed.args == ["Daft Punk"]


def test_parse_input_keeps_punctuation_inside_quotes():
    parsed = parse_input('search "Artist - Album (2020)"')
    assert parsed.args == ["Artist - Album (2020)"]


def test_parse_input_lowercases_command_only():
    parsed = parse_input("  SET Type MASTER  ")
    assert parsed.command == "set"
    assert parsed.args == ["Type", "MASTER"]


def test_parse_input_mixed_tokens():
    parsed = parse_input('tracks release 249504 "two words"')
    assert parsed.args == ["release", "249504", "two words"]


def test_find_command_is_case_insensitive_for_names_and_aliases():
    registry = build_registry()
    for descriptor in registry:
        for token in (descriptor.name, *descriptor.aliases):
            assert registry.find_command(token) is descriptor
            assert registry.find_command(token.upper()) is descriptor
            mixed = "".join(c.upper() if i % 2 else c for i, c in enumerate(token))
            assert registry.find_command(mixed) is descriptor


def test_find_command_unknown():
    assert build_registry().find_command("frobnicate") is None
    assert build_registry().find_command("") is None


def test_default_commands_and_aliases():
    registry = build_registry()
    assert registry.command_names() == ["search", "tracks", "settings", "set", "clean", "help", "exit"]
    assert registry.find_command("s").name == "search"
    assert registry.find_command("t").name == "tracks"
    assert registry.find_command("?").name == "help"
    assert registry.find_command("h").name == "help"
    assert registry.find_command("quit").name == "exit"
    assert registry.find_command("q").name == "exit"
    assert registry.find_command("tracks").min_args == 1
    assert registry.find_command("tracks").usage == "tracks [type] <id>"


def test_alias_collision_rejected_at_construction():
    with pytest.raises(CommandRegistryError):
        CommandRegistry(
            [
                CommandDescriptor(name="alpha", handler=_noop, aliases=("a",)),
                CommandDescriptor(name="another", handler=_noop, aliases=("a",)),
            ]
        )


def test_alias_shadowing_a_name_rejected():
    registry = CommandRegistry([CommandDescriptor(name="alpha", handler=_noop)])
    with pytest.raises(CommandRegistryError):
        registry.register(CommandDescriptor(name="beta", handler=_noop, aliases=("ALPHA",)))
    assert registry.find_command("beta") is None


def test_registration_order_does_not_matter():
    a = CommandDescriptor(name="alpha", handler=_noop, aliases=("x",))
    b = CommandDescriptor(name="beta", handler=_noop, aliases=("y",))
    forward = CommandRegistry([a, b])
    backward = CommandRegistry([b, a])
    for token in ("alpha", "x", "beta", "y"):
        assert forward.find_command(token) is backward.find_command(token)
