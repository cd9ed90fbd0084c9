"""
Session settings: the declarative schema plus the `settings` and `set` commands.

Each setting is one `SettingSpec` describing how a raw string is validated,
converted to its typed value and rendered back for display. Both the quick
`set <key> <value>` path and the interactive menu are driven entirely by
`SETTINGS_SCHEMA`; adding a setting means adding an entry there.
"""

import json
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..core import ui
from ..core.api_config import OUTPUT_FORMATS, SEARCH_TYPES, TRACKS_TYPES
from ..core.parse import parse_leading_int
from .registry import CommandDescriptor

if TYPE_CHECKING:
    from ..session import ExecutionContext, SessionFlags

_UNSET_TYPE_TOKENS = ("", "none", "all")


@dataclass(frozen=True)
class Choice:
    name: str
    value: Any


@dataclass(frozen=True)
class SettingSpec:
    label: str
    attr: str
    validate: Callable[[str], bool]
    transform: Callable[[Any], Any]
    format: Callable[[Any], str]
    error_msg: str
    choices: Optional[tuple[Choice, ...]] = None


def _norm(value: Any) -> str:
    return str(value).strip().lower() if value is not None else ""


def _valid_page_size(value: str) -> bool:
    n = parse_leading_int(value)
    return n is not None and n > 0


SETTINGS_SCHEMA: dict[str, SettingSpec] = {
    "type": SettingSpec(
        label="Search Type",
        attr="search_type",
        validate=lambda v: _norm(v) in _UNSET_TYPE_TOKENS or _norm(v) in SEARCH_TYPES,
        transform=lambda v: None if _norm(v) in _UNSET_TYPE_TOKENS else _norm(v),
        format=lambda v: str(v) if v else "none (all)",
        error_msg=f"Valid types: {', '.join(SEARCH_TYPES)}, none",
        choices=(Choice("all (no filter)", None),) + tuple(Choice(t, t) for t in SEARCH_TYPES),
    ),
    "per_page": SettingSpec(
        label="Results Per Page",
        attr="per_page",
        validate=_valid_page_size,
        transform=parse_leading_int,
        format=str,
        error_msg="Must be a positive number",
    ),
    "tracks_type": SettingSpec(
        label="Default Tracks Type",
        attr="tracks_type",
        validate=lambda v: _norm(v) in TRACKS_TYPES,
        transform=_norm,
        format=str,
        error_msg=f"Valid types: {', '.join(TRACKS_TYPES)}",
        choices=tuple(Choice(t, t) for t in TRACKS_TYPES),
    ),
    "tracks_output": SettingSpec(
        label="Tracks Output Format",
        attr="tracks_output",
        validate=lambda v: _norm(v) in OUTPUT_FORMATS,
        transform=_norm,
        format=str,
        error_msg=f"Valid formats: {', '.join(OUTPUT_FORMATS)}",
        choices=(
            Choice("human - readable text", "human"),
            Choice("csv - comma-separated", "csv"),
            Choice("pipe - pipe-separated", "pipe"),
            Choice("markdown - table format", "markdown"),
        ),
    ),
    # Every input is accepted; anything but on/true means off
    "verbose": SettingSpec(
        label="Verbose Mode",
        attr="verbose",
        validate=lambda v: True,
        transform=lambda v: v is True or v in ("on", "true"),
        format=lambda v: "on" if v else "off",
        error_msg="Use: on or off",
        choices=(Choice("off", False), Choice("on", True)),
    ),
}


def _current(flags: "SessionFlags", spec: SettingSpec) -> str:
    return spec.format(getattr(flags, spec.attr))


def _choice_token(choice: Choice) -> str:
    if choice.value is None:
        return "none"
    if isinstance(choice.value, bool):
        return "on" if choice.value else "off"
    return str(choice.value)


def _apply(key: str, value: Any, ctx: "ExecutionContext") -> None:
    spec = SETTINGS_SCHEMA[key]
    setattr(ctx.flags, spec.attr, value)
    ui.success(f"{spec.label}: {_current(ctx.flags, spec)}")
    if key == "type" and ctx.update_prompt is not None:
        ctx.update_prompt()
    ctx.log(f"Settings updated: {json.dumps(asdict(ctx.flags))}")


def show_settings(flags: "SessionFlags") -> None:
    ui.header("\nCurrent Settings:")
    ui.plain("")
    for spec in SETTINGS_SCHEMA.values():
        ui.plain(f"  {spec.label:<20} {_current(flags, spec)}")


def handle_set(args: list[str], ctx: "ExecutionContext") -> None:
    """Quick-set one option. Invalid input never touches the flags."""
    if not args:
        show_settings(ctx.flags)
        return

    option = args[0]
    key = option.lower()
    spec = SETTINGS_SCHEMA.get(key)
    if spec is None:
        ui.error(f"Unknown option: {option}")
        ui.info(f"Available options: {', '.join(SETTINGS_SCHEMA)}")
        return

    if len(args) < 2:
        ui.error(f"Missing value for {option}")
        ui.info(f"Current: {_current(ctx.flags, spec)}")
        if spec.choices:
            ui.info(f"Options: {', '.join(_choice_token(c) for c in spec.choices)}")
        return

    raw = args[1]
    value = raw.lower()
    if not spec.validate(value):
        ui.error(f"Invalid value '{raw}'")
        ui.info(spec.error_msg)
        return

    _apply(key, spec.transform(value), ctx)


def _pick(message: str, names: list[str]) -> int:
    """Numbered picklist; returns the zero-based index chosen."""
    for i, name in enumerate(names, start=1):
        ui.plain(f"  {i}. {name}")
    answer = ui.ask(message, choices=[str(i) for i in range(1, len(names) + 1)])
    return int(answer) - 1


def _ask_free_text(spec: SettingSpec, current: Any) -> Any:
    while True:
        answer = ui.ask(f"Enter {spec.label}", default=str(current))
        if spec.validate(answer):
            return spec.transform(answer)
        ui.error(spec.error_msg)


def handle_settings(ctx: "ExecutionContext") -> None:
    """Interactive menu: pick a setting, then pick or type its new value."""
    keys = list(SETTINGS_SCHEMA)
    names = [f"{SETTINGS_SCHEMA[k].label}: {_current(ctx.flags, SETTINGS_SCHEMA[k])}" for k in keys]
    names.append("← Back")

    try:
        index = _pick("Which setting to change?", names)
        if index == len(keys):
            return

        key = keys[index]
        spec = SETTINGS_SCHEMA[key]
        if spec.choices:
            choice = spec.choices[_pick(f"Select {spec.label}", [c.name for c in spec.choices])]
            value = choice.value
        else:
            value = _ask_free_text(spec, getattr(ctx.flags, spec.attr))
    except (KeyboardInterrupt, EOFError):
        # Cancelled inside the menu; back to the session prompt
        ui.plain("")
        return

    _apply(key, value, ctx)


async def _settings_handler(args: list[str], ctx: "ExecutionContext") -> bool:
    handle_settings(ctx)
    return True


async def _set_handler(args: list[str], ctx: "ExecutionContext") -> bool:
    handle_set(args, ctx)
    return True


SETTINGS_COMMANDS = (
    CommandDescriptor(
        name="settings",
        handler=_settings_handler,
        usage="settings",
        description="Show or change current session settings",
    ),
    CommandDescriptor(
        name="set",
        handler=_set_handler,
        usage="set [option] [value]",
        description="Quick set a session option (or show settings if no args)",
    ),
)
