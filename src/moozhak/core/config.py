"""
Configuration management using Dynaconf and Pydantic.

Settings come from three layers, later layers overriding earlier ones:

1. The classic ``.mzkconfig`` key=value file (current directory first, then
   the home directory; the first file found wins).
2. Dynaconf: ``settings.toml`` / ``.secrets.toml`` in the current directory
   and under ``~/.config/moozhak``.
3. Environment variables prefixed with ``MZK_`` (also read by Dynaconf).

Pydantic validates the merged data into a typed `MoozhakSettings` object.
Unusable values (a non-numeric page size, an unknown search type) fall back
to their defaults instead of aborting startup.
"""

import os
from pathlib import Path
from typing import Any, Optional

from dynaconf import Dynaconf
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from rich.console import Console

from .api_config import OUTPUT_FORMATS, SEARCH_TYPES, TRACKS_TYPES
from .parse import is_truthy, parse_leading_int

console = Console()

CONFIG_FILENAME = ".mzkconfig"

USER_CONFIG_DIR = Path.home() / ".config" / "moozhak"
USER_SETTINGS_FILE = USER_CONFIG_DIR / "settings.toml"
USER_SECRETS_FILE = USER_CONFIG_DIR / ".secrets.toml"

LOCAL_SETTINGS_FILE = Path("settings.toml")
LOCAL_SECRETS_FILE = Path(".secrets.toml")

DEFAULT_PER_PAGE = 5
DEFAULT_TRACKS_TYPE = "master"
DEFAULT_TRACKS_OUTPUT = "human"


def _build_loader() -> Dynaconf:
    return Dynaconf(
        envvar_prefix="MZK",
        settings_files=[
            str(LOCAL_SETTINGS_FILE),
            str(LOCAL_SECRETS_FILE),
            str(USER_SETTINGS_FILE),
            str(USER_SECRETS_FILE),
        ],
        environments=False,
    )


class MoozhakSettings(BaseModel):
    """A Pydantic model that defines and validates all application settings."""

    default_type: Optional[str] = None
    per_page: int = DEFAULT_PER_PAGE
    verbose: bool = False
    default_tracks_type: str = DEFAULT_TRACKS_TYPE
    default_tracks_output: str = DEFAULT_TRACKS_OUTPUT
    always_clean: bool = False
    output_dir: Path = Field(default_factory=lambda: Path.cwd() / "dist")

    discogs_token: Optional[str] = None
    getbpm_api_key: Optional[str] = None

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    @field_validator("default_type", mode="before")
    @classmethod
    def _known_search_type(cls, v: Any) -> Optional[str]:
        value = str(v).strip().lower() if v is not None else ""
        return value if value in SEARCH_TYPES else None

    @field_validator("per_page", mode="before")
    @classmethod
    def _positive_page_size(cls, v: Any) -> int:
        n = parse_leading_int(v)
        return n if n is not None and n >= 1 else DEFAULT_PER_PAGE

    @field_validator("default_tracks_type", mode="before")
    @classmethod
    def _known_tracks_type(cls, v: Any) -> str:
        value = str(v).strip().lower() if v is not None else ""
        return value if value in TRACKS_TYPES else DEFAULT_TRACKS_TYPE

    @field_validator("default_tracks_output", mode="before")
    @classmethod
    def _known_output_format(cls, v: Any) -> str:
        value = str(v).strip().lower() if v is not None else ""
        return value if value in OUTPUT_FORMATS else DEFAULT_TRACKS_OUTPUT

    @field_validator("verbose", "always_clean", mode="before")
    @classmethod
    def _flag(cls, v: Any) -> bool:
        return is_truthy(v)

    @field_validator("discogs_token", "getbpm_api_key", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        value = str(v).strip()
        return value or None


def default_config_paths() -> list[Path]:
    return [Path.cwd() / CONFIG_FILENAME, Path.home() / CONFIG_FILENAME]


def parse_config_text(text: str) -> dict[str, str]:
    """Parse key=value lines. Comments (#) and blank lines are skipped.

    Values may themselves contain ``=``; entries with an empty key or value
    are dropped.
    """
    config: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, _, value = stripped.partition("=")
        key = key.strip()
        value = value.strip()
        if key and value:
            config[key] = value
    return config


def load_config_file(paths: Optional[list[Path]] = None) -> dict[str, str]:
    """Read the first existing ``.mzkconfig`` from `paths`."""
    for path in paths if paths is not None else default_config_paths():
        if not path.exists():
            continue
        try:
            return parse_config_text(path.read_text(encoding="utf-8"))
        except OSError:
            continue
    return {}


def _lower_keys(data: dict) -> dict[str, Any]:
    return {str(k).lower(): v for k, v in data.items()}


def load_settings(config_paths: Optional[list[Path]] = None) -> MoozhakSettings:
    """Build a fresh settings object from every configuration layer."""
    config_dict: dict[str, Any] = {}
    config_dict.update(_lower_keys(load_config_file(config_paths)))
    config_dict.update(_lower_keys(_build_loader().as_dict() or {}))

    # Historical un-prefixed variable for the Discogs token
    env_token = os.getenv("DISCOGS_TOKEN")
    if env_token and not config_dict.get("discogs_token"):
        config_dict["discogs_token"] = env_token

    try:
        return MoozhakSettings(**config_dict)
    except ValidationError as e:
        console.print(f"[red]Configuration error:[/red]\n{e}")
        raise


_settings_instance: Optional[MoozhakSettings] = None


def get_settings() -> MoozhakSettings:
    """Get the application settings as a singleton Pydantic model."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = load_settings()
    return _settings_instance


def reset_settings() -> None:
    """Forget the cached settings (used by tests and `config` commands)."""
    global _settings_instance
    _settings_instance = None
