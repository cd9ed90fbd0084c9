"""
Credential lookup for the Discogs token and the GetSongBPM API key.

Secrets are resolved in this order:

- an explicit value (e.g. the ``--token`` CLI option)
- the system keyring (service name ``moozhak``), unless ``MZK_DISABLE_KEYRING=1``
- environment overrides (``DISCOGS_TOKEN``, ``GETBPM_API_KEY`` and their
  ``MZK_``-prefixed forms)
- the loaded settings (``.mzkconfig``, settings/secrets TOML files)

Keyring entries use the key format ``{service}_{key}``. When the keyring
backend is unavailable, `store_credentials` falls back to the user
``.secrets.toml`` file.
"""

import os
from typing import Optional

import keyring
import keyring.errors
import toml
from rich.console import Console

from .config import USER_SECRETS_FILE, MoozhakSettings, get_settings

console = Console()

KEYRING_SERVICE = "moozhak"

SERVICE_KEYS = {
    "discogs": ["token"],
    "getsongbpm": ["api_key"],
}

_ENV_OVERRIDES = {
    ("discogs", "token"): ["MZK_DISCOGS_TOKEN", "DISCOGS_TOKEN"],
    ("getsongbpm", "api_key"): ["MZK_GETBPM_API_KEY", "GETBPM_API_KEY"],
}

_SETTINGS_FIELDS = {
    ("discogs", "token"): "discogs_token",
    ("getsongbpm", "api_key"): "getbpm_api_key",
}


def _keyring_disabled() -> bool:
    return os.getenv("MZK_DISABLE_KEYRING") == "1"


def _secrets_key(service: str, key: str) -> str:
    return f"{service.lower()}_{key}"


def _write_secret_file(service: str, key: str, value: Optional[str]) -> None:
    # Secrets files use the settings field names so the config loader picks them up
    name = _SETTINGS_FIELDS.get((service.lower(), key), _secrets_key(service, key))
    data: dict = {}
    if USER_SECRETS_FILE.exists():
        try:
            data = toml.loads(USER_SECRETS_FILE.read_text(encoding="utf-8")) or {}
        except toml.TomlDecodeError:
            data = {}
    if value is None:
        data.pop(name, None)
    else:
        data[name] = value
    USER_SECRETS_FILE.parent.mkdir(parents=True, exist_ok=True)
    USER_SECRETS_FILE.write_text(toml.dumps(data), encoding="utf-8")


def store_credentials(service: str, key: str, value: str) -> str:
    """Store a credential, returning where it ended up ("keyring" or "file")."""
    if not _keyring_disabled():
        try:
            keyring.set_password(KEYRING_SERVICE, _secrets_key(service, key), value)
            return "keyring"
        except keyring.errors.KeyringError as e:
            console.print(
                f"[yellow]Warning:[/yellow] Could not store {service}.{key} in keyring ({e})."
            )
    _write_secret_file(service, key, value)
    return "file"


def get_credentials(
    service: str,
    key: str,
    explicit: Optional[str] = None,
    settings: Optional[MoozhakSettings] = None,
) -> Optional[str]:
    """Resolve a credential, returning None when no layer provides one."""
    if explicit:
        return explicit

    if not _keyring_disabled():
        try:
            v = keyring.get_password(KEYRING_SERVICE, _secrets_key(service, key))
            if v:
                return v
        except keyring.errors.KeyringError as e:
            console.print(f"[yellow]Warning:[/yellow] Keyring unavailable for {service}.{key}: {e}")

    for env in _ENV_OVERRIDES.get((service.lower(), key), []):
        v = os.getenv(env)
        if v:
            return v

    field = _SETTINGS_FIELDS.get((service.lower(), key))
    if field:
        cfg = settings if settings is not None else get_settings()
        return getattr(cfg, field, None)
    return None


def clear_credentials(service: str) -> list[str]:
    """Remove every known credential for `service`; returns the cleared keys."""
    service = service.lower()
    cleared = []
    for key in SERVICE_KEYS.get(service, []):
        if not _keyring_disabled():
            try:
                if keyring.get_password(KEYRING_SERVICE, _secrets_key(service, key)) is not None:
                    keyring.delete_password(KEYRING_SERVICE, _secrets_key(service, key))
                    cleared.append(key)
            except keyring.errors.PasswordDeleteError:
                pass
            except keyring.errors.KeyringError as e:
                console.print(f"[red]  - Keyring error while deleting '{key}': {e}[/red]")
        if USER_SECRETS_FILE.exists():
            _write_secret_file(service, key, None)
    return cleared
