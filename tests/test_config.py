from pathlib import Path

from moozhak.core.config import get_settings, load_config_file, load_settings, parse_config_text, reset_settings
from moozhak.session import create_session_flags


def test_parse_config_text_skips_comments_and_keeps_equals():
    text = "# comment\n\nDISCOGS_TOKEN=abc=def\nPER_PAGE = 10\nEMPTY=\n=orphan\n"
    assert parse_config_text(text) == {"DISCOGS_TOKEN": "abc=def", "PER_PAGE": "10"}


def test_first_existing_config_file_wins(tmp_path):
    local = tmp_path / "local.mzkconfig"
    home = tmp_path / "home.mzkconfig"
    home.write_text("PER_PAGE=20\n", encoding="utf-8")
    assert load_config_file([local, home]) == {"PER_PAGE": "20"}
    local.write_text("PER_PAGE=3\n", encoding="utf-8")
    assert load_config_file([local, home]) == {"PER_PAGE": "3"}


def test_load_settings_from_mzkconfig(tmp_path):
    cfg = tmp_path / ".mzkconfig"
    cfg.write_text(
        "DEFAULT_TYPE=Master\nPER_PAGE=15abc\nVERBOSE=true\nDEFAULT_TRACKS_TYPE=release\n"
        "DEFAULT_TRACKS_OUTPUT=markdown\nALWAYS_CLEAN=on\nDISCOGS_TOKEN=tok\nGETBPM_API_KEY=key\n",
        encoding="utf-8",
    )
    settings = load_settings([cfg])
    assert settings.default_type == "master"
    assert settings.per_page == 15
    assert settings.verbose is True
    assert settings.default_tracks_type == "release"
    assert settings.default_tracks_output == "markdown"
    assert settings.always_clean is True
    assert settings.discogs_token == "tok"
    assert settings.getbpm_api_key == "key"


def test_invalid_values_fall_back_to_defaults(tmp_path):
    cfg = tmp_path / ".mzkconfig"
    cfg.write_text(
        "DEFAULT_TYPE=albums\nPER_PAGE=0\nVERBOSE=maybe\nDEFAULT_TRACKS_TYPE=x\nDEFAULT_TRACKS_OUTPUT=xml\n",
        encoding="utf-8",
    )
    settings = load_settings([cfg])
    assert settings.default_type is None
    assert settings.per_page == 5
    assert settings.verbose is False
    assert settings.default_tracks_type == "master"
    assert settings.default_tracks_output == "human"


def test_environment_overrides_file(tmp_path, monkeypatch):
    cfg = tmp_path / ".mzkconfig"
    cfg.write_text("PER_PAGE=15\n", encoding="utf-8")
    monkeypatch.setenv("MZK_PER_PAGE", "30")
    assert load_settings([cfg]).per_page == 30


def test_plain_discogs_token_env(monkeypatch):
    monkeypatch.setenv("DISCOGS_TOKEN", "from-env")
    assert load_settings([]).discogs_token == "from-env"


def test_defaults_without_any_file():
    settings = load_settings([])
    assert settings.per_page == 5
    assert settings.output_dir == Path.cwd() / "dist"


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first
    reset_settings()
    assert get_settings() is not first


def test_session_flags_from_settings(tmp_path):
    cfg = tmp_path / ".mzkconfig"
    cfg.write_text("DEFAULT_TYPE=label\nPER_PAGE=7\nDEFAULT_TRACKS_OUTPUT=pipe\n", encoding="utf-8")
    flags = create_session_flags(load_settings([cfg]))
    assert flags.search_type == "label"
    assert flags.per_page == 7
    assert flags.verbose is False
    assert flags.tracks_type == "master"
    assert flags.tracks_output == "pipe"
