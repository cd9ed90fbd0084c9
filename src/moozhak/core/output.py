"""
File output for search and tracklist results.

Everything is written below a single base directory (``dist`` by default):

- ``json/``   one JSON document per search/tracks invocation
- ``logs/``   session logs
- ``tracks/`` formatted tracklists, one file per release
"""

import json
import re
import shutil
from pathlib import Path
from typing import Any

from . import ui
from .logging_util import session_timestamp

TRACKS_EXTENSIONS = {
    "human": "txt",
    "csv": "csv",
    "pipe": "txt",
    "markdown": "md",
}

_NAME_MAX = 15


def sanitize_name(value: str) -> str:
    """Reduce a name to a short lower-case slug for file names."""
    cleaned = re.sub(r"[^a-zA-Z0-9\s-]", "", value or "")
    cleaned = re.sub(r"\s+", "-", cleaned).lower()
    return cleaned[:_NAME_MAX]


def tracks_filename(release_id: int, fmt: str, artist: str, title: str) -> str:
    ext = TRACKS_EXTENSIONS.get(fmt, "txt")
    return f"{release_id}-{sanitize_name(artist)}-{sanitize_name(title)}.{ext}"


class OutputWriter:
    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    @property
    def json_dir(self) -> Path:
        return self.base_dir / "json"

    @property
    def logs_dir(self) -> Path:
        return self.base_dir / "logs"

    @property
    def tracks_dir(self) -> Path:
        return self.base_dir / "tracks"

    def ensure_dirs(self) -> None:
        for d in (self.base_dir, self.json_dir, self.logs_dir, self.tracks_dir):
            d.mkdir(parents=True, exist_ok=True)

    def write_json(self, output: dict[str, Any]) -> Path:
        self.json_dir.mkdir(parents=True, exist_ok=True)
        path = self.json_dir / f"{output.get('type', 'output')}-{session_timestamp()}.json"
        path.write_text(json.dumps(output, indent=2, ensure_ascii=False), encoding="utf-8")
        ui.success(f"Output saved to: {path}")
        return path

    def write_tracks(self, content: str, release_id: int, fmt: str, artist: str, title: str) -> Path:
        self.tracks_dir.mkdir(parents=True, exist_ok=True)
        path = self.tracks_dir / tracks_filename(release_id, fmt, artist, title)
        path.write_text(content, encoding="utf-8")
        ui.success(f"Tracks saved to: {path}")
        return path

    def clean(self) -> bool:
        """Delete the whole output tree. Returns False when there was nothing to clean."""
        if not self.base_dir.exists():
            ui.info(f"{self.base_dir.name} folder does not exist. Nothing to clean.")
            return False
        shutil.rmtree(self.base_dir)
        ui.success(f"Cleaned {self.base_dir.name} folder (json output, tracks and logs).")
        return True
