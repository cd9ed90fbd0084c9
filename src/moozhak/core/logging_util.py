import json as _json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return _json.dumps(payload, ensure_ascii=False)


def setup_logging(
    *, json_logs: bool = False, verbose: bool | None = None, quiet: bool | None = None
) -> None:
    """Configure root logging for diagnostics.

    - json_logs: emit JSON lines to stderr
    - verbose: DEBUG level if True
    - quiet: ERROR level if True
    Default level is WARNING so diagnostics stay out of the interactive session.
    """
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    if quiet:
        level = max(level, logging.ERROR)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handler = logging.StreamHandler(stream=sys.stderr)
    if json_logs:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def session_timestamp() -> str:
    """Filesystem-safe timestamp, e.g. ``2024-05-01T12-30-00-123Z``."""
    return _now_iso().replace(":", "-").replace(".", "-")


class SessionLog:
    """Append-only text log for one session.

    Each entry is a ``[ISO timestamp] text`` line. Writes open the file in
    append mode, so a single writer is assumed; nothing here coordinates
    concurrent writers.
    """

    def __init__(self, log_dir: Path, stamp: str | None = None):
        self.stamp = stamp or session_timestamp()
        self.path = Path(log_dir) / f"log-{self.stamp}.txt"

    def init(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        header = (
            "=== Moozhak CLI Log ===\n"
            f"Session: {self.stamp}\n"
            f"Started: {_now_iso()}\n\n"
        )
        self.path.write_text(header, encoding="utf-8")

    def write(self, entry: str) -> None:
        logger.debug(entry)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(f"[{_now_iso()}] {entry}\n")

    def log_api_response(self, endpoint: str, params: Any, response: Any) -> None:
        separator = "─" * 60
        self.write(
            f"\n{separator}\n"
            f"API CALL: {endpoint}\n"
            f"PARAMS: {_json.dumps(params, indent=2, default=str)}\n"
            f"RESPONSE:\n{_json.dumps(response, indent=2, default=str)}\n"
            f"{separator}\n"
        )
