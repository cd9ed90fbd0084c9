"""
Interactive session loop and the one-shot runners used by the CLI subcommands.

The session owns one `SessionFlags` record for its whole lifetime and hands
it to every command through a single `ExecutionContext`. Prompting happens
synchronously between dispatches, so Ctrl-C at the prompt surfaces as a
plain `KeyboardInterrupt`; each dispatched line runs on one persistent event
loop so the Discogs HTTP session is reused across commands.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .commands import Dispatcher, build_registry
from .commands.search import handle_search
from .commands.tracks import handle_tracks
from .core import ui
from .core.auth import get_credentials
from .core.config import DEFAULT_PER_PAGE, MoozhakSettings, get_settings
from .core.logging_util import SessionLog
from .core.output import OutputWriter
from .plugins.discogs import DiscogsPlugin

logger = logging.getLogger(__name__)


@dataclass
class SessionFlags:
    search_type: Optional[str] = None
    per_page: int = DEFAULT_PER_PAGE
    verbose: bool = False
    tracks_type: str = "master"
    tracks_output: str = "human"


@dataclass
class ExecutionContext:
    discogs: DiscogsPlugin
    flags: SessionFlags
    output: OutputWriter
    session_log: Optional[SessionLog] = None
    update_prompt: Optional[Callable[[], None]] = None

    def log(self, entry: str) -> None:
        if self.session_log is not None:
            self.session_log.write(entry)


def create_session_flags(settings: MoozhakSettings) -> SessionFlags:
    return SessionFlags(
        search_type=settings.default_type,
        per_page=settings.per_page,
        verbose=settings.verbose,
        tracks_type=settings.default_tracks_type,
        tracks_output=settings.default_tracks_output,
    )


def build_prompt(flags: SessionFlags) -> str:
    return f"↳ moozhak [search-type: {flags.search_type or 'all'}] > "


def _prepare(
    token: Optional[str], settings: MoozhakSettings, flags: SessionFlags
) -> ExecutionContext:
    """Create the output tree, the session log and the Discogs client."""
    output = OutputWriter(settings.output_dir)
    output.ensure_dirs()
    session_log = SessionLog(output.logs_dir)
    session_log.init()

    discogs_token = get_credentials("discogs", "token", explicit=token, settings=settings)
    discogs = DiscogsPlugin(token=discogs_token, session_log=session_log)
    return ExecutionContext(discogs=discogs, flags=flags, output=output, session_log=session_log)


def _shutdown(loop: asyncio.AbstractEventLoop, ctx: ExecutionContext) -> None:
    try:
        pending = [t for t in asyncio.all_tasks(loop) if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        loop.run_until_complete(ctx.discogs.close())
        loop.run_until_complete(loop.shutdown_asyncgens())
    finally:
        loop.close()


def _end_by_user(ctx: ExecutionContext) -> None:
    ctx.log("Session ended by user")
    ui.plain("")
    ui.success("Goodbye!")


def start_session(token: Optional[str] = None, settings: Optional[MoozhakSettings] = None) -> int:
    """Run the interactive session until `exit` or an interrupt. Returns the exit code."""
    settings = settings or get_settings()
    flags = create_session_flags(settings)

    ui.divider(heavy=True)
    ui.header("Moozhak CLI - Interactive Session\n")

    if settings.always_clean:
        ui.info("ALWAYS_CLEAN is enabled, cleaning output folder and logs...")
        OutputWriter(settings.output_dir).clean()

    ctx = _prepare(token, settings, flags)
    ctx.log("Session started")
    ctx.log(f"Token: {'configured' if ctx.discogs.is_configured() else 'not configured'}")

    if not ctx.discogs.is_configured():
        ui.warn("No Discogs token configured. Some features may not work.")
        ui.warn("Set DISCOGS_TOKEN in .mzkconfig or environment.\n")
    else:
        ui.success("Discogs token configured")
    if flags.verbose:
        ui.success("Verbose mode enabled\n")

    ui.plain("")
    ui.info("Type 'help' for available commands, 'exit' to quit.")
    ui.divider(heavy=True)

    dispatcher = Dispatcher(build_registry())
    # The prompt is rebuilt before every read, so the refresh hook has nothing to do
    ctx.update_prompt = lambda: None

    loop = asyncio.new_event_loop()
    try:
        while True:
            try:
                line = ui.read_line(build_prompt(flags))
            except (KeyboardInterrupt, EOFError):
                _end_by_user(ctx)
                break

            try:
                if not loop.run_until_complete(dispatcher.execute(line, ctx)):
                    break
            except KeyboardInterrupt:
                _end_by_user(ctx)
                break
            except Exception as e:
                logger.debug("Command failed", exc_info=True)
                ui.error(f"Error: {e}")
                ctx.log(f"Error: {e}")
    finally:
        _shutdown(loop, ctx)
    return 0


async def _close_after(ctx: ExecutionContext, coro) -> None:
    try:
        await coro
    finally:
        await ctx.discogs.close()


def run_search(
    query: str,
    search_type: Optional[str] = None,
    limit: int = DEFAULT_PER_PAGE,
    verbose: bool = False,
    token: Optional[str] = None,
    settings: Optional[MoozhakSettings] = None,
) -> None:
    """Run one search without a session loop; unexpected errors propagate."""
    settings = settings or get_settings()
    flags = SessionFlags(search_type=search_type, per_page=limit, verbose=verbose)
    ctx = _prepare(token, settings, flags)
    ctx.log(f"Command: search {query}")
    asyncio.run(_close_after(ctx, handle_search(query, ctx)))


def run_tracks(
    release_id: str,
    source_type: str = "master",
    output_format: str = "human",
    verbose: bool = False,
    token: Optional[str] = None,
    settings: Optional[MoozhakSettings] = None,
) -> None:
    """Fetch one tracklist without a session loop; unexpected errors propagate."""
    settings = settings or get_settings()
    flags = SessionFlags(verbose=verbose, tracks_type=source_type, tracks_output=output_format)
    ctx = _prepare(token, settings, flags)
    ctx.log(f"Command: tracks {source_type} {release_id}")
    asyncio.run(_close_after(ctx, handle_tracks(source_type, release_id, ctx)))
