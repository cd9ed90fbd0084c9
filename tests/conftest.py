import pytest

from moozhak.core.config import reset_settings
from moozhak.core.logging_util import SessionLog
from moozhak.core.output import OutputWriter
from moozhak.plugins.discogs import DiscogsPlugin
from moozhak.session import ExecutionContext, SessionFlags


class FakeResponse:
    def __init__(self, status=200, payload=None, headers=None):
        self.status = status
        self.payload = payload
        self.headers = headers or {}

    async def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession.

    `routes` maps a URL substring to a FakeResponse, an exception to raise,
    or a callable ``(url, params) -> FakeResponse``. The longest matching
    key wins; unmatched URLs answer 404.
    """

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []
        self.closed = False

    def get(self, url, params=None, headers=None):
        self.calls.append({"url": url, "params": params, "headers": headers})
        for key in sorted(self.routes, key=len, reverse=True):
            if key in url:
                resp = self.routes[key]
                if isinstance(resp, Exception):
                    raise resp
                return resp(url, params) if callable(resp) else resp
        return FakeResponse(404)

    async def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the real keyring, config files and cwd."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MZK_DISABLE_KEYRING", "1")
    for var in ("DISCOGS_TOKEN", "MZK_DISCOGS_TOKEN", "GETBPM_API_KEY", "MZK_GETBPM_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_ctx(tmp_path):
    def _make(routes=None, flags=None, token="test-token"):
        session = FakeSession(routes)
        output = OutputWriter(tmp_path / "dist")
        output.ensure_dirs()
        session_log = SessionLog(output.logs_dir, stamp="test")
        session_log.init()
        discogs = DiscogsPlugin(token=token, session=session, session_log=session_log)
        prompt_updates = []
        ctx = ExecutionContext(
            discogs=discogs,
            flags=flags or SessionFlags(),
            output=output,
            session_log=session_log,
            update_prompt=lambda: prompt_updates.append(True),
        )
        ctx.prompt_updates = prompt_updates
        ctx.fake_session = session
        return ctx

    return _make
