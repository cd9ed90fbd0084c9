import asyncio

from conftest import FakeResponse, FakeSession

from moozhak.core.ratelimit import MinIntervalGate
from moozhak.plugins.musicbrainz import MusicBrainzPlugin, is_valid_mbid

MBID = "b1a9c0e9-d987-4042-ae91-78d6a3267d69"

URL_LOOKUP = {"id": "url-1"}
URL_RELS = {"relations": [{"type": "discogs"}, {"release": {"id": "rel-1", "title": "Discovery"}}]}
RELEASE = {
    "title": "Discovery",
    "media": [
        {
            "tracks": [
                {
                    "number": "1",
                    "title": "One More Time",
                    "length": 320000,
                    "recording": {"id": "rec-1", "isrcs": ["GBDUW0000053"]},
                },
                {"position": 2, "recording": {"id": "rec-2", "title": "Aerodynamic", "length": 212000}},
            ]
        }
    ],
}


def _plugin(routes):
    return MusicBrainzPlugin(session=FakeSession(routes), gate=MinIntervalGate(0))


def test_is_valid_mbid():
    assert is_valid_mbid(MBID)
    assert is_valid_mbid(MBID.upper())
    assert not is_valid_mbid("not-an-mbid")
    assert not is_valid_mbid("")


def test_isrcs_for_discogs_release():
    plugin = _plugin(
        {
            "/url/url-1": FakeResponse(200, URL_RELS),
            "/url": FakeResponse(200, URL_LOOKUP),
            "/release/rel-1": FakeResponse(200, RELEASE),
        }
    )
    result = asyncio.run(plugin.get_isrcs_for_discogs_release(249504))

    calls = plugin.session.calls
    assert calls[0]["params"] == {"fmt": "json", "resource": "https://www.discogs.com/release/249504"}
    assert calls[1]["params"]["inc"] == "release-rels"
    assert calls[2]["params"]["inc"] == "recordings+isrcs"

    assert result["found"] is True
    assert result["mb_release_id"] == "rel-1"
    assert result["tracks"] == [
        {"position": "1", "title": "One More Time", "duration": 320000, "recording_id": "rec-1", "isrcs": ["GBDUW0000053"]},
        {"position": 2, "title": "Aerodynamic", "duration": 212000, "recording_id": "rec-2", "isrcs": []},
    ]


def test_isrcs_without_linked_release():
    plugin = _plugin(
        {
            "/url/url-1": FakeResponse(200, {"relations": []}),
            "/url": FakeResponse(200, URL_LOOKUP),
        }
    )
    result = asyncio.run(plugin.get_isrcs_for_discogs_release(1))
    assert result == {"found": False, "error": "no_release_linked", "tracks": []}


def test_isrcs_when_url_unknown():
    result = asyncio.run(_plugin({"/url": FakeResponse(404)}).get_isrcs_for_discogs_release(1))
    assert result["found"] is False
    assert result["error"] == "not_found"


def test_service_unavailable_is_rate_limited():
    result = asyncio.run(_plugin({"/recording/x": FakeResponse(503)}).get_recording("x"))
    assert result == {"error": "rate_limited"}


def test_find_track_isrcs_prefers_matching_artist():
    search = {
        "count": 2,
        "recordings": [
            {"id": "cover", "artist-credit": [{"artist": {"name": "Tribute Band"}}]},
            {"id": "orig", "artist-credit": [{"artist": {"name": "Daft Punk"}}]},
        ],
    }
    plugin = _plugin(
        {
            "/recording/orig": FakeResponse(200, {"id": "orig", "title": "One More Time", "isrcs": ["X1"], "length": 1}),
            "/recording": FakeResponse(200, search),
        }
    )
    result = asyncio.run(plugin.find_track_isrcs("daft punk", "One More Time"))
    assert result["found"] is True
    assert result["recording"]["id"] == "orig"
    assert result["recording"]["artist"] == "Daft Punk"
    assert result["isrcs"] == ["X1"]
    assert 'recording:"One More Time" AND artistname:"daft punk"' == plugin.session.calls[0]["params"]["query"]


def test_find_track_isrcs_no_results():
    plugin = _plugin({"/recording": FakeResponse(200, {"recordings": []})})
    assert asyncio.run(plugin.find_track_isrcs("a", "b")) == {"found": False, "error": "no_results", "isrcs": []}


def test_requests_are_spaced_by_the_gate():
    interval = 0.05
    gate = MinIntervalGate(interval)
    plugin = MusicBrainzPlugin(session=FakeSession({"/recording/": FakeResponse(200, {"id": "r"})}), gate=gate)

    async def two_calls():
        loop = asyncio.get_running_loop()
        await plugin.get_recording("a")
        first = loop.time()
        await plugin.get_recording("b")
        return loop.time() - first

    assert asyncio.run(two_calls()) >= interval * 0.9
