import asyncio

import pytest
from conftest import FakeResponse, FakeSession

from moozhak.plugins.reccobeats import (
    ReccoBeatsPlugin,
    format_audio_features,
    format_bpm,
    is_valid_reccobeats_id,
)

TRACK_ID = "8212bab8-5911-48a0-b177-24923ef2329a"
TRACK = {"id": TRACK_ID, "trackTitle": "One More Time", "durationMs": 320000}
FEATURES = {"tempo": 122.5, "energy": 0.876, "danceability": 0.612, "valence": 0.5}


def test_track_with_features_merges():
    session = FakeSession(
        {
            f"/track/{TRACK_ID}/audio-features": FakeResponse(200, FEATURES),
            f"/track/{TRACK_ID}": FakeResponse(200, TRACK),
        }
    )
    result = asyncio.run(ReccoBeatsPlugin(session=session).get_track_with_features(TRACK_ID))
    assert result["trackTitle"] == "One More Time"
    assert result["audio_features"] == FEATURES
    assert len(session.calls) == 2


@pytest.mark.parametrize("features_response", [FakeResponse(500), FakeResponse(429, None, {"Retry-After": "5"})])
def test_track_with_features_partial_failure(features_response):
    session = FakeSession(
        {
            f"/track/{TRACK_ID}/audio-features": features_response,
            f"/track/{TRACK_ID}": FakeResponse(200, TRACK),
        }
    )
    result = asyncio.run(ReccoBeatsPlugin(session=session).get_track_with_features(TRACK_ID))
    assert result["id"] == TRACK_ID
    assert result["audio_features"] is None


def test_track_with_features_track_failure_is_returned():
    session = FakeSession(
        {
            f"/track/{TRACK_ID}/audio-features": FakeResponse(200, FEATURES),
            f"/track/{TRACK_ID}": FakeResponse(401),
        }
    )
    result = asyncio.run(ReccoBeatsPlugin(session=session).get_track_with_features(TRACK_ID))
    assert result == {"error": "auth_required"}


def test_rate_limit_marker():
    session = FakeSession({"/artist/a": FakeResponse(429, None, {"Retry-After": "12"})})
    assert asyncio.run(ReccoBeatsPlugin(session=session).get_artist("a")) == {
        "error": "rate_limited",
        "retry_after": 12,
    }


def test_get_tracks_batches_ids():
    session = FakeSession({"/track": FakeResponse(200, {"content": [TRACK]})})
    plugin = ReccoBeatsPlugin(session=session)
    assert asyncio.run(plugin.get_tracks([])) == {"content": []}
    assert session.calls == []
    asyncio.run(plugin.get_tracks(["a", "b"]))
    assert session.calls[0]["params"] == {"ids": "a,b"}


@pytest.mark.parametrize("tempo,expected", [(None, "N/A"), (120, "120"), (122.5, "123"), (99.4, "99"), (0, "0")])
def test_format_bpm(tempo, expected):
    assert format_bpm(tempo) == expected


def test_format_audio_features():
    assert format_audio_features(FEATURES) == "BPM: 123  Energy: 88%  Danceability: 61%  Mood: 50%"
    assert format_audio_features(FEATURES, "csv") == "123,88,61,50"
    assert format_audio_features(FEATURES, "pipe") == "123 | 88% | 61% | 50%"
    assert format_audio_features(FEATURES, "markdown") == "| 123 | 88% | 61% | 50% |"


def test_format_audio_features_unavailable():
    assert format_audio_features(None) == "Audio features unavailable"
    assert format_audio_features({"error": "rate_limited"}, "csv") == ",,,,"
    assert format_audio_features({"tempo": 100}) == "BPM: 100  Energy: N/A%  Danceability: N/A%  Mood: N/A%"


def test_is_valid_reccobeats_id():
    assert is_valid_reccobeats_id(TRACK_ID)
    assert not is_valid_reccobeats_id("spotify:track:123")
