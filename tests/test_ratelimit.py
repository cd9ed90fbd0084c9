import asyncio

from moozhak.core import ratelimit
from moozhak.core.parse import is_truthy, parse_leading_int


def test_first_wait_does_not_sleep():
    gate = ratelimit.MinIntervalGate(10)
    assert asyncio.run(gate.wait()) == 0.0
    assert gate.last_request > 0


def test_wait_sleeps_for_the_remaining_interval(monkeypatch):
    now = [100.0]
    slept = []

    async def fake_sleep(delay):
        slept.append(delay)
        now[0] += delay

    monkeypatch.setattr(ratelimit.time, "monotonic", lambda: now[0])
    monkeypatch.setattr(ratelimit.asyncio, "sleep", fake_sleep)

    gate = ratelimit.MinIntervalGate(1.1)
    asyncio.run(gate.wait())
    now[0] += 0.5
    delay = asyncio.run(gate.wait())
    assert abs(delay - 0.6) < 1e-9
    assert slept == [delay]

    now[0] += 5
    assert asyncio.run(gate.wait()) == 0.0


def test_reset():
    gate = ratelimit.MinIntervalGate(1)
    gate.mark()
    gate.reset()
    assert gate.last_request == 0.0


def test_parse_leading_int():
    assert parse_leading_int("15abc") == 15
    assert parse_leading_int("  -4") == -4
    assert parse_leading_int("abc") is None
    assert parse_leading_int(8) == 8
    assert parse_leading_int(True) is None
    assert parse_leading_int(None) is None


def test_is_truthy():
    assert is_truthy("ON") and is_truthy("1") and is_truthy(True)
    assert not is_truthy("off") and not is_truthy(None) and not is_truthy("maybe")
