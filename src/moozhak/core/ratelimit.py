import asyncio
import time


class MinIntervalGate:
    """Cooperative gate enforcing a minimum delay between requests.

    `wait()` sleeps until at least `interval` seconds have passed since the
    last recorded request; `mark()` records a request's completion. There is
    no lock: callers issue one request at a time.
    """

    def __init__(self, interval: float) -> None:
        self.interval = float(interval)
        self.last_request = 0.0

    def reset(self) -> None:
        self.last_request = 0.0

    def mark(self) -> None:
        """Record that a request just completed."""
        self.last_request = time.monotonic()

    async def wait(self) -> float:
        """Wait for the gate to open; returns the seconds slept."""
        elapsed = time.monotonic() - self.last_request
        delay = 0.0
        if self.last_request and elapsed < self.interval:
            delay = self.interval - elapsed
            await asyncio.sleep(delay)
        self.last_request = time.monotonic()
        return delay
