"""Test doubles shared across test modules."""

import asyncio

from app.services.errors import UpstreamUnavailable

HOUR_MS = 60 * 60 * 1000
START_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z


class FakeClock:
    """Controllable epoch-ms clock."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


class StubSource:
    """Upstream stand-in: returns queued responses, raises queued exceptions."""

    name = "stub upstream"

    def __init__(self, *responses, delay: float = 0.0):
        self.responses = list(responses)
        self.delay = delay
        self.calls: list[dict[str, str]] = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def build_params(self, key: str) -> dict[str, str]:
        return {"key": key}

    async def fetch(self, params: dict[str, str]):
        self.calls.append(params)
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.responses:
            raise UpstreamUnavailable(self.name, "no response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def shape(self, key: str, raw):
        return list(raw)
