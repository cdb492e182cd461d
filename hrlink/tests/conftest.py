"""Shared fixtures: a hand-driven clock and a sink that records writes."""

from datetime import datetime, timedelta
from typing import List

import pytest

from hrlink.clock import Clock
from hrlink.liveness import LivenessMonitor
from hrlink.models import SinkWrite
from hrlink.sink import Sink, SinkWriteError


class ManualClock(Clock):
    """Clock that only moves when a test advances it."""

    def __init__(self, start_ms: int = 0, wall_start: datetime = datetime(2024, 1, 15, 10, 0, 0)):
        self.now = start_ms
        self.wall_start = wall_start

    def monotonic_ms(self) -> int:
        return self.now

    def wall_time(self) -> datetime:
        return self.wall_start + timedelta(milliseconds=self.now)

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingSink(Sink):
    """Sink that keeps every write in memory and can be told to fail."""

    def __init__(self) -> None:
        self.writes: List[SinkWrite] = []
        self.fail = False
        self.closed = False

    async def write(self, write: SinkWrite) -> None:
        self.writes.append(write)
        if self.fail:
            raise SinkWriteError(write.key, "HTTP 503: unavailable")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def monitor(clock: ManualClock) -> LivenessMonitor:
    return LivenessMonitor(clock=clock)
