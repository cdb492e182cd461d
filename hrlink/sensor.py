"""Heart rate sensor sources and the permission gate in front of them."""

import asyncio
import logging
import math
import random
import time
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

ReadingListener = Callable[[float], Any]
PermissionListener = Callable[[bool], None]


class HeartRateSensor:
    """A source of raw heart rate samples delivered to registered listeners."""

    def __init__(self) -> None:
        self._listeners: List[ReadingListener] = []

    @property
    def subscribed(self) -> bool:
        return bool(self._listeners)

    def subscribe(self, listener: ReadingListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ReadingListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, value: float) -> List[Any]:
        return [listener(value) for listener in list(self._listeners)]

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None


class HttpSensorFeed(HeartRateSensor):
    """Sensor whose samples are pushed in from outside (e.g. over HTTP).

    Samples pushed while nobody is subscribed are dropped, the same way a
    hardware sensor has no effect before its listener is registered.
    """

    def push(self, value: float) -> Optional[bool]:
        """
        Deliver a sample.

        Returns:
            None when there is no subscriber, otherwise whether any listener
            forwarded the sample.
        """
        if not self._listeners:
            return None
        return any(self._emit(value))


class SimulatedHeartRateSensor(HeartRateSensor):
    """Emits synthetic readings at irregular intervals, with contact dropouts."""

    def __init__(
        self,
        base_bpm: float = 72.0,
        amplitude: float = 8.0,
        period_seconds: float = 60.0,
        min_interval: float = 0.5,
        max_interval: float = 1.5,
        no_contact_probability: float = 0.05,
        dropout_probability: float = 0.01,
        dropout_seconds: float = 5.0,
    ) -> None:
        super().__init__()
        self.base_bpm = base_bpm
        self.amplitude = amplitude
        self.period_seconds = period_seconds
        self.min_interval = min_interval
        self.max_interval = max_interval
        self.no_contact_probability = no_contact_probability
        self.dropout_probability = dropout_probability
        self.dropout_seconds = dropout_seconds
        self._task: Optional[asyncio.Task] = None

    def next_value(self, elapsed: float) -> float:
        """Sample for ``elapsed`` seconds into the run; 0.0 means no skin contact."""
        if random.random() < self.no_contact_probability:
            return 0.0
        wave = math.sin(2 * math.pi * elapsed / self.period_seconds)
        return round(self.base_bpm + self.amplitude * wave + random.gauss(0, 1.5), 1)

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            logger.info("Simulated heart rate sensor started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Simulated heart rate sensor stopped")

    async def _run(self) -> None:
        start = time.monotonic()
        while True:
            if random.random() < self.dropout_probability:
                # Wrist moved away: stay silent long enough to go stale
                await asyncio.sleep(self.dropout_seconds)
            self._emit(self.next_value(time.monotonic() - start))
            await asyncio.sleep(random.uniform(self.min_interval, self.max_interval))


class PermissionGate:
    """Holds the answer to the body-sensor permission request."""

    def __init__(self) -> None:
        self.granted: Optional[bool] = None
        self._listeners: List[PermissionListener] = []

    def on_result(self, listener: PermissionListener) -> None:
        self._listeners.append(listener)

    def resolve(self, granted: bool) -> None:
        """Record the permission result and notify listeners."""
        self.granted = granted
        logger.info("Sensor permission %s", "granted" if granted else "denied")
        for listener in list(self._listeners):
            listener(granted)
