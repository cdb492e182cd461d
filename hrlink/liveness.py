"""Liveness monitor: flags the sensor stream as stale after a period of silence."""

import asyncio
import logging
import threading
from typing import Callable, List, Optional

from hrlink.clock import Clock, SystemClock
from hrlink.config import LIVENESS_TICK_MS, STALE_THRESHOLD_MS
from hrlink.models import LivenessStatus

logger = logging.getLogger(__name__)

StatusListener = Callable[[LivenessStatus], None]


class LivenessMonitor:
    """Tracks the time of the last valid reading and derives FRESH/STALE."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        stale_threshold_ms: int = STALE_THRESHOLD_MS,
        tick_interval_ms: int = LIVENESS_TICK_MS,
    ):
        """Initialize the monitor; the creation time counts as the first update."""
        self.clock = clock or SystemClock()
        self.stale_threshold_ms = stale_threshold_ms
        self.tick_interval_ms = tick_interval_ms
        self._lock = threading.Lock()
        self._last_update = self.clock.monotonic_ms()
        self._status = LivenessStatus.FRESH
        self._listeners: List[StatusListener] = []
        self._tick_task: Optional[asyncio.Task] = None

    @property
    def last_update(self) -> int:
        with self._lock:
            return self._last_update

    @property
    def status(self) -> LivenessStatus:
        """Status as of the most recent tick."""
        return self._status

    @property
    def running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def note_reading(self, now: int) -> None:
        """Record a valid reading at ``now``. Never moves the timestamp backwards."""
        with self._lock:
            if now > self._last_update:
                self._last_update = now

    def poll(self, now: Optional[int] = None) -> bool:
        """Return True when more than the stale threshold has passed since the last reading."""
        if now is None:
            now = self.clock.monotonic_ms()
        with self._lock:
            last_update = self._last_update
        return now - last_update > self.stale_threshold_ms

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a callback for status changes. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def check(self, now: Optional[int] = None) -> LivenessStatus:
        """Evaluate staleness once and notify listeners if the status changed."""
        status = LivenessStatus.STALE if self.poll(now) else LivenessStatus.FRESH
        if status != self._status:
            self._status = status
            logger.info("Sensor stream is now %s", status.value)
            for listener in list(self._listeners):
                listener(status)
        return status

    async def start(self) -> None:
        """Start the periodic check task. The start time counts as the first update."""
        if self._tick_task is None:
            with self._lock:
                self._last_update = self.clock.monotonic_ms()
            self._status = LivenessStatus.FRESH
            self._tick_task = asyncio.create_task(self._periodic_check())

    async def stop(self) -> None:
        """Cancel the periodic check task."""
        if self._tick_task:
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
            self._tick_task = None

    async def _periodic_check(self) -> None:
        """Re-evaluate staleness every tick until cancelled."""
        while True:
            self.check()
            await asyncio.sleep(self.tick_interval_ms / 1000)
