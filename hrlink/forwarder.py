"""Sample ingest: filters invalid readings and forwards them at a bounded rate."""

import asyncio
import logging
import math
import threading
from typing import Optional, Set

from hrlink.clock import Clock, SystemClock
from hrlink.config import THROTTLE_WINDOW_MS, TIMESTAMP_LABEL_FORMAT
from hrlink.liveness import LivenessMonitor
from hrlink.models import HeartRateRecord, SinkWrite
from hrlink.sink import Sink, SinkWriteError
from hrlink.throttle import ThrottleState, try_acquire

logger = logging.getLogger(__name__)


class TelemetryForwarder:
    """Receives raw sensor samples and forwards at most one per throttle window."""

    def __init__(
        self,
        sink: Sink,
        monitor: LivenessMonitor,
        clock: Optional[Clock] = None,
        throttle_window_ms: int = THROTTLE_WINDOW_MS,
        state: Optional[ThrottleState] = None,
    ):
        self.sink = sink
        self.monitor = monitor
        self.clock = clock or SystemClock()
        self.throttle_window_ms = throttle_window_ms
        self.state = state or ThrottleState()
        self.last_reading: Optional[float] = None
        self._lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Set[asyncio.Future] = set()

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Set the event loop writes are scheduled on (needed for sensor threads)."""
        self._loop = loop

    @property
    def pending(self) -> int:
        return len(self._pending)

    def accept(self, value: float, now: Optional[int] = None) -> bool:
        """
        Process one raw sample.

        Non-positive samples mean the sensor lost contact and are dropped without
        touching any state. Positive samples always refresh the liveness monitor;
        a remote write is dispatched only when the throttle window has elapsed.

        Returns:
            bool: True if a write was dispatched. A write dropped for lack of an
            event loop still uses up the throttle window.
        """
        if not math.isfinite(value) or value <= 0:
            return False
        if now is None:
            now = self.clock.monotonic_ms()

        with self._lock:
            self.last_reading = value
            self.monitor.note_reading(now)
            if not try_acquire(self.state, now, self.throttle_window_ms):
                return False

        label = self.clock.wall_time().strftime(TIMESTAMP_LABEL_FORMAT)
        write = SinkWrite(key=label, payload=HeartRateRecord(bpm=value, timestamp=label))
        logger.debug("Forwarding %.1f bpm as %s", value, label)
        return self._dispatch(write)

    def _dispatch(self, write: SinkWrite) -> bool:
        """Schedule the write on the bound loop without waiting for it. False if there is no loop."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        loop = self._loop or running
        if loop is None:
            logger.error("No event loop bound; dropping write %s", write.key)
            return False

        if loop is running:
            future = loop.create_task(self._send(write))
        else:
            future = asyncio.run_coroutine_threadsafe(self._send(write), loop)

        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return True

    def _discard(self, future) -> None:
        with self._lock:
            self._pending.discard(future)

    async def _send(self, write: SinkWrite) -> None:
        """Await the sink only to log the outcome. Failures are not retried."""
        try:
            await self.sink.write(write)
        except SinkWriteError as e:
            logger.error("Failed to write heart rate %s", write.key, exc_info=e)
        except Exception as e:
            logger.error("Unexpected error writing heart rate %s", write.key, exc_info=e)
        else:
            logger.debug("Heart rate %s written", write.key)

    async def drain(self) -> None:
        """Wait for every dispatched write to finish (used on shutdown and in tests)."""
        while True:
            with self._lock:
                pending = [asyncio.wrap_future(f) for f in self._pending]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
