"""Monitoring session wiring sensor, permission gate, forwarder and liveness monitor."""

import asyncio
import logging
from typing import Optional

from hrlink.clock import Clock, SystemClock
from hrlink.config import RECONNECT_PROMPT
from hrlink.forwarder import TelemetryForwarder
from hrlink.liveness import LivenessMonitor
from hrlink.models import LivenessStatus, SessionSnapshot
from hrlink.sensor import HeartRateSensor, PermissionGate
from hrlink.sink import Sink

logger = logging.getLogger(__name__)


class MonitorSession:
    """One display session: lives from ``start()`` until ``stop()``."""

    def __init__(
        self,
        sensor: HeartRateSensor,
        sink: Sink,
        clock: Optional[Clock] = None,
        monitor: Optional[LivenessMonitor] = None,
        forwarder: Optional[TelemetryForwarder] = None,
        gate: Optional[PermissionGate] = None,
    ):
        """Initialize the session. The sensor is not subscribed until permission is granted."""
        self.clock = clock or SystemClock()
        self.sensor = sensor
        self.sink = sink
        self.monitor = monitor or LivenessMonitor(clock=self.clock)
        self.forwarder = forwarder or TelemetryForwarder(sink, self.monitor, clock=self.clock)
        self.gate = gate or PermissionGate()
        self.gate.on_result(self.handle_permission_result)
        self._started = False

    @property
    def subscribed(self) -> bool:
        return self.sensor.subscribed

    async def start(self) -> None:
        """Start the liveness tick and the sensor driver, resubscribing if access was already granted."""
        if self._started:
            return
        self.forwarder.bind(asyncio.get_running_loop())
        await self.monitor.start()
        if self.gate.granted:
            self.sensor.subscribe(self.forwarder.accept)
        await self.sensor.start()
        self._started = True
        logger.info("Monitoring session started")

    async def stop(self) -> None:
        """Unsubscribe the sensor, cancel the tick, let in-flight writes finish."""
        self.sensor.unsubscribe(self.forwarder.accept)
        await self.sensor.stop()
        await self.monitor.stop()
        await self.forwarder.drain()
        await self.sink.close()
        self._started = False
        logger.info("Monitoring session stopped")

    def handle_permission_result(self, granted: bool) -> None:
        """Subscribe the forwarder to the sensor once access is granted."""
        if granted:
            self.sensor.subscribe(self.forwarder.accept)
        else:
            self.sensor.unsubscribe(self.forwarder.accept)

    def snapshot(self) -> SessionSnapshot:
        """Current value and staleness, as the display surface renders them."""
        status = self.monitor.status
        reading = self.forwarder.last_reading
        bpm = round(reading) if reading is not None else None

        if status == LivenessStatus.STALE or bpm is None:
            text = RECONNECT_PROMPT
        else:
            text = f"{bpm} BPM"

        return SessionSnapshot(
            bpm=bpm,
            status=status,
            display_text=text,
            permission_granted=bool(self.gate.granted),
        )
