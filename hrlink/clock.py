"""Clock abstraction shared by the throttle and the liveness monitor."""

import time
from datetime import datetime


class Clock:
    """Source of monotonic milliseconds and local wall time."""

    def monotonic_ms(self) -> int:
        raise NotImplementedError

    def wall_time(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Clock backed by the interpreter's monotonic timer and local time."""

    def monotonic_ms(self) -> int:
        return time.monotonic_ns() // 1_000_000

    def wall_time(self) -> datetime:
        return datetime.now()
