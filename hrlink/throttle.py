"""Fixed-window throttle for outbound writes."""

from dataclasses import dataclass
from typing import Optional

from hrlink.config import THROTTLE_WINDOW_MS


@dataclass
class ThrottleState:
    """Time of the last forwarded write, in monotonic milliseconds.

    ``None`` means nothing has been sent yet, so the next reading always passes
    regardless of what the clock reads.
    """

    last_sent_time: Optional[int] = None


def try_acquire(state: ThrottleState, now: int, window_ms: int = THROTTLE_WINDOW_MS) -> bool:
    """
    Claim the send slot for ``now`` if the window has elapsed.

    Returns:
        bool: True when the caller may send; ``state`` is advanced to ``now``.
    """
    if state.last_sent_time is not None and now - state.last_sent_time < window_ms:
        return False
    state.last_sent_time = now
    return True
