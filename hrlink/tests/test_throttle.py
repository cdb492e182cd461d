"""Tests for the fixed-window throttle."""

from hrlink.throttle import ThrottleState, try_acquire


def test_first_send_always_passes():
    """A never-used throttle lets the first send through, even at time zero."""
    state = ThrottleState()
    assert try_acquire(state, now=0, window_ms=10_000)
    assert state.last_sent_time == 0


def test_blocks_inside_window():
    """Sends closer than the window are refused and leave the state alone."""
    state = ThrottleState(last_sent_time=1_000)
    assert not try_acquire(state, now=10_999, window_ms=10_000)
    assert state.last_sent_time == 1_000


def test_passes_at_window_boundary():
    """Exactly one window later is allowed."""
    state = ThrottleState(last_sent_time=1_000)
    assert try_acquire(state, now=11_000, window_ms=10_000)
    assert state.last_sent_time == 11_000
