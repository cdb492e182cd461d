"""Tests for the monitoring session lifecycle and display state."""

import asyncio

import pytest

from hrlink.config import RECONNECT_PROMPT
from hrlink.models import LivenessStatus
from hrlink.sensor import HttpSensorFeed, SimulatedHeartRateSensor
from hrlink.session import MonitorSession


@pytest.fixture
def feed() -> HttpSensorFeed:
    return HttpSensorFeed()


@pytest.fixture
def session(feed, sink, clock) -> MonitorSession:
    return MonitorSession(sensor=feed, sink=sink, clock=clock)


@pytest.mark.asyncio
async def test_readings_ignored_until_permission_granted(session, feed, sink):
    """Before access is granted the sensor has no listener."""
    await session.start()
    try:
        assert feed.push(72.0) is None
        assert not session.subscribed

        session.gate.resolve(True)
        assert session.subscribed
        assert feed.push(72.0) is True
        await session.forwarder.drain()
    finally:
        await session.stop()

    assert [w.payload.bpm for w in sink.writes] == [72.0]


@pytest.mark.asyncio
async def test_permission_denied_stays_unsubscribed(session, feed, sink, clock):
    """A denied permission leaves the display waiting for the sensor."""
    await session.start()
    try:
        session.gate.resolve(False)
        assert not session.subscribed
        assert feed.push(72.0) is None

        clock.advance(4_000)
        session.monitor.check()
        snapshot = session.snapshot()
    finally:
        await session.stop()

    assert sink.writes == []
    assert snapshot.status == LivenessStatus.STALE
    assert snapshot.display_text == RECONNECT_PROMPT
    assert snapshot.permission_granted is False


@pytest.mark.asyncio
async def test_snapshot_rounds_latest_reading(session, feed, clock):
    await session.start()
    try:
        session.gate.resolve(True)
        feed.push(71.6)
        session.monitor.check()
        snapshot = session.snapshot()
    finally:
        await session.stop()

    assert snapshot.bpm == 72
    assert snapshot.status == LivenessStatus.FRESH
    assert snapshot.display_text == "72 BPM"


def test_snapshot_before_any_reading(session):
    snapshot = session.snapshot()
    assert snapshot.bpm is None
    assert snapshot.display_text == RECONNECT_PROMPT


@pytest.mark.asyncio
async def test_stop_tears_everything_down(session, feed, sink):
    """Stopping unsubscribes the sensor, cancels the tick and closes the sink."""
    await session.start()
    session.gate.resolve(True)
    assert session.monitor.running

    await session.stop()

    assert not session.subscribed
    assert not session.monitor.running
    assert sink.closed


@pytest.mark.asyncio
async def test_simulated_sensor_drives_session(sink, clock):
    """The simulator emits readings into a subscribed session."""
    sensor = SimulatedHeartRateSensor(
        min_interval=0.001, max_interval=0.002, no_contact_probability=0.0, dropout_probability=0.0
    )
    session = MonitorSession(sensor=sensor, sink=sink, clock=clock)
    session.gate.resolve(True)

    await session.start()
    try:
        await asyncio.sleep(0.05)
    finally:
        await session.stop()

    assert session.forwarder.last_reading is not None
    # The clock never advances, so only the first reading is forwarded
    assert len(sink.writes) == 1


def test_simulated_no_contact_sample():
    sensor = SimulatedHeartRateSensor(no_contact_probability=1.0)
    assert sensor.next_value(10.0) == 0.0


def test_simulated_value_near_baseline():
    sensor = SimulatedHeartRateSensor(base_bpm=72.0, amplitude=0.0, no_contact_probability=0.0)
    assert 60.0 < sensor.next_value(10.0) < 84.0


@pytest.mark.asyncio
async def test_push_reports_forwarding_decision(session, feed, clock):
    """The feed returns whether the forwarder dispatched a write."""
    session.gate.resolve(True)
    await session.start()
    try:
        assert feed.push(72.0) is True
        clock.advance(1_000)
        assert feed.push(73.0) is False
        assert feed.push(0.0) is False
    finally:
        await session.stop()


@pytest.mark.asyncio
async def test_restart_resubscribes_when_granted(session, feed, sink, clock):
    """A stopped session picks the sensor back up on restart if access was granted."""
    await session.start()
    session.gate.resolve(True)
    await session.stop()
    assert not session.subscribed

    clock.advance(20_000)
    await session.start()
    try:
        assert session.subscribed
        assert session.monitor.status == LivenessStatus.FRESH
        assert feed.push(70.0) is True
        await session.forwarder.drain()
    finally:
        await session.stop()

    assert [w.payload.bpm for w in sink.writes] == [70.0]
