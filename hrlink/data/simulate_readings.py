"""Sensor simulator script for exercising the heart rate forwarder API.

Pushes readings the way a wrist sensor delivers them:
- Irregular intervals between samples
- Occasional 0 bpm "no contact" samples
- Bursts faster than the throttle window
- Silent gaps long enough for the display to go stale
"""

import asyncio
import math
import random
import time
from typing import Tuple

import httpx

# Configuration
BASE_URL = "http://localhost:8000"
READINGS_URL = f"{BASE_URL}/sensor/readings"
PERMISSION_URL = f"{BASE_URL}/sensor/permission"
CURRENT_URL = f"{BASE_URL}/heart-rate/current"
DURATION_SECONDS = 60
BASE_BPM = 72.0
NO_CONTACT_PROBABILITY = 0.05

# Silent gaps: (start_time_offset, duration)
GAP_PATTERNS = [
    (15, 5),  # Gap at 15s, long enough to trip the stale indicator
    (40, 4),
]

# Burst patterns: (start_time_offset, duration, interval_seconds)
BURST_PATTERNS = [
    (25, 3, 0.05),
]


def in_gap(elapsed: float) -> bool:
    """Whether the simulated wrist is away from the sensor."""
    return any(start <= elapsed < start + duration for start, duration in GAP_PATTERNS)


def next_interval(elapsed: float) -> float:
    """Seconds until the next sample."""
    for burst_start, burst_duration, interval in BURST_PATTERNS:
        if burst_start <= elapsed < burst_start + burst_duration:
            return interval
    return random.uniform(0.5, 1.5)


def next_value(elapsed: float) -> float:
    if random.random() < NO_CONTACT_PROBABILITY:
        return 0.0
    return round(BASE_BPM + 8.0 * math.sin(2 * math.pi * elapsed / 60.0) + random.gauss(0, 1.5), 1)


async def push_reading(client: httpx.AsyncClient, value: float) -> Tuple[bool, bool]:
    """Push one sample. Returns (delivered, forwarded)."""
    try:
        response = await client.post(READINGS_URL, json={"value": value})
    except httpx.HTTPError as e:
        print(f"\n[DEBUG] {type(e).__name__}: {str(e)[:200]}")
        return False, False
    if response.status_code != 202:
        print(f"\n[DEBUG] Status {response.status_code}: {response.text[:200]}")
        return False, False
    return True, response.json().get("forwarded", False)


async def simulate() -> None:
    async with httpx.AsyncClient(timeout=httpx.Timeout(5.0, connect=2.0)) as client:
        try:
            health_response = await client.get(f"{BASE_URL}/health", timeout=2.0)
            if health_response.status_code != 200:
                print("ERROR: API health check failed!")
                return
        except httpx.HTTPError:
            print(f"ERROR: Cannot connect to API at {BASE_URL}")
            print("Make sure the server is running: uvicorn hrlink.main:app --reload")
            return

        await client.post(PERMISSION_URL, json={"granted": True})
        print(f"Simulating {DURATION_SECONDS}s of sensor readings...")
        print("-" * 60)

        start = time.monotonic()
        delivered = forwarded = no_contact = 0
        while True:
            elapsed = time.monotonic() - start
            if elapsed >= DURATION_SECONDS:
                break
            if not in_gap(elapsed):
                value = next_value(elapsed)
                if value <= 0:
                    no_contact += 1
                ok, sent = await push_reading(client, value)
                delivered += ok
                forwarded += sent

            display = (await client.get(CURRENT_URL)).json()
            print(
                f"\r{elapsed:5.1f}s | {display['status']:5} | {display['display_text']:40} | "
                f"delivered: {delivered} | forwarded: {forwarded} | no contact: {no_contact}",
                end="",
                flush=True,
            )
            await asyncio.sleep(next_interval(elapsed))

        print()
        print("=" * 60)
        print(f"Samples delivered: {delivered}")
        print(f"Remote writes dispatched: {forwarded}")
        print(f"No-contact samples: {no_contact}")
        print("=" * 60)


if __name__ == "__main__":
    print("Heart Rate Sensor Simulator")
    print("=" * 60)
    asyncio.run(simulate())
