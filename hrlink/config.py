"""Configuration settings for the heart rate telemetry forwarder."""

import os

# Throttle and liveness timing (milliseconds)
THROTTLE_WINDOW_MS = 10_000  # At most one remote write per window
STALE_THRESHOLD_MS = 3_000  # Silence longer than this flips the display to stale
LIVENESS_TICK_MS = 1_000  # How often the liveness monitor re-evaluates

# Remote real-time database
REALTIME_DB_URL = os.getenv("HRLINK_DB_URL", "http://localhost:9000")
SINK_PATH = "heartrate"
SINK_TIMEOUT_SECONDS = 10.0

# Sink keys use local time, second resolution
TIMESTAMP_LABEL_FORMAT = "%Y-%m-%d_%H:%M:%S"

# Sensor source: "http" (readings are POSTed to the API) or "simulated"
SENSOR_MODE = os.getenv("HRLINK_SENSOR_MODE", "http")

# Skip the permission request when access was granted out of band
AUTO_GRANT_PERMISSION = os.getenv("HRLINK_AUTO_GRANT", "false").lower() in ("1", "true", "yes")

# Display
RECONNECT_PROMPT = "Bring your wrist closer to the sensor"

LOG_LEVEL = os.getenv("HRLINK_LOG_LEVEL", "INFO")
