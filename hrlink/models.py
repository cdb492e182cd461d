"""Pydantic models for sink writes, sensor input and display output."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LivenessStatus(str, Enum):
    """Whether the sensor stream is still delivering valid readings."""

    FRESH = "FRESH"
    STALE = "STALE"


class HeartRateRecord(BaseModel):
    """Payload stored in the remote database for one forwarded reading."""

    bpm: float = Field(..., description="Heart rate in bpm")
    timestamp: str = Field(..., description="Local time label, yyyy-MM-dd_HH:mm:ss")


class SinkWrite(BaseModel):
    """A keyed write request for the remote database."""

    key: str = Field(..., description="Record key (the timestamp label)")
    payload: HeartRateRecord


class SensorReadingRequest(BaseModel):
    """Request model for a raw sensor sample pushed over HTTP.

    No range validation here: non-positive values are legitimate "no contact"
    samples and are filtered by the forwarder.
    """

    value: float = Field(..., description="Raw heart rate sample in bpm")


class PermissionRequest(BaseModel):
    """Result of the body-sensor permission request."""

    granted: bool = Field(..., description="Whether sensor access was granted")


class SessionSnapshot(BaseModel):
    """What the display surface renders on each tick."""

    bpm: Optional[int] = Field(None, description="Latest accepted reading, rounded")
    status: LivenessStatus = Field(..., description="FRESH or STALE")
    display_text: str = Field(..., description="Rendered readout or reconnect prompt")
    permission_granted: bool = Field(..., description="Whether the sensor is subscribed")


class StatusResponse(BaseModel):
    """Response model for sensor input endpoints."""

    status: str = Field(default="accepted", description="Ingestion status")
    forwarded: bool = Field(default=False, description="Whether a remote write was dispatched")
