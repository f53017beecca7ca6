# =======================================================================================
# fingerprint_bridge/models/schemas.py - Pydantic Models
# =======================================================================================
from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from .enums import SensorMode, EnrollStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ========== Push channel ==========

class BroadcastEvent(BaseModel):
    """One status event fanned out to every push-channel subscriber."""
    model_config = ConfigDict(frozen=True)

    message: str
    type: str = "info"
    timestamp: datetime = Field(default_factory=utcnow)
    fingerprint_id: Optional[int] = None
    mode: Optional[SensorMode] = None
    previous_mode: Optional[SensorMode] = None
    action: Optional[str] = None
    employee_name: Optional[str] = None
    time: Optional[str] = None
    status: Optional[EnrollStatus] = None
    clients: Optional[int] = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


# ========== Control plane requests ==========

class ModeRequest(BaseModel):
    """Body of POST /mode."""
    mode: Optional[str] = Field(None, description="ATTENDANCE | ENROLLMENT")


class FingerprintRequest(BaseModel):
    """Body of POST /enroll/start and POST /fingerprint/delete."""
    fingerprint_id: Optional[Any] = Field(None, description="Sensor template slot")


# ========== Control plane responses ==========

class ActionResponse(BaseModel):
    success: bool
    message: str
    mode: Optional[SensorMode] = None
    fingerprint_id: Optional[int] = None


class ModeResponse(BaseModel):
    success: bool
    mode: SensorMode
    isEnrollmentMode: bool
    isAttendanceMode: bool


class HealthResponse(BaseModel):
    success: bool
    status: str                 # "running"
    clients: int
    mode: SensorMode
    device_connected: bool


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


# ========== Downstream attendance API ==========

class AttendanceRecord(BaseModel):
    """`data` part of a successful POST /attendance/fingerprint reply."""
    employee_name: str
    time: Optional[str] = None
    action: str


class AttendanceReply(BaseModel):
    success: bool
    message: Optional[str] = None
    data: Optional[AttendanceRecord] = None
