# =======================================================================================
# fingerprint_bridge/models/commands.py - Device Protocol Commands
# =======================================================================================
from typing import Literal, Optional, Union
from pydantic import BaseModel, ConfigDict
from .enums import ScanAction, EnrollStatus


class DeviceCommand(BaseModel):
    """Base for every command decoded from one device line."""
    model_config = ConfigDict(frozen=True)

    raw: str


# ========== Inbound (device -> bridge) ==========

class ScanEvent(DeviceCommand):
    kind: Literal["scan"] = "scan"
    fingerprint_id: int
    action: ScanAction = ScanAction.CLOCK_IN


class EnrollEvent(DeviceCommand):
    kind: Literal["enroll"] = "enroll"
    status: EnrollStatus
    fingerprint_id: Optional[int] = None
    detail: Optional[str] = None


class SystemEvent(DeviceCommand):
    kind: Literal["system"] = "system"
    text: str


class ErrorEvent(DeviceCommand):
    kind: Literal["error"] = "error"
    text: str


class Unrecognized(DeviceCommand):
    kind: Literal["unrecognized"] = "unrecognized"
    reason: str = "unknown tag"


ParsedCommand = Union[ScanEvent, EnrollEvent, SystemEvent, ErrorEvent, Unrecognized]


# ========== Outbound (bridge -> device) ==========

class OutboundCommand(BaseModel):
    model_config = ConfigDict(frozen=True)


class Ack(OutboundCommand):
    """Attendance accepted; the device shows the employee name."""
    action: str
    employee_name: str


class Error(OutboundCommand):
    reason: str


class StartEnroll(OutboundCommand):
    fingerprint_id: int


class CancelEnroll(OutboundCommand):
    pass


class DeleteTemplate(OutboundCommand):
    fingerprint_id: int
