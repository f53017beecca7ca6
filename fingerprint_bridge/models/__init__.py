# =======================================================================================
# fingerprint_bridge/models/__init__.py - Models Package
# =======================================================================================
from .schemas import *
from .enums import *
from .commands import *

__all__ = [
    "BroadcastEvent", "ModeRequest", "FingerprintRequest", "ActionResponse",
    "ModeResponse", "HealthResponse", "ErrorResponse", "AttendanceRecord",
    "AttendanceReply", "SensorMode", "ScanAction", "EnrollStatus", "DeviceTag",
    "EventType", "EnrollmentPhase", "VerificationPhase", "ScanEvent",
    "EnrollEvent", "SystemEvent", "ErrorEvent", "Unrecognized", "ParsedCommand",
    "Ack", "Error", "StartEnroll", "CancelEnroll", "DeleteTemplate",
]
