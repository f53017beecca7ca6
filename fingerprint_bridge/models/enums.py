# =======================================================================================
# fingerprint_bridge/models/enums.py - Enums and Constants
# =======================================================================================
from enum import Enum


class SensorMode(str, Enum):
    """Operating mode of the fingerprint sensor."""
    ATTENDANCE = "ATTENDANCE"
    ENROLLMENT = "ENROLLMENT"


class ScanAction(str, Enum):
    """Attendance action carried by a scan; values are the wire tokens."""
    CLOCK_IN = "CLOCKIN"
    CLOCK_OUT = "CLOCKOUT"


class EnrollStatus(str, Enum):
    """Enrollment progress reported by the device."""
    STARTED = "STARTED"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"


class DeviceTag(str, Enum):
    """Inbound line tags of the device protocol."""
    FINGERPRINT = "FINGERPRINT"
    ENROLL = "ENROLL"
    SYSTEM = "SYSTEM"
    ERROR = "ERROR"


class EventType(str, Enum):
    """Push-channel event types."""
    CONNECTED = "connected"
    FINGERPRINT_SCANNED = "fingerprint_scanned"
    ATTENDANCE = "attendance"
    ATTENDANCE_ERROR = "attendance_error"
    ENROLLMENT = "enrollment"
    CANCELLED = "cancelled"
    MODE_CHANGE = "mode_change"
    SCAN = "scan"
    DELETE = "delete"
    SYSTEM = "system"
    ERROR = "error"
    DEVICE = "device"


class EnrollmentPhase(str, Enum):
    """Client-side enrollment session phases."""
    IDLE = "idle"
    ENROLLING = "enrolling"
    SUCCESS = "success"
    ERROR = "error"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"


class VerificationPhase(str, Enum):
    """Client-side two-factor verification phases."""
    IDLE = "idle"
    SCANNING = "scanning"
    VERIFYING = "verifying"
    SUCCESS = "success"
    ERROR = "error"
