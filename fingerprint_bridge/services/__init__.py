# =======================================================================================
# fingerprint_bridge/services/__init__.py - Services Package
# =======================================================================================
from .sensor_mode import SensorModeManager
from .broadcaster import EventBroadcaster, Subscriber
from .attendance_dispatcher import AttendanceDispatcher, DispatchResult
from .serial_service import SerialLinkManager

__all__ = [
    "SensorModeManager", "EventBroadcaster", "Subscriber",
    "AttendanceDispatcher", "DispatchResult", "SerialLinkManager",
]
