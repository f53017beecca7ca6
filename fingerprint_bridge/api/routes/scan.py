# =======================================================================================
# fingerprint_bridge/api/routes/scan.py - Scan Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends
from ...models.enums import EventType, SensorMode
from ...models.schemas import ActionResponse
from ...services.broadcaster import EventBroadcaster
from ...services.sensor_mode import SensorModeManager
from ..dependencies import get_broadcaster, get_mode_manager

router = APIRouter()


@router.post("/scan/start", response_model=ActionResponse)
async def start_scan(
    modes: SensorModeManager = Depends(get_mode_manager),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """Prime the sensor for a scan (used by two-factor login)."""
    if not modes.is_attendance_mode():
        modes.enable_attendance_mode()

    broadcaster.emit(
        "Place your finger on the scanner", EventType.SCAN.value, mode=SensorMode.ATTENDANCE
    )
    return ActionResponse(
        success=True, message="Scanner ready", mode=SensorMode.ATTENDANCE
    )
