# =======================================================================================
# fingerprint_bridge/api/routes/mode.py - Sensor Mode Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends
from ...models.schemas import ActionResponse, ErrorResponse, ModeRequest, ModeResponse
from ...services.sensor_mode import SensorModeManager
from ...utils.validators import RequestValidator
from ..dependencies import get_mode_manager

router = APIRouter()


@router.get("/mode", response_model=ModeResponse)
async def get_mode(modes: SensorModeManager = Depends(get_mode_manager)):
    """Report the current sensor mode."""
    return ModeResponse(
        success=True,
        mode=modes.get_mode(),
        isEnrollmentMode=modes.is_enrollment_mode(),
        isAttendanceMode=modes.is_attendance_mode(),
    )


@router.post("/mode", response_model=ActionResponse, responses={400: {"model": ErrorResponse}})
async def set_mode(request: ModeRequest, modes: SensorModeManager = Depends(get_mode_manager)):
    """Switch the sensor mode; the change is broadcast by the mode listener."""
    RequestValidator.require_field(request.mode, "Mode")
    target = modes.coerce(request.mode)
    modes.set_mode(target)
    return ActionResponse(success=True, message=f"Mode set to {target.value}", mode=target)
