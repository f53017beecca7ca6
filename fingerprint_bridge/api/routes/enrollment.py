# =======================================================================================
# fingerprint_bridge/api/routes/enrollment.py - Enrollment Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends
from ...config import Config
from ...models.enums import EventType, SensorMode
from ...models.schemas import ActionResponse, ErrorResponse, FingerprintRequest
from ...services.broadcaster import EventBroadcaster
from ...services.sensor_mode import SensorModeManager
from ...services.serial_service import SerialLinkManager
from ...utils.validators import RequestValidator
from ..dependencies import get_broadcaster, get_config, get_mode_manager, get_serial_link

router = APIRouter()


@router.post("/enroll/start", response_model=ActionResponse, responses={400: {"model": ErrorResponse}})
async def start_enrollment(
    request: FingerprintRequest,
    cfg: Config = Depends(get_config),
    modes: SensorModeManager = Depends(get_mode_manager),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
    link: SerialLinkManager = Depends(get_serial_link),
):
    """Put the sensor in ENROLLMENT mode and ask it to enroll a template."""
    fingerprint_id = RequestValidator.require_fingerprint_id(
        request.fingerprint_id, cfg.MAX_FINGERPRINT_ID
    )

    modes.enable_enrollment_mode()
    await link.start_enrollment(fingerprint_id)
    broadcaster.emit(
        f"Starting enrollment for ID {fingerprint_id}...",
        EventType.ENROLLMENT.value,
        fingerprint_id=fingerprint_id,
    )

    return ActionResponse(
        success=True,
        message="Enrollment command sent to device",
        mode=SensorMode.ENROLLMENT,
        fingerprint_id=fingerprint_id,
    )


@router.post("/enroll/cancel", response_model=ActionResponse)
async def cancel_enrollment(
    modes: SensorModeManager = Depends(get_mode_manager),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
    link: SerialLinkManager = Depends(get_serial_link),
):
    """Abort enrollment and go back to ATTENDANCE regardless of the current mode."""
    await link.cancel_enrollment()
    broadcaster.emit("Enrollment cancelled", EventType.CANCELLED.value)
    modes.enable_attendance_mode()

    return ActionResponse(
        success=True, message="Enrollment cancelled", mode=SensorMode.ATTENDANCE
    )
