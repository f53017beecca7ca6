# =======================================================================================
# fingerprint_bridge/api/routes/fingerprint.py - Template Management Endpoints
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


@router.post("/fingerprint/delete", response_model=ActionResponse, responses={400: {"model": ErrorResponse}})
async def delete_fingerprint(
    request: FingerprintRequest,
    cfg: Config = Depends(get_config),
    modes: SensorModeManager = Depends(get_mode_manager),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
    link: SerialLinkManager = Depends(get_serial_link),
):
    """Remove a stored template from the sensor."""
    fingerprint_id = RequestValidator.require_fingerprint_id(
        request.fingerprint_id, cfg.MAX_FINGERPRINT_ID
    )

    if not modes.is_attendance_mode():
        modes.enable_attendance_mode()

    await link.delete_fingerprint(fingerprint_id)
    broadcaster.emit(
        f"Delete command sent for fingerprint ID {fingerprint_id}",
        EventType.DELETE.value,
        fingerprint_id=fingerprint_id,
    )

    return ActionResponse(
        success=True,
        message=f"Delete command sent for fingerprint ID {fingerprint_id}",
        mode=SensorMode.ATTENDANCE,
        fingerprint_id=fingerprint_id,
    )
