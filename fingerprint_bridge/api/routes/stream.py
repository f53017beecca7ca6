# =======================================================================================
# fingerprint_bridge/api/routes/stream.py - Live Status Push Channel
# =======================================================================================
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from ...services.broadcaster import EventBroadcaster
from ...services.sensor_mode import SensorModeManager
from ..dependencies import get_broadcaster, get_mode_manager

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/status/stream")
@router.get("/events", include_in_schema=False)
async def status_stream(
    request: Request,
    modes: SensorModeManager = Depends(get_mode_manager),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """Server-Sent-Events stream of every bridge status event."""
    subscriber = broadcaster.subscribe(modes.get_mode())
    return StreamingResponse(
        broadcaster.stream(subscriber, request),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
