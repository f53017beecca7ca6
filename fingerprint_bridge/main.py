# =======================================================================================
# fingerprint_bridge/main.py - FastAPI Application Entry Point
# =======================================================================================
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import serial
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Config, config as default_config
from .api.routes.mode import router as mode_router
from .api.routes.enrollment import router as enrollment_router
from .api.routes.scan import router as scan_router
from .api.routes.fingerprint import router as fingerprint_router
from .api.routes.stream import router as stream_router
from .models.enums import EventType, SensorMode
from .models.schemas import HealthResponse
from .services.attendance_dispatcher import AttendanceDispatcher
from .services.broadcaster import EventBroadcaster
from .services.sensor_mode import SensorModeManager
from .services.serial_service import SerialFactory, SerialLinkManager
from .utils.exceptions import BridgeError

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


def create_app(
    cfg: Optional[Config] = None,
    serial_factory: SerialFactory = serial.Serial,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    cfg = cfg or default_config

    mode_manager = SensorModeManager()
    broadcaster = EventBroadcaster(cfg.SSE_QUEUE_SIZE, cfg.SSE_KEEPALIVE_SECONDS)
    http_client = httpx.AsyncClient(
        base_url=cfg.API_BASE_URL, timeout=cfg.API_TIMEOUT, transport=http_transport
    )
    dispatcher = AttendanceDispatcher(http_client, broadcaster)
    serial_link = SerialLinkManager(
        cfg, mode_manager, broadcaster, dispatcher, serial_factory=serial_factory
    )

    def announce_mode(new_mode: SensorMode, old_mode: SensorMode) -> None:
        broadcaster.emit(
            f"Switched to {new_mode.value} mode",
            EventType.MODE_CHANGE.value,
            mode=new_mode,
            previous_mode=old_mode,
        )

    mode_manager.add_listener(announce_mode)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not await serial_link.connect():
            logger.error("Fingerprint bridge running without a sensor")
        logger.info("Fingerprint bridge listening (mode %s)", mode_manager.get_mode().value)
        try:
            yield
        finally:
            logger.info("Shutting down fingerprint bridge")
            serial_link.disconnect()
            broadcaster.close_all()
            await http_client.aclose()

    app = FastAPI(
        title="Fingerprint Bridge",
        version=__version__,
        description="Serial bridge between the fingerprint sensor and the attendance system",
        debug=cfg.API_DEBUG,
        lifespan=lifespan,
    )

    app.state.config = cfg
    app.state.mode_manager = mode_manager
    app.state.broadcaster = broadcaster
    app.state.serial_link = serial_link
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(mode_router, tags=["mode"])
    app.include_router(enrollment_router, tags=["enrollment"])
    app.include_router(scan_router, tags=["scan"])
    app.include_router(fingerprint_router, tags=["fingerprint"])
    app.include_router(stream_router, tags=["stream"])

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(request: Request, exc: BridgeError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": _validation_message(exc)},
        )

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health():
        return HealthResponse(
            success=True,
            status="running",
            clients=broadcaster.client_count,
            mode=mode_manager.get_mode(),
            device_connected=serial_link.is_connected,
        )

    return app


app = create_app()
