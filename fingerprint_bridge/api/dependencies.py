# =======================================================================================
# fingerprint_bridge/api/dependencies.py - FastAPI Dependencies
# =======================================================================================
from fastapi import Request
from ..config import Config
from ..services.broadcaster import EventBroadcaster
from ..services.sensor_mode import SensorModeManager
from ..services.serial_service import SerialLinkManager


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_mode_manager(request: Request) -> SensorModeManager:
    """Dependency to get the process-wide sensor mode."""
    return request.app.state.mode_manager


def get_broadcaster(request: Request) -> EventBroadcaster:
    return request.app.state.broadcaster


def get_serial_link(request: Request) -> SerialLinkManager:
    return request.app.state.serial_link
