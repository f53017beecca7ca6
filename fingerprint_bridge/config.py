# =======================================================================================
# fingerprint_bridge/config.py - Configuration Management
# =======================================================================================
import os
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    """Helper to parse boolean environment variables."""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    """Helper to parse comma-separated environment variables."""
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    # API Settings
    API_DEBUG: bool = _env_bool("API_DEBUG")
    BRIDGE_HOST: str = os.getenv("BRIDGE_HOST", "0.0.0.0")
    BRIDGE_PORT: int = int(os.getenv("BRIDGE_PORT", "3001"))
    CORS_ORIGINS: List[str] = _env_list("CORS_ORIGINS", "*")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text").lower()

    # Serial Communication
    SERIAL_PORT: str = os.getenv("FINGERPRINT_PORT", "/dev/ttyACM0")
    SERIAL_BAUD: int = int(os.getenv("FINGERPRINT_BAUD", "9600"))
    SERIAL_TIMEOUT: float = float(os.getenv("SERIAL_TIMEOUT", "1"))
    SERIAL_WRITE_TIMEOUT: float = float(os.getenv("SERIAL_WRITE_TIMEOUT", "1"))
    SERIAL_AUTO_RECONNECT: bool = _env_bool("SERIAL_AUTO_RECONNECT")
    SERIAL_RECONNECT_DELAY: float = float(os.getenv("SERIAL_RECONNECT_DELAY", "3"))
    SERIAL_MAX_LINE_LENGTH: int = int(os.getenv("SERIAL_MAX_LINE_LENGTH", "1024"))

    # Downstream attendance API
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:5000/api")
    API_TIMEOUT: float = float(os.getenv("API_TIMEOUT", "5"))

    # Sensor
    MAX_FINGERPRINT_ID: int = int(os.getenv("MAX_FINGERPRINT_ID", "127"))

    # Push channel
    SSE_QUEUE_SIZE: int = int(os.getenv("SSE_QUEUE_SIZE", "100"))
    SSE_KEEPALIVE_SECONDS: float = float(os.getenv("SSE_KEEPALIVE_SECONDS", "15"))


config = Config()
