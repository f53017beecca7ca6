# =======================================================================================
# fingerprint_bridge/utils/__init__.py - Utils Package
# =======================================================================================
from .exceptions import *
from .validators import *
from .protocol import *

__all__ = [
    "BridgeError", "InvalidModeError", "InvalidFingerprintIdError",
    "MissingFieldError", "DeviceNotConnectedError", "FlowStateError",
    "RequestValidator", "LineBuffer", "decode", "encode",
]
