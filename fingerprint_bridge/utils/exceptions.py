# =======================================================================================
# fingerprint_bridge/utils/exceptions.py - Custom Exceptions
# =======================================================================================
class BridgeError(Exception):
    """Base exception for the fingerprint bridge."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class InvalidModeError(BridgeError):
    """Raised when a sensor mode other than ATTENDANCE or ENROLLMENT is requested."""
    status_code = 400

class InvalidFingerprintIdError(BridgeError):
    """Raised when a fingerprint template id is not a usable slot number."""
    status_code = 400

class MissingFieldError(BridgeError):
    """Raised when a required request field is absent."""
    status_code = 400

class DeviceNotConnectedError(BridgeError):
    """Raised by client helpers when the bridge reports no sensor attached."""
    status_code = 503

class FlowStateError(BridgeError):
    """Raised when a client flow operation is called in the wrong phase."""
    status_code = 409
