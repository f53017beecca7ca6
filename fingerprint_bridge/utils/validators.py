# =======================================================================================
# fingerprint_bridge/utils/validators.py - Validation Helpers
# =======================================================================================
from typing import Any, Optional
from .exceptions import InvalidFingerprintIdError, MissingFieldError
from ..config import config


class RequestValidator:
    """Validates control-plane request fields."""

    @staticmethod
    def require_fingerprint_id(value: Any, max_id: Optional[int] = None) -> int:
        """Return value as a template slot number or raise."""
        if value is None or value == "":
            raise MissingFieldError("Fingerprint ID required")

        if isinstance(value, bool):
            raise InvalidFingerprintIdError("Fingerprint ID must be an integer")

        try:
            fingerprint_id = int(value)
        except (TypeError, ValueError):
            raise InvalidFingerprintIdError("Fingerprint ID must be an integer")

        if isinstance(value, float) and value != fingerprint_id:
            raise InvalidFingerprintIdError("Fingerprint ID must be an integer")

        upper = max_id if max_id is not None else config.MAX_FINGERPRINT_ID
        if fingerprint_id < 1 or fingerprint_id > upper:
            raise InvalidFingerprintIdError(
                f"Fingerprint ID must be between 1 and {upper}"
            )

        return fingerprint_id

    @staticmethod
    def require_field(value: Any, label: str) -> Any:
        """Raise MissingFieldError when value is empty."""
        if value is None or value == "":
            raise MissingFieldError(f"{label} required")
        return value
