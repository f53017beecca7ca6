# =======================================================================================
# fingerprint_bridge/clients/hris_client.py - Employee Backend Client
# =======================================================================================
import logging
from typing import Any, Dict

import httpx

logger = logging.getLogger(__name__)


class HrisClient:
    """
    Calls into the employee/attendance backend made by the client flows.

    Every method returns the backend's `{success, message, data}` envelope;
    transport failures are folded into the same shape so the flows only have
    one failure path to handle.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_url(cls, base_url: str, timeout: float = 10.0, **kwargs) -> "HrisClient":
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout, **kwargs))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self.client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.error("Backend call %s failed: %s", path, e)
            return {"success": False, "message": "Network error. Please try again."}

        try:
            body = response.json()
        except ValueError:
            return {"success": False, "message": f"Backend returned HTTP {response.status_code}"}

        if not isinstance(body, dict):
            return {"success": False, "message": "Unexpected backend reply"}
        if response.status_code >= 400:
            body.setdefault("message", f"Backend returned HTTP {response.status_code}")
            body["success"] = False
        return body

    async def confirm_enrollment(self, employee_id: int, fingerprint_id: int) -> Dict[str, Any]:
        """Persist the fingerprint-to-employee association."""
        return await self._post(
            "/fingerprint/enroll/confirm",
            {"employee_id": employee_id, "fingerprint_id": fingerprint_id},
        )

    async def verify_fingerprint(self, temp_token: str, scanned_fingerprint_id: int) -> Dict[str, Any]:
        """Second login factor: check the scanned template against the user."""
        return await self._post(
            "/auth/verify-fingerprint",
            {"temp_token": temp_token, "scanned_fingerprint_id": scanned_fingerprint_id},
        )
