# =======================================================================================
# fingerprint_bridge/clients/bridge_client.py - Control Plane / Push Channel Client
# =======================================================================================
import json
import logging
from typing import Any, AsyncIterator, Dict, Iterable, Iterator, Optional, Union

import httpx
from pydantic import ValidationError

from ..models.enums import SensorMode
from ..models.schemas import BroadcastEvent
from ..utils.exceptions import BridgeError, DeviceNotConnectedError

logger = logging.getLogger(__name__)


def parse_sse_data(lines: Iterable[str]) -> Iterator[str]:
    """Yield the data payload of every complete SSE message in lines."""
    data = []
    for line in lines:
        line = line.rstrip("\r\n")
        if not line:
            if data:
                yield "\n".join(data)
                data = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if field == "data":
            data.append(value[1:] if value.startswith(" ") else value)
    if data:
        yield "\n".join(data)


def parse_event(payload: str) -> Optional[BroadcastEvent]:
    """Parse one SSE data payload; None when it is not a bridge event."""
    try:
        return BroadcastEvent.model_validate(json.loads(payload))
    except (ValueError, ValidationError) as e:
        logger.warning("Ignoring malformed bridge event %r: %s", payload, e)
        return None


class BridgeClient:
    """Async client for the bridge control plane."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_url(cls, base_url: str, timeout: float = 5.0, **kwargs) -> "BridgeClient":
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout, **kwargs))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _call(self, method: str, path: str, json_body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = await self.client.request(method, path, json=json_body)
        except httpx.HTTPError as e:
            raise BridgeError(f"Bridge service not available: {e}")

        try:
            body = response.json()
        except ValueError:
            raise BridgeError(f"Bridge returned HTTP {response.status_code}")

        if response.status_code >= 400 or not body.get("success", False):
            error = BridgeError(body.get("message") or f"Bridge returned HTTP {response.status_code}")
            error.status_code = response.status_code
            raise error
        return body

    # ------------------------------------------------------------------
    # Control plane
    # ------------------------------------------------------------------
    async def health(self) -> Dict[str, Any]:
        return await self._call("GET", "/health")

    async def require_device(self) -> Dict[str, Any]:
        """Raise DeviceNotConnectedError unless the bridge has a sensor attached."""
        body = await self.health()
        if not body.get("device_connected"):
            raise DeviceNotConnectedError("Fingerprint sensor is not connected to the bridge")
        return body

    async def get_mode(self) -> SensorMode:
        body = await self._call("GET", "/mode")
        return SensorMode(body["mode"])

    async def set_mode(self, mode: Union[SensorMode, str]) -> Dict[str, Any]:
        value = mode.value if isinstance(mode, SensorMode) else mode
        return await self._call("POST", "/mode", {"mode": value})

    async def start_enrollment(self, fingerprint_id: int) -> Dict[str, Any]:
        return await self._call("POST", "/enroll/start", {"fingerprint_id": fingerprint_id})

    async def cancel_enrollment(self) -> Dict[str, Any]:
        return await self._call("POST", "/enroll/cancel")

    async def start_scan(self) -> Dict[str, Any]:
        return await self._call("POST", "/scan/start")

    async def delete_fingerprint(self, fingerprint_id: int) -> Dict[str, Any]:
        return await self._call("POST", "/fingerprint/delete", {"fingerprint_id": fingerprint_id})

    # ------------------------------------------------------------------
    # Push channel
    # ------------------------------------------------------------------
    async def events(self, path: str = "/status/stream") -> AsyncIterator[BroadcastEvent]:
        """Stream bridge events until the server closes the connection."""
        async with self.client.stream("GET", path, timeout=None) as response:
            response.raise_for_status()
            data = []
            async for line in response.aiter_lines():
                if line:
                    data.append(line)
                    continue
                for payload in parse_sse_data(data):
                    event = parse_event(payload)
                    if event is not None:
                        yield event
                data = []
