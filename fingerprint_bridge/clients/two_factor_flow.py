# =======================================================================================
# fingerprint_bridge/clients/two_factor_flow.py - Fingerprint Login Verification
# =======================================================================================
import logging
from typing import Any, AsyncIterable, Dict, Optional

from ..models.enums import EventType, VerificationPhase
from ..models.schemas import BroadcastEvent
from ..utils.exceptions import BridgeError
from .bridge_client import BridgeClient
from .hris_client import HrisClient

logger = logging.getLogger(__name__)


class TwoFactorFlow:
    """Second login factor: wait for a scan and verify it against the user."""

    def __init__(self, bridge: BridgeClient, backend: HrisClient, temp_token: str):
        self.bridge = bridge
        self.backend = backend
        self.temp_token = temp_token
        self.phase = VerificationPhase.IDLE
        self.message = "Place your finger on the scanner"
        self.error: Optional[str] = None
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None

    async def start(self) -> VerificationPhase:
        self.phase = VerificationPhase.SCANNING
        self.message = "Place your finger on the scanner..."
        self.error = None
        try:
            await self.bridge.require_device()
            await self.bridge.start_scan()
        except BridgeError as e:
            self.phase = VerificationPhase.ERROR
            self.error = e.message or "Failed to start fingerprint scanner"
        return self.phase

    async def retry(self) -> VerificationPhase:
        self.phase = VerificationPhase.IDLE
        return await self.start()

    async def handle_event(self, event: BroadcastEvent) -> VerificationPhase:
        if self.phase is not VerificationPhase.SCANNING:
            return self.phase

        if event.type == EventType.FINGERPRINT_SCANNED.value and event.fingerprint_id is not None:
            return await self.verify(event.fingerprint_id)
        if event.type == EventType.SCAN.value:
            self.message = event.message or "Scanning..."
        return self.phase

    async def verify(self, scanned_fingerprint_id: int) -> VerificationPhase:
        self.phase = VerificationPhase.VERIFYING
        self.message = "Verifying fingerprint..."

        result = await self.backend.verify_fingerprint(self.temp_token, scanned_fingerprint_id)
        data = result.get("data") or {}
        if result.get("success") and data.get("token"):
            self.phase = VerificationPhase.SUCCESS
            self.message = "Fingerprint verified! Logging in..."
            self.token = data["token"]
            self.user = data.get("user")
            return self.phase

        self.phase = VerificationPhase.ERROR
        self.error = result.get("message") or "Fingerprint does not match"
        logger.warning("Fingerprint verification failed: %s", self.error)
        return self.phase

    async def run(self, events: AsyncIterable[BroadcastEvent]) -> VerificationPhase:
        async for event in events:
            await self.handle_event(event)
            if self.phase in (VerificationPhase.SUCCESS, VerificationPhase.ERROR):
                break
        return self.phase
