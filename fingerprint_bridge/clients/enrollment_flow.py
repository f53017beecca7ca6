# =======================================================================================
# fingerprint_bridge/clients/enrollment_flow.py - Enrollment Session Flow
# =======================================================================================
import logging
from typing import AsyncIterable, List, Optional

from ..models.enums import EnrollStatus, EnrollmentPhase, EventType, SensorMode
from ..models.schemas import BroadcastEvent
from ..utils.exceptions import BridgeError, FlowStateError
from .bridge_client import BridgeClient
from .hris_client import HrisClient

logger = logging.getLogger(__name__)

# Fallback markers for events that carry no structured status
SUCCESS_MARKERS = ("ENROLL:SUCCESS", "Enrollment successful")
ERROR_MARKERS = ("ENROLL:ERROR", "already exists in sensor", "already registered")

DEVICE_EVENT_TYPES = {
    EventType.ENROLLMENT.value,
    EventType.SYSTEM.value,
    EventType.ERROR.value,
}

TERMINAL_PHASES = {EnrollmentPhase.CONFIRMED, EnrollmentPhase.ERROR, EnrollmentPhase.IDLE}


def infer_outcome(event: BroadcastEvent) -> Optional[EnrollStatus]:
    """Work out what the device reported, preferring the structured status."""
    if event.status is not None:
        return event.status
    if event.type not in DEVICE_EVENT_TYPES:
        return None
    if any(marker in event.message for marker in SUCCESS_MARKERS):
        return EnrollStatus.SUCCESS
    if any(marker in event.message for marker in ERROR_MARKERS):
        return EnrollStatus.ERROR
    return None


def clean_error(message: str) -> str:
    return message.replace("ENROLL:ERROR:", "").replace("ERROR:", "").strip() or "Enrollment failed"


class EnrollmentFlow:
    """
    One enrollment session as seen from an operator's browser.

    idle -> enrolling -> success | error -> confirming -> confirmed

    The device outcome comes from the push channel. A successful enrollment
    is confirmed with the backend, after which the sensor is put back in
    ATTENDANCE mode. When confirmation fails the flow stays in `error` and
    retry_confirmation() repeats only the backend call.
    """

    def __init__(self, bridge: BridgeClient, backend: HrisClient, employee_id: int, fingerprint_id: int):
        self.bridge = bridge
        self.backend = backend
        self.employee_id = employee_id
        self.fingerprint_id = fingerprint_id
        self.phase = EnrollmentPhase.IDLE
        self.message = ""
        self.error: Optional[str] = None
        self.device_enrolled = False
        self.status_log: List[BroadcastEvent] = []

    def _fail(self, message: str) -> EnrollmentPhase:
        self.phase = EnrollmentPhase.ERROR
        self.error = message
        logger.warning("Enrollment of fingerprint %s failed: %s", self.fingerprint_id, message)
        return self.phase

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------
    async def start(self) -> EnrollmentPhase:
        if self.phase not in (EnrollmentPhase.IDLE, EnrollmentPhase.ERROR):
            raise FlowStateError(f"Cannot start enrollment while {self.phase.value}")

        self.error = None
        self.device_enrolled = False
        try:
            await self.bridge.require_device()
            await self.bridge.start_enrollment(self.fingerprint_id)
        except BridgeError as e:
            return self._fail(e.message)

        self.phase = EnrollmentPhase.ENROLLING
        self.message = "Place your finger on the sensor"
        return self.phase

    async def cancel(self) -> EnrollmentPhase:
        try:
            await self.bridge.cancel_enrollment()
        except BridgeError as e:
            logger.error("Cancel enrollment failed: %s", e.message)
        self.phase = EnrollmentPhase.IDLE
        self.message = "Enrollment cancelled"
        return self.phase

    async def retry_confirmation(self) -> EnrollmentPhase:
        """Re-issue the confirmation call without enrolling again."""
        if self.phase not in (EnrollmentPhase.ERROR, EnrollmentPhase.SUCCESS):
            raise FlowStateError(f"Nothing to confirm while {self.phase.value}")
        return await self.confirm()

    async def confirm(self) -> EnrollmentPhase:
        """Persist the employee/fingerprint association."""
        # only a template the device reported as stored may be linked
        if not self.device_enrolled:
            raise FlowStateError("Device has not reported a successful enrollment")
        if self.phase not in (EnrollmentPhase.SUCCESS, EnrollmentPhase.ERROR):
            raise FlowStateError(f"Cannot confirm while {self.phase.value}")

        self.phase = EnrollmentPhase.CONFIRMING
        self.error = None
        result = await self.backend.confirm_enrollment(self.employee_id, self.fingerprint_id)
        if not result.get("success"):
            return self._fail(result.get("message") or "Failed to confirm enrollment")

        self.phase = EnrollmentPhase.CONFIRMED
        self.message = "Fingerprint enrolled and saved"
        logger.info(
            "Fingerprint %s confirmed for employee %s", self.fingerprint_id, self.employee_id
        )
        try:
            await self.bridge.set_mode(SensorMode.ATTENDANCE)
        except BridgeError as e:
            logger.error("Could not switch sensor back to ATTENDANCE: %s", e.message)
        return self.phase

    # ------------------------------------------------------------------
    # Push channel
    # ------------------------------------------------------------------
    async def handle_event(self, event: BroadcastEvent) -> EnrollmentPhase:
        self.status_log.append(event)
        if self.phase is not EnrollmentPhase.ENROLLING:
            return self.phase
        if event.fingerprint_id is not None and event.fingerprint_id != self.fingerprint_id:
            return self.phase

        outcome = infer_outcome(event)
        if outcome is EnrollStatus.SUCCESS:
            self.device_enrolled = True
            self.phase = EnrollmentPhase.SUCCESS
            self.message = "Fingerprint enrolled successfully! Saving..."
            return await self.confirm()
        if outcome is EnrollStatus.ERROR:
            return self._fail(clean_error(event.message))
        if outcome is EnrollStatus.CANCELLED:
            self.phase = EnrollmentPhase.IDLE
            self.message = "Enrollment cancelled on the device"
            return self.phase

        self.message = event.message
        return self.phase

    async def run(self, events: AsyncIterable[BroadcastEvent]) -> EnrollmentPhase:
        """Feed events into the flow until it settles."""
        async for event in events:
            await self.handle_event(event)
            if self.phase in TERMINAL_PHASES:
                break
        return self.phase
