# =======================================================================================
# fingerprint_bridge/services/attendance_dispatcher.py - Scan -> Attendance API
# =======================================================================================
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from ..models.commands import Ack, Error, ScanEvent
from ..models.enums import EventType
from ..models.schemas import AttendanceReply
from ..utils.protocol import encode
from .broadcaster import EventBroadcaster

logger = logging.getLogger(__name__)

DeviceReply = Callable[[str], Awaitable[bool]]

SERVER_ERROR = "Server error"
ATTENDANCE_PATH = "/attendance/fingerprint"


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one attendance call."""
    success: bool
    reply: str                          # line sent back to the device
    employee_name: Optional[str] = None
    message: Optional[str] = None


class AttendanceDispatcher:
    """
    Turns a recognised scan into one call against the attendance API and
    acknowledges the device with the result.

    Delivery is at-most-once: failures are reported to the device and to the
    push channel, never retried or queued.
    """

    def __init__(self, client: httpx.AsyncClient, broadcaster: EventBroadcaster):
        self.client = client
        self.broadcaster = broadcaster

    async def dispatch(self, scan: ScanEvent, reply: DeviceReply) -> DispatchResult:
        payload = {"fingerprint_id": scan.fingerprint_id, "action": scan.action.value}

        try:
            response = await self.client.post(ATTENDANCE_PATH, json=payload)
        except httpx.HTTPError as e:
            logger.error("Attendance API unreachable for fingerprint %s: %s", scan.fingerprint_id, e)
            return await self._server_error(scan, reply, str(e))

        try:
            body = AttendanceReply.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(
                "Unexpected attendance API reply (HTTP %s): %s", response.status_code, e
            )
            return await self._server_error(scan, reply, f"HTTP {response.status_code}")

        if body.success and body.data is not None:
            return await self._accepted(scan, reply, body)

        if not body.success and body.message:
            return await self._rejected(scan, reply, body.message)

        logger.error("Attendance API reply without data or message (HTTP %s)", response.status_code)
        return await self._server_error(scan, reply, f"HTTP {response.status_code}")

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------
    async def _accepted(self, scan: ScanEvent, reply: DeviceReply, body: AttendanceReply) -> DispatchResult:
        record = body.data
        logger.info(
            "Attendance recorded: %s - %s at %s", record.employee_name, record.action, record.time
        )
        line = encode(Ack(action=record.action, employee_name=record.employee_name))
        await reply(line)
        self.broadcaster.emit(
            f"{record.action}: {record.employee_name} at {record.time}",
            EventType.ATTENDANCE.value,
            fingerprint_id=scan.fingerprint_id,
            action=record.action,
            employee_name=record.employee_name,
            time=record.time,
        )
        return DispatchResult(True, line, employee_name=record.employee_name)

    async def _rejected(self, scan: ScanEvent, reply: DeviceReply, message: str) -> DispatchResult:
        logger.warning("Attendance failed for fingerprint %s: %s", scan.fingerprint_id, message)
        line = encode(Error(reason=message))
        await reply(line)
        self.broadcaster.emit(
            message,
            EventType.ATTENDANCE_ERROR.value,
            fingerprint_id=scan.fingerprint_id,
            action=scan.action.value,
        )
        return DispatchResult(False, line, message=message)

    async def _server_error(self, scan: ScanEvent, reply: DeviceReply, cause: str) -> DispatchResult:
        line = encode(Error(reason=SERVER_ERROR))
        await reply(line)
        self.broadcaster.emit(
            f"Attendance API error: {cause}",
            EventType.ATTENDANCE_ERROR.value,
            fingerprint_id=scan.fingerprint_id,
            action=scan.action.value,
        )
        return DispatchResult(False, line, message=SERVER_ERROR)
