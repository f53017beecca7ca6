# =======================================================================================
# fingerprint_bridge/utils/protocol.py - Device Line Protocol Codec
# =======================================================================================
"""
Line protocol between the bridge and the fingerprint sensor board.

Device -> bridge
----------------
FINGERPRINT:<id>[:<ACTION>]   : finger matched template <id>; ACTION is CLOCKIN (default) or CLOCKOUT
ENROLL:<STATUS>[:<id>]        : STARTED | SUCCESS | ERROR | CANCELLED
SYSTEM:<text>                 : free status text
ERROR:<text>                  : device-side error text

Bridge -> device
----------------
OK:<action>:<name>            : attendance recorded
ERROR:<reason>                : attendance rejected
ENROLL:<id>                   : enroll a new template into slot <id>
ENROLL:CANCEL                 : abort enrollment
DELETE:<id>                   : remove template <id>

Every line is ASCII and newline-terminated. Decoding never raises.
"""
import logging
from typing import List, Optional

from ..models.commands import (
    Ack,
    CancelEnroll,
    DeleteTemplate,
    EnrollEvent,
    Error,
    ErrorEvent,
    OutboundCommand,
    ParsedCommand,
    ScanEvent,
    StartEnroll,
    SystemEvent,
    Unrecognized,
)
from ..models.enums import DeviceTag, EnrollStatus, ScanAction

__all__ = ["decode", "encode", "LineBuffer", "ACTION_TOKENS"]

logger = logging.getLogger(__name__)

SEPARATOR = ":"
TERMINATOR = "\n"

ACTION_TOKENS = {
    "CLOCKIN": ScanAction.CLOCK_IN,
    "CLOCK_IN": ScanAction.CLOCK_IN,
    "CLOCKOUT": ScanAction.CLOCK_OUT,
    "CLOCK_OUT": ScanAction.CLOCK_OUT,
}


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except ValueError:
        return None


# ----------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------
def decode(line: str) -> ParsedCommand:
    """Decode one device line into a command variant."""
    raw = line.strip()
    tag, sep, rest = raw.partition(SEPARATOR)
    if not sep:
        return Unrecognized(raw=raw, reason="missing tag separator")

    if tag == DeviceTag.FINGERPRINT.value:
        return _decode_fingerprint(raw, rest)
    if tag == DeviceTag.ENROLL.value:
        return _decode_enroll(raw, rest)
    if tag == DeviceTag.SYSTEM.value:
        return SystemEvent(raw=raw, text=rest)
    if tag == DeviceTag.ERROR.value:
        return ErrorEvent(raw=raw, text=rest)

    return Unrecognized(raw=raw, reason=f"unknown tag {tag!r}")


def _decode_fingerprint(raw: str, rest: str) -> ParsedCommand:
    fields = rest.split(SEPARATOR)
    fingerprint_id = _parse_int(fields[0])
    if fingerprint_id is None:
        return Unrecognized(raw=raw, reason="invalid fingerprint id")

    token = fields[1].strip().upper() if len(fields) > 1 else ""
    if not token:
        return ScanEvent(raw=raw, fingerprint_id=fingerprint_id)

    action = ACTION_TOKENS.get(token)
    if action is None:
        return Unrecognized(raw=raw, reason=f"unknown action {token!r}")
    return ScanEvent(raw=raw, fingerprint_id=fingerprint_id, action=action)


def _decode_enroll(raw: str, rest: str) -> ParsedCommand:
    status_token, _, tail = rest.partition(SEPARATOR)
    try:
        status = EnrollStatus(status_token.strip().upper())
    except ValueError:
        return Unrecognized(raw=raw, reason=f"unknown enroll status {status_token!r}")

    if not tail:
        return EnrollEvent(raw=raw, status=status)

    fingerprint_id = _parse_int(tail)
    if fingerprint_id is not None:
        return EnrollEvent(raw=raw, status=status, fingerprint_id=fingerprint_id)
    return EnrollEvent(raw=raw, status=status, detail=tail)


# ----------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------
def _clean(text: str) -> str:
    """Keep free text on a single line."""
    return " ".join(str(text).splitlines()).strip()


def encode(command: OutboundCommand) -> str:
    """Render an outbound command as a newline-terminated device line."""
    if isinstance(command, Ack):
        body = f"OK:{_clean(command.action)}:{_clean(command.employee_name)}"
    elif isinstance(command, Error):
        body = f"ERROR:{_clean(command.reason)}"
    elif isinstance(command, StartEnroll):
        body = f"ENROLL:{command.fingerprint_id}"
    elif isinstance(command, CancelEnroll):
        body = "ENROLL:CANCEL"
    elif isinstance(command, DeleteTemplate):
        body = f"DELETE:{command.fingerprint_id}"
    else:
        raise TypeError(f"Cannot encode {type(command).__name__}")
    return body + TERMINATOR


# ----------------------------------------------------------------------
# Line buffering
# ----------------------------------------------------------------------
class LineBuffer:
    """
    Accumulates raw serial bytes and yields complete text lines.

    A line that grows past max_length is dropped as a whole: once the cap is
    hit, input is skipped up to and including the next newline.
    """

    def __init__(self, max_length: int = 1024):
        self.max_length = max_length
        self._buffer = bytearray()
        self._discarding = False

    def feed(self, data: bytes) -> List[str]:
        """Append data and return every complete, non-empty line."""
        self._buffer.extend(data)
        lines: List[str] = []

        if self._discarding:
            idx = self._buffer.find(b"\n")
            if idx < 0:
                self._buffer.clear()
                return lines
            del self._buffer[: idx + 1]
            self._discarding = False

        while True:
            idx = self._buffer.find(b"\n")
            if idx < 0:
                break
            chunk = bytes(self._buffer[:idx])
            del self._buffer[: idx + 1]
            if len(chunk) > self.max_length:
                logger.warning("Dropping over-long device line (%d bytes)", len(chunk))
                continue
            text = chunk.decode("ascii", errors="ignore").strip()
            if text:
                lines.append(text)

        if len(self._buffer) > self.max_length:
            logger.warning(
                "Discarding over-long device line (%d bytes without a terminator)", len(self._buffer)
            )
            self._buffer.clear()
            self._discarding = True

        return lines

    def clear(self) -> None:
        self._buffer.clear()
        self._discarding = False

    def __len__(self) -> int:
        return len(self._buffer)
