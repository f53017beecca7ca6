# =======================================================================================
# fingerprint_bridge/services/serial_service.py - Serial Link Manager
# =======================================================================================
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

import serial

from ..config import Config
from ..models.commands import (
    CancelEnroll,
    DeleteTemplate,
    EnrollEvent,
    ErrorEvent,
    ParsedCommand,
    ScanEvent,
    StartEnroll,
    SystemEvent,
    Unrecognized,
)
from ..models.enums import EnrollStatus, EventType
from ..utils.protocol import decode, encode
from ..workers.serial_worker import SerialWorker
from .attendance_dispatcher import AttendanceDispatcher
from .broadcaster import EventBroadcaster
from .sensor_mode import SensorModeManager

logger = logging.getLogger(__name__)

SerialFactory = Callable[..., serial.Serial]


class SerialLinkManager:
    """Owns the one serial connection to the fingerprint sensor board."""

    def __init__(
        self,
        cfg: Config,
        mode_manager: SensorModeManager,
        broadcaster: EventBroadcaster,
        dispatcher: AttendanceDispatcher,
        serial_factory: SerialFactory = serial.Serial,
    ):
        self.port_path = cfg.SERIAL_PORT
        self.baudrate = cfg.SERIAL_BAUD
        self.timeout = cfg.SERIAL_TIMEOUT
        self.write_timeout = cfg.SERIAL_WRITE_TIMEOUT
        self.auto_reconnect = cfg.SERIAL_AUTO_RECONNECT
        self.reconnect_delay = cfg.SERIAL_RECONNECT_DELAY
        self.max_line_length = cfg.SERIAL_MAX_LINE_LENGTH

        self.mode_manager = mode_manager
        self.broadcaster = broadcaster
        self.dispatcher = dispatcher
        self.serial_factory = serial_factory

        self._port: Optional[serial.Serial] = None
        self._worker: Optional[SerialWorker] = None
        self._writer: Optional[ThreadPoolExecutor] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._reconnect_task: Optional["asyncio.Task[None]"] = None
        self._closing = False

    @property
    def is_connected(self) -> bool:
        return self._port is not None and self._port.is_open

    # ------------------------------------------------------------------
    # Connect / Disconnect
    # ------------------------------------------------------------------
    async def connect(self) -> bool:
        """Open the port and start reading; False when the device is absent."""
        if self.is_connected:
            return True
        if not self.port_path:
            logger.warning("FINGERPRINT_PORT not configured; running without a sensor")
            return False

        self._loop = asyncio.get_running_loop()
        self._closing = False
        logger.info("Opening %s @ %s baud", self.port_path, self.baudrate)

        try:
            port = await asyncio.to_thread(self._open_port)
        except (serial.SerialException, OSError, ValueError) as e:
            logger.error("Failed to open serial port %s: %s", self.port_path, e)
            return False

        self._port = port
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="serial-writer")
        self._worker = SerialWorker(
            port,
            on_line=self._line_from_thread,
            on_lost=self._lost_from_thread,
            max_line_length=self.max_line_length,
        )
        self._worker.start()

        logger.info("Fingerprint sensor connected on %s", self.port_path)
        self.broadcaster.emit(
            f"Fingerprint sensor connected on {self.port_path}", EventType.DEVICE.value
        )
        return True

    def _open_port(self) -> serial.Serial:
        return self.serial_factory(
            self.port_path,
            self.baudrate,
            timeout=self.timeout,
            write_timeout=self.write_timeout,
        )

    def disconnect(self) -> None:
        """Stop reading and close the port; safe to call repeatedly."""
        self._closing = True
        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            self._reconnect_task = None
        self._release()

    def _release(self) -> None:
        worker, self._worker = self._worker, None
        if worker is not None:
            worker.stop()

        writer, self._writer = self._writer, None
        if writer is not None:
            writer.shutdown(wait=False)

        port, self._port = self._port, None
        if port is not None and port.is_open:
            try:
                port.close()
                logger.info("Serial port closed")
            except (serial.SerialException, OSError) as e:
                logger.error("Error closing serial port: %s", e)

    # ------------------------------------------------------------------
    # Reader thread hand-off
    # ------------------------------------------------------------------
    def _line_from_thread(self, line: str) -> None:
        if self._loop is None or self._loop.is_closed():
            return
        asyncio.run_coroutine_threadsafe(self.handle_line(line), self._loop)

    def _lost_from_thread(self, error: Exception) -> None:
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._on_device_lost, error)

    def _on_device_lost(self, error: Exception) -> None:
        if self._closing:
            return
        self._release()
        logger.error("Fingerprint sensor lost: %s", error)
        self.broadcaster.emit(f"Fingerprint sensor disconnected: {error}", EventType.DEVICE.value)

        if self.auto_reconnect and self._reconnect_task is None:
            self._reconnect_task = asyncio.ensure_future(self._reconnect())

    async def _reconnect(self) -> None:
        try:
            while not self._closing:
                await asyncio.sleep(self.reconnect_delay)
                if self._closing or await self.connect():
                    return
                logger.info("Reconnect failed; retrying in %ss", self.reconnect_delay)
        finally:
            self._reconnect_task = None

    # ------------------------------------------------------------------
    # Inbound dispatch
    # ------------------------------------------------------------------
    async def handle_line(self, line: str) -> ParsedCommand:
        """Decode one device line and route it."""
        command = decode(line)

        if isinstance(command, ScanEvent):
            await self._on_scan(command)
        elif isinstance(command, EnrollEvent):
            self._on_enroll(command)
        elif isinstance(command, SystemEvent):
            logger.info("System status: %s", command.text)
            self.broadcaster.emit(command.raw, EventType.SYSTEM.value)
        elif isinstance(command, ErrorEvent):
            logger.warning("Device error: %s", command.text)
            self.broadcaster.emit(command.raw, EventType.ERROR.value)
        elif isinstance(command, Unrecognized):
            logger.warning("Ignoring device line %r: %s", command.raw, command.reason)

        return command

    async def _on_scan(self, scan: ScanEvent) -> None:
        logger.info("Fingerprint %s scanned (%s)", scan.fingerprint_id, scan.action.value)
        # UI learns about the scan before the attendance round trip
        self.broadcaster.emit(
            scan.raw,
            EventType.FINGERPRINT_SCANNED.value,
            fingerprint_id=scan.fingerprint_id,
            action=scan.action.value,
        )
        try:
            await self.dispatcher.dispatch(scan, self.send_to_device)
        except Exception:
            logger.exception("Attendance dispatch failed for fingerprint %s", scan.fingerprint_id)

    def _on_enroll(self, event: EnrollEvent) -> None:
        logger.info(
            "Enrollment %s: ID %s", event.status.value,
            event.fingerprint_id if event.fingerprint_id is not None else "N/A",
        )
        self.broadcaster.emit(
            event.raw,
            EventType.ENROLLMENT.value,
            status=event.status,
            fingerprint_id=event.fingerprint_id,
        )
        if event.status is EnrollStatus.CANCELLED and self.mode_manager.is_enrollment_mode():
            self.mode_manager.enable_attendance_mode()

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------
    async def send_to_device(self, message: str) -> bool:
        """Write one line to the device; no-op when the port is closed."""
        port, writer = self._port, self._writer
        if port is None or writer is None or not port.is_open:
            logger.debug("Serial port closed; dropping %r", message.rstrip("\n"))
            return False

        line = message.rstrip("\n") + "\n"
        # one writer thread keeps commands in order and a stalled write off the loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(writer, self._write, port, line)

    def _write(self, port: serial.Serial, line: str) -> bool:
        try:
            port.write(line.encode("ascii", errors="replace"))
        except serial.SerialTimeoutException:
            logger.warning("Serial write timed out; dropping %r", line.rstrip("\n"))
            return False
        except (serial.SerialException, OSError) as e:
            logger.error("Error writing to serial port: %s", e)
            return False

        logger.debug("Sent to device: %s", line.rstrip("\n"))
        return True

    async def start_enrollment(self, fingerprint_id: int) -> bool:
        logger.info("Starting enrollment for fingerprint ID %s", fingerprint_id)
        return await self.send_to_device(encode(StartEnroll(fingerprint_id=fingerprint_id)))

    async def cancel_enrollment(self) -> bool:
        logger.info("Cancelling enrollment")
        return await self.send_to_device(encode(CancelEnroll()))

    async def delete_fingerprint(self, fingerprint_id: int) -> bool:
        logger.info("Deleting fingerprint template %s", fingerprint_id)
        return await self.send_to_device(encode(DeleteTemplate(fingerprint_id=fingerprint_id)))
