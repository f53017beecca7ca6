# =======================================================================================
# fingerprint_bridge/workers/serial_worker.py - Background Serial Reader
# =======================================================================================
import logging
import threading
import time
from typing import Callable, Optional

import serial

from ..utils.protocol import LineBuffer

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]
LostCallback = Callable[[Exception], None]


class SerialWorker:
    """
    Reads an open serial port on a daemon thread.

    Complete lines go to on_line; a read failure ends the thread and is
    reported once through on_lost. Neither callback may touch shared state
    directly, they are expected to hand work over to the event loop.
    """

    def __init__(
        self,
        port: serial.Serial,
        on_line: LineCallback,
        on_lost: LostCallback,
        max_line_length: int = 1024,
    ):
        self.port = port
        self.on_line = on_line
        self.on_lost = on_lost
        self.buffer = LineBuffer(max_line_length)
        self.running = False
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Start / Stop
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start the reader in a background thread."""
        if self.running:
            return
        self.running = True
        self._thread = threading.Thread(
            target=self._run_loop, name="serial-reader", daemon=True
        )
        self._thread.start()
        logger.debug("Serial reader started")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the reader and wait briefly for the thread to exit."""
        self.running = False
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

        if len(self.buffer):
            logger.debug("Dropping %d bytes of an unfinished device line", len(self.buffer))
        self.buffer.clear()

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def _run_loop(self) -> None:
        while self.running:
            try:
                data = self.port.read(self.port.in_waiting or 1)
            except (serial.SerialException, OSError, TypeError) as e:
                # TypeError: pyserial raises it when the port is closed underneath us
                if self.running:
                    self.running = False
                    logger.error("Serial read failed: %s", e)
                    self.on_lost(e)
                return

            if not data:
                continue

            for line in self.buffer.feed(data):
                logger.debug("Received from device: %s", line)
                try:
                    self.on_line(line)
                except Exception:
                    logger.exception("Error handing off device line %r", line)
                    time.sleep(0.1)
