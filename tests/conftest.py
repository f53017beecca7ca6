import asyncio
import json
import queue
import time
from typing import Callable, List

import httpx
import pytest
import serial

from fingerprint_bridge.config import Config
from fingerprint_bridge.models.enums import SensorMode
from fingerprint_bridge.services.broadcaster import EventBroadcaster


class FakeSerial:
    """In-memory stand-in for serial.Serial."""

    def __init__(self, port=None, baudrate=9600, timeout=None, write_timeout=None):
        self.port = port
        self.baudrate = baudrate
        self.is_open = True
        self.written: List[bytes] = []
        self.fail_reads = False
        self.fail_writes = False
        self._incoming: "queue.Queue[bytes]" = queue.Queue()

    @property
    def in_waiting(self) -> int:
        return self._incoming.qsize()

    def feed(self, data: bytes) -> None:
        self._incoming.put(data)

    def read(self, size: int = 1) -> bytes:
        if self.fail_reads:
            raise serial.SerialException("device reports readiness to read but returned no data")
        try:
            return self._incoming.get(timeout=0.01)
        except queue.Empty:
            return b""

    def write(self, data: bytes) -> int:
        if self.fail_writes:
            raise serial.SerialTimeoutException("Write timeout")
        self.written.append(data)
        return len(data)

    def close(self) -> None:
        self.is_open = False

    @property
    def lines(self) -> List[str]:
        return [chunk.decode("ascii").rstrip("\n") for chunk in self.written]


class RecordingSubscriber:
    """Reads whatever a broadcaster subscriber has queued so far."""

    def __init__(self, broadcaster: EventBroadcaster, mode: SensorMode = SensorMode.ATTENDANCE):
        self.subscriber = broadcaster.subscribe(mode)

    def frames(self) -> List[str]:
        out = []
        while not self.subscriber.queue.empty():
            item = self.subscriber.queue.get_nowait()
            if item:
                out.append(item)
        return out

    def events(self) -> List[dict]:
        return [json.loads(f[len("data: "):].strip()) for f in self.frames()]


def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


async def async_wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        await asyncio.sleep(0.01)
    return predicate()


@pytest.fixture
def cfg() -> Config:
    c = Config()
    c.SERIAL_PORT = "/dev/ttyFAKE0"
    c.SERIAL_BAUD = 9600
    c.SERIAL_TIMEOUT = 0.01
    c.SERIAL_AUTO_RECONNECT = False
    c.SERIAL_RECONNECT_DELAY = 0.01
    c.API_BASE_URL = "http://hris.test/api"
    c.API_TIMEOUT = 1.0
    c.MAX_FINGERPRINT_ID = 127
    c.SSE_QUEUE_SIZE = 10
    c.SSE_KEEPALIVE_SECONDS = 0.05
    c.CORS_ORIGINS = ["*"]
    return c


@pytest.fixture
def fake_serial() -> FakeSerial:
    return FakeSerial()


@pytest.fixture
def broadcaster() -> EventBroadcaster:
    return EventBroadcaster(queue_size=10, keepalive_seconds=0.05)


def attendance_transport(calls: list) -> httpx.MockTransport:
    """Mock attendance API that accepts every scan and records the requests."""
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {"employee_name": "Jane Doe", "time": "08:01", "action": "CLOCKIN"},
            },
        )
    return httpx.MockTransport(handler)
