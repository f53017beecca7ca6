import asyncio
import json

from fingerprint_bridge.models.enums import SensorMode
from fingerprint_bridge.models.schemas import BroadcastEvent
from fingerprint_bridge.services.broadcaster import KEEPALIVE_FRAME, EventBroadcaster, frame

from conftest import RecordingSubscriber


def _payload(data: str) -> dict:
    assert data.startswith("data: ") and data.endswith("\n\n")
    return json.loads(data[len("data: "):])


def test_new_subscriber_gets_one_connected_event_with_current_mode(broadcaster):
    sub = RecordingSubscriber(broadcaster, SensorMode.ENROLLMENT)

    events = sub.events()

    assert len(events) == 1
    assert events[0]["type"] == "connected"
    assert events[0]["mode"] == "ENROLLMENT"
    assert "timestamp" in events[0]


def test_every_connected_subscriber_gets_exactly_one_copy(broadcaster):
    a = RecordingSubscriber(broadcaster)
    b = RecordingSubscriber(broadcaster)
    a.frames(), b.frames()

    delivered = broadcaster.broadcast(BroadcastEvent(message="hello", type="info"))

    assert delivered == 2
    assert [e["message"] for e in a.events()] == ["hello"]
    assert [e["message"] for e in b.events()] == ["hello"]


def test_unsubscribed_client_gets_nothing(broadcaster):
    gone = RecordingSubscriber(broadcaster)
    stays = RecordingSubscriber(broadcaster)
    gone.frames(), stays.frames()
    broadcaster.unsubscribe(gone.subscriber)

    broadcaster.emit("after", "info")

    assert gone.events() == []
    assert [e["message"] for e in stays.events()] == ["after"]
    assert broadcaster.client_count == 1


def test_stalled_subscriber_is_dropped_without_affecting_others():
    broadcaster = EventBroadcaster(queue_size=2)
    stalled = RecordingSubscriber(broadcaster)  # never drained
    healthy = RecordingSubscriber(broadcaster)

    for i in range(3):
        healthy.frames()
        broadcaster.emit(f"event {i}", "info")

    assert broadcaster.client_count == 1
    assert stalled.subscriber.closed
    assert [e["message"] for e in healthy.events()] == ["event 2"]


def test_optional_fields_omitted_on_the_wire():
    data = frame(BroadcastEvent(message="scan", type="fingerprint_scanned", fingerprint_id=7))
    payload = _payload(data)
    assert payload["fingerprint_id"] == 7
    assert "mode" not in payload
    assert "employee_name" not in payload


def test_stream_yields_frames_and_unsubscribes_on_close(broadcaster):
    async def scenario():
        sub = broadcaster.subscribe(SensorMode.ATTENDANCE)
        broadcaster.emit("first", "info")
        stream = broadcaster.stream(sub)

        connected = await stream.__anext__()
        first = await stream.__anext__()
        keepalive = await stream.__anext__()

        broadcaster.unsubscribe(sub)
        rest = [f async for f in stream]
        return connected, first, keepalive, rest

    connected, first, keepalive, rest = asyncio.run(scenario())

    assert _payload(connected)["type"] == "connected"
    assert _payload(first)["message"] == "first"
    assert keepalive == KEEPALIVE_FRAME
    assert rest == []
    assert broadcaster.client_count == 0


def test_close_all_ends_streams(broadcaster):
    async def scenario():
        sub = broadcaster.subscribe(SensorMode.ATTENDANCE)
        stream = broadcaster.stream(sub)
        await stream.__anext__()

        async def drain():
            return [f async for f in stream]

        task = asyncio.ensure_future(drain())
        await asyncio.sleep(0)
        broadcaster.close_all()
        return await asyncio.wait_for(task, timeout=1)

    assert asyncio.run(scenario()) == []
    assert broadcaster.client_count == 0
