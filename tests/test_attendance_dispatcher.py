import asyncio
import json

import httpx

from fingerprint_bridge.models.commands import ScanEvent
from fingerprint_bridge.models.enums import ScanAction
from fingerprint_bridge.services.attendance_dispatcher import AttendanceDispatcher

from conftest import RecordingSubscriber, attendance_transport


def _dispatcher(broadcaster, handler):
    client = httpx.AsyncClient(
        base_url="http://hris.test/api", transport=httpx.MockTransport(handler)
    )
    return AttendanceDispatcher(client, broadcaster)


def _run(dispatcher, scan):
    sent = []

    async def reply(line):
        sent.append(line)
        return True

    result = asyncio.run(dispatcher.dispatch(scan, reply))
    return result, sent


def test_success_acknowledges_device_with_employee_name(broadcaster):
    calls = []
    client = httpx.AsyncClient(base_url="http://hris.test/api", transport=attendance_transport(calls))
    dispatcher = AttendanceDispatcher(client, broadcaster)
    watcher = RecordingSubscriber(broadcaster)
    watcher.frames()

    result, sent = _run(dispatcher, ScanEvent(raw="FINGERPRINT:7", fingerprint_id=7))

    assert sent == ["OK:CLOCKIN:Jane Doe\n"]
    assert result.success and result.employee_name == "Jane Doe"
    assert len(calls) == 1
    assert calls[0].url.path == "/api/attendance/fingerprint"
    assert json.loads(calls[0].content) == {"fingerprint_id": 7, "action": "CLOCKIN"}

    events = watcher.events()
    assert len(events) == 1
    assert events[0]["type"] == "attendance"
    assert events[0]["employee_name"] == "Jane Doe"


def test_clock_out_action_is_forwarded(broadcaster):
    calls = []
    client = httpx.AsyncClient(base_url="http://hris.test/api", transport=attendance_transport(calls))
    dispatcher = AttendanceDispatcher(client, broadcaster)

    _run(dispatcher, ScanEvent(raw="FINGERPRINT:7:CLOCKOUT", fingerprint_id=7, action=ScanAction.CLOCK_OUT))

    assert json.loads(calls[0].content)["action"] == "CLOCKOUT"


def test_business_failure_is_sent_to_device(broadcaster):
    def handler(request):
        return httpx.Response(404, json={"success": False, "message": "Fingerprint not registered"})

    watcher = RecordingSubscriber(broadcaster)
    watcher.frames()
    result, sent = _run(_dispatcher(broadcaster, handler), ScanEvent(raw="FINGERPRINT:99", fingerprint_id=99))

    assert sent == ["ERROR:Fingerprint not registered\n"]
    assert not result.success
    events = watcher.events()
    assert [e["type"] for e in events] == ["attendance_error"]
    assert events[0]["message"] == "Fingerprint not registered"


def test_unreachable_api_sends_server_error_once(broadcaster):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectTimeout("timed out", request=request)

    watcher = RecordingSubscriber(broadcaster)
    watcher.frames()
    result, sent = _run(_dispatcher(broadcaster, handler), ScanEvent(raw="FINGERPRINT:7", fingerprint_id=7))

    assert sent == ["ERROR:Server error\n"]
    assert result.message == "Server error"
    assert len(calls) == 1
    assert [e["type"] for e in watcher.events()] == ["attendance_error"]


def test_non_json_reply_is_a_server_error(broadcaster):
    def handler(request):
        return httpx.Response(502, text="<html>Bad Gateway</html>")

    _, sent = _run(_dispatcher(broadcaster, handler), ScanEvent(raw="FINGERPRINT:7", fingerprint_id=7))

    assert sent == ["ERROR:Server error\n"]


def test_success_without_data_is_a_server_error(broadcaster):
    def handler(request):
        return httpx.Response(200, json={"success": True})

    _, sent = _run(_dispatcher(broadcaster, handler), ScanEvent(raw="FINGERPRINT:7", fingerprint_id=7))

    assert sent == ["ERROR:Server error\n"]
