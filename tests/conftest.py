"""
Pytest configuration and shared fixtures for the zm-toolkit test suite.

API payloads mirror the server's JSON shape, where every record is wrapped
one level deep ({"Monitor": {...}}). No test talks to a real server.
"""
import json

import httpx
import pytest

from zm_toolkit.models import Monitor, Zone
from zm_toolkit.registry import EntityResolver, MonitorRegistry
from zm_toolkit.session import ZMSession

API_URL = "https://zm.example.com/zm/api"
PORTAL_URL = "https://zm.example.com/zm"

SQUARE = "0,0 100,0 100,100 0,100"           # area 10000
TRIANGLE = "0,0 0,40 30,0"                   # area 600, counter-clockwise


# ============================================================================
# Sample API payloads
# ============================================================================


def monitor_api_data(mid, name, function="Modect", enabled="1", status="Connected"):
    return {
        "Monitor": {
            "Id": str(mid),
            "Name": name,
            "Function": function,
            "Enabled": enabled,
            "Type": "Ffmpeg",
            "Width": "1920",
            "Height": "1080",
            "MaxFPS": "15.00",
        },
        "Monitor_Status": {"Status": status, "CaptureFPS": "15.0"},
    }


def zone_api_data(zid, monitor_id, name, coords=SQUARE, units="Pixels", **fields):
    zone = {
        "Id": str(zid),
        "MonitorId": str(monitor_id),
        "Name": name,
        "Type": "Active",
        "Units": units,
        "Coords": coords,
        "CheckMethod": "Blobs",
        "MinAlarmPixels": "500",
        "MaxAlarmPixels": "",
    }
    zone.update(fields)
    return {"Zone": zone}


def event_api_data(eid, monitor_id=7, start="2021-01-01 10:00:00", notes="Motion: Driveway", frames=120):
    return {
        "Event": {
            "Id": str(eid),
            "MonitorId": str(monitor_id),
            "Name": f"Event-{eid}",
            "StartTime": start,
            "Notes": notes,
            "Frames": str(frames),
            "AlarmFrames": "12",
            "Length": "10.50",
        }
    }


def events_page(events, page_count, page=1):
    return {"events": events, "pagination": {"page": page, "pageCount": page_count}}


MONITORS_PAYLOAD = {
    "monitors": [
        monitor_api_data(7, "Lawn"),
        monitor_api_data(2, "Patio", function="Record"),
        monitor_api_data(3, "Critters", function="Mocord"),
        monitor_api_data(4, "Garage", function="None"),
        monitor_api_data(5, "Attic", enabled="0", status="NotRunning"),
    ]
}

ZONES_PAYLOAD = {
    "zones": [
        zone_api_data(11, 7, "Driveway", units="Percent", MinAlarmPixels="2500"),
        zone_api_data(12, 7, "Porch", coords=TRIANGLE),
        zone_api_data(21, 2, "Table"),
    ]
}


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def registry():
    monitors = [Monitor.from_api_dict(m) for m in MONITORS_PAYLOAD["monitors"]]
    zones = [Zone.from_api_dict(z) for z in ZONES_PAYLOAD["zones"]]
    for monitor in monitors:
        monitor.attach_zones(z for z in zones if z.monitor_id == monitor.id)
    return MonitorRegistry(monitors)


@pytest.fixture
def resolver(registry):
    return EntityResolver(registry)


@pytest.fixture
def lawn(registry):
    return registry.by_name["Lawn"]


@pytest.fixture
def driveway(lawn):
    return lawn.zones.by_name["Driveway"]


@pytest.fixture
def porch(lawn):
    return lawn.zones.by_name["Porch"]


class FakeSession:
    """Stands in for ZMSession: canned GET answers, recorded calls."""

    def __init__(self, responses=None, post_results=None):
        self.responses = dict(responses or {})
        self.post_results = list(post_results or [])
        self.gets = []
        self.posts = []
        self.last_ok = True
        self.last_error = None

    def api(self, path):
        return f"{API_URL}/{path}"

    def get_json(self, path):
        self.gets.append(path)
        answer = self.responses[path]
        if isinstance(answer, Exception):
            raise answer
        return answer

    def post_form(self, path, fields):
        self.posts.append((path, fields))
        ok = self.post_results.pop(0) if self.post_results else True
        self.last_ok = ok
        self.last_error = None if ok else "POST failed: 500 - boom"
        return ok


class Recorder:
    """An httpx.MockTransport handler that records requests and replays a router."""

    def __init__(self, router):
        self.router = router
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.router(request)


@pytest.fixture
def mock_session():
    """Factory: a real ZMSession wired to an in-memory transport."""
    sessions = []

    def make(router):
        recorder = Recorder(router)
        session = ZMSession(API_URL, PORTAL_URL, transport=httpx.MockTransport(recorder))
        sessions.append(session)
        return session, recorder

    yield make
    for session in sessions:
        session.close()


def json_response(payload, status_code=200):
    return httpx.Response(status_code, content=json.dumps(payload), headers={"content-type": "application/json"})
