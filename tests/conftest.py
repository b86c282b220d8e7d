import io
import json

import httpx
import pytest

from qapplet import BaseApplet, DesktopApp, SignalClient
from qapplet.services.parent_channel import ParentChannel


class FakeHost:
    """
    Stands in for the host signal endpoint behind httpx.MockTransport.

    POST answers {"id": n} with increasing ids, DELETE answers 200.
    """

    def __init__(self):
        self.requests = []
        self.next_id = 1
        self.post_status = 200
        self.refuse_connections = False
        self.fail_deletes = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.refuse_connections:
            raise httpx.ConnectError("Connection refused", request=request)

        self.requests.append(request)

        if request.method == "DELETE":
            if self.fail_deletes:
                raise httpx.ConnectError("Connection refused", request=request)
            return httpx.Response(200)

        if self.post_status >= 300:
            return httpx.Response(self.post_status, json={"error": "rejected"})

        body = {"id": self.next_id}
        self.next_id += 1
        return httpx.Response(self.post_status, json=body)

    def posted(self):
        return [json.loads(r.content) for r in self.requests if r.method == "POST"]

    def deleted_paths(self):
        return [r.url.path for r in self.requests if r.method == "DELETE"]


class RecordingApplet(BaseApplet):
    """Applet whose hooks record calls and return preset values"""

    def __init__(self, result=None):
        super().__init__()
        self.result = result
        self.run_calls = 0
        self.run_error = None
        self.apply_result = True
        self.apply_calls = 0
        self.options_result = None
        self.options_error = None
        self.options_calls = []
        self.shutdown_calls = 0

    async def run(self):
        self.run_calls += 1
        if self.run_error is not None:
            raise self.run_error
        return self.result

    async def apply_config(self):
        self.apply_calls += 1
        return self.apply_result

    async def options(self, field_name, search=None):
        self.options_calls.append((field_name, search))
        if self.options_error is not None:
            raise self.options_error
        return self.options_result

    async def shutdown(self):
        self.shutdown_calls += 1


def root_config(**overrides):
    """Typical host root config, 5x6 at origin (6, 7)"""
    root = {
        "extensionId": "ext-test",
        "geometry": {"width": 5, "height": 6, "origin": {"x": 6, "y": 7}},
        "authorization": {"apiKey": "secret"},
        "storageLocation": "store",
        "applet": {
            "defaults": {"city": "Austin", "units": {"temp": "C", "wind": "kmh"}},
            "user": {"units": {"temp": "F"}},
        },
    }
    root.update(overrides)
    return root


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def client(host):
    return SignalClient("http://q.test", transport=httpx.MockTransport(host.handler))


@pytest.fixture
def channel_output():
    return io.StringIO()


@pytest.fixture
def channel(channel_output):
    return ParentChannel(input_stream=io.StringIO(""), output_stream=channel_output)


@pytest.fixture
def replies(channel_output):
    def _replies():
        return [json.loads(line) for line in channel_output.getvalue().splitlines() if line]
    return _replies


@pytest.fixture
def applet():
    return RecordingApplet()


@pytest.fixture
def make_app(client, channel, tmp_path, monkeypatch):
    """DesktopApp factory wired to the fake host, running inside tmp_path"""
    monkeypatch.chdir(tmp_path)

    def _make(applet, **kwargs):
        kwargs.setdefault("client", client)
        kwargs.setdefault("channel", channel)
        kwargs.setdefault("argv", ["applet"])
        return DesktopApp(applet, **kwargs)

    return _make
