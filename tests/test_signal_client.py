import json

import httpx
import pytest

from qapplet import HostUnavailableError, SignalClient, TransportError
from qapplet.api.schemas import SignalRequest
from qapplet.api.signal_client import DEFAULT_BACKEND_URL, SignalResult


def request_body():
    return SignalRequest(action="DRAW", actionValue="[]", name="Test")


def test_backend_url_default_and_env(monkeypatch):
    monkeypatch.delenv("backendUrl", raising=False)
    assert SignalClient().backend_url == DEFAULT_BACKEND_URL

    monkeypatch.setenv("backendUrl", "http://10.0.0.5:27301/")
    assert SignalClient().backend_url == "http://10.0.0.5:27301"


@pytest.mark.asyncio
async def test_send_posts_json_to_signals_endpoint(client, host):
    result = await client.send(request_body())

    assert result.ok
    assert result.id == 1
    request = host.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://q.test/api/2.0/signals"
    assert json.loads(request.content)["pid"] == "Q_MATRIX"


@pytest.mark.asyncio
async def test_non_2xx_is_a_result_not_an_error(client, host):
    host.post_status = 500
    result = await client.send(request_body())
    assert result.status_code == 500
    assert not result.ok
    assert result.body == {"error": "rejected"}


@pytest.mark.asyncio
async def test_connection_refused_raises_host_unavailable(client, host):
    host.refuse_connections = True
    with pytest.raises(HostUnavailableError) as info:
        await client.send(request_body())
    assert info.value.url == "http://q.test/api/2.0/signals"
    assert isinstance(info.value, TransportError)


@pytest.mark.asyncio
async def test_other_request_errors_raise_transport_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    client = SignalClient("http://q.test", transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError) as info:
        await client.send(request_body())
    assert not isinstance(info.value, HostUnavailableError)
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("target", [17, {"id": 17}, SignalResult(200, {"id": 17})])
async def test_delete_accepts_id_mapping_or_object(client, host, target):
    await client.delete(target)
    assert host.deleted_paths() == ["/api/2.0/signals/17"]


@pytest.mark.asyncio
async def test_delete_without_id_raises(client):
    with pytest.raises(ValueError):
        await client.delete({"name": "no id"})


def test_result_id_only_from_mapping_body():
    assert SignalResult(200, {"id": "abc", "extra": 1}).id == "abc"
    assert SignalResult(200, "plain text").id is None
    assert SignalResult(204).id is None
