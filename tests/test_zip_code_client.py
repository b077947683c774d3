import json

import pytest
import requests

from storefront.domain.errors import ErrorCode, UpstreamUnavailable
from storefront.services.zip_code_client import ZipCodeClient


def _response(status_code, body):
    return _raw_response(status_code, json.dumps(body).encode())


def _raw_response(status_code, content):
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = content
    resp.url = "https://zip.test"
    return resp


@pytest.fixture()
def gateway(monkeypatch):
    """Replaces requests.get; queue responses (or exceptions) in order."""
    calls = []
    replies = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(requests, "get", fake_get)
    return calls, replies


@pytest.fixture()
def zip_client():
    return ZipCodeClient(base_url="https://zip.test/", token="secret", timeout=1.5)


def test_found(gateway, zip_client):
    calls, replies = gateway
    replies.append(
        _response(200, {"zip_code": "73301", "lat": 30.26, "lng": -97.74, "city": "Austin", "state": "TX"})
    )

    assert zip_client.get("73301") == {"city": "Austin", "state": "TX"}
    assert calls == [("https://zip.test/rest/secret/info.json/73301/degrees", 1.5)]


def test_not_found(gateway, zip_client):
    _, replies = gateway
    replies.append(_response(404, {"error_code": 404, "error_msg": 'Zip code "00000" not found.'}))

    assert zip_client.get("00000") is None


def test_other_404_is_upstream_failure(gateway, zip_client):
    _, replies = gateway
    replies.append(_response(404, {"error_code": 404, "error_msg": "Unknown endpoint."}))

    with pytest.raises(UpstreamUnavailable) as exc:
        zip_client.get("00000")
    assert exc.value.code is ErrorCode.UPSTREAM_UNAVAILABLE


def test_client_error_is_upstream_failure(gateway, zip_client):
    _, replies = gateway
    replies.append(_response(401, {"error_code": 401, "error_msg": "Invalid API key."}))

    with pytest.raises(UpstreamUnavailable):
        zip_client.get("73301")


def test_server_error_is_retried(gateway, zip_client):
    calls, replies = gateway
    replies.extend([
        _response(503, {}),
        _response(200, {"city": "Austin", "state": "TX"}),
    ])

    assert zip_client.get("73301") == {"city": "Austin", "state": "TX"}
    assert len(calls) == 2


def test_server_error_gives_up(gateway, zip_client):
    calls, replies = gateway
    replies.append(_response(500, {}))

    with pytest.raises(UpstreamUnavailable):
        zip_client.get("73301")
    assert len(calls) == 3


def test_connection_error(gateway, zip_client):
    calls, replies = gateway
    replies.append(requests.ConnectionError("connection refused"))

    with pytest.raises(UpstreamUnavailable):
        zip_client.get("73301")
    assert len(calls) == 3


def test_timeout(gateway, zip_client):
    _, replies = gateway
    replies.append(requests.Timeout("read timed out"))

    with pytest.raises(UpstreamUnavailable):
        zip_client.get("73301")


@pytest.mark.parametrize(
    "status_code,content",
    [
        (404, b"<html>Not Found</html>"),
        (200, b"<html>maintenance</html>"),
        (200, b'{"zip_code": "73301"}'),
        (200, b'["Austin", "TX"]'),
    ],
)
def test_malformed_body_is_upstream_failure(gateway, zip_client, status_code, content):
    _, replies = gateway
    replies.append(_raw_response(status_code, content))

    with pytest.raises(UpstreamUnavailable) as exc:
        zip_client.get("73301")
    assert exc.value.message == "ZIP code service returned an invalid response"
