from __future__ import annotations

from typing import Any

import pytest
from conftest import FakeHTTPSession, FakeResponse

from commitart.client import OP_GENERATE, OP_STATUS, AutomationClient, ClientError
from commitart.executor import RequestDescriptor


def _ok(method: str, url: str, kwargs: dict[str, Any]) -> FakeResponse:
    return FakeResponse(200, {"success": True})


def test_get_sends_payload_as_query_params() -> None:
    http = FakeHTTPSession(_ok)
    client = AutomationClient("https://art.example.com/api/", session=http)

    response = client.dispatch(RequestDescriptor(OP_STATUS, payload={"username": "octocat"}), 7.5)

    assert response.status_code == 200
    assert response.data == {"success": True}
    [(method, url, kwargs)] = http.calls
    assert method == "GET"
    assert url == "https://art.example.com/api/request/status"
    assert kwargs["params"] == {"username": "octocat"}
    assert kwargs["timeout"] == 7.5
    assert "json" not in kwargs


def test_post_sends_json_and_retry_headers() -> None:
    http = FakeHTTPSession(_ok)
    client = AutomationClient("https://art.example.com/api", session=http)
    descriptor = RequestDescriptor(OP_GENERATE, payload={"repoName": "hi-contribution"})

    client.dispatch(descriptor, 10.0)
    descriptor.retry_count = 1
    client.dispatch(descriptor, 10.0)

    first, second = http.calls
    assert first[0] == "POST"
    assert first[1] == "https://art.example.com/api/generate"
    assert first[2]["json"] == {"repoName": "hi-contribution"}
    assert first[2]["headers"]["Idempotency-Key"] == second[2]["headers"]["Idempotency-Key"] == descriptor.request_id
    assert first[2]["headers"]["X-Retry-Count"] == "0"
    assert second[2]["headers"]["X-Retry-Count"] == "1"


def test_error_bodies_are_decoded() -> None:
    responses = iter(
        [
            FakeResponse(409, {"message": "Repository already exists"}),
            FakeResponse(502, text="<html>Bad Gateway</html>"),
            FakeResponse(204),
        ]
    )
    client = AutomationClient("https://art.example.com/api", session=FakeHTTPSession(lambda m, u, k: next(responses)))

    conflict = client.dispatch(RequestDescriptor(OP_GENERATE), 1.0)
    gateway = client.dispatch(RequestDescriptor(OP_GENERATE), 1.0)
    empty = client.dispatch(RequestDescriptor(OP_GENERATE), 1.0)

    assert conflict.status_code == 409 and conflict.data == {"message": "Repository already exists"}
    assert gateway.status_code == 502 and gateway.data == {"message": "<html>Bad Gateway</html>"}
    assert empty.status_code == 204 and empty.data is None


def test_unknown_operation() -> None:
    client = AutomationClient("https://art.example.com/api", session=FakeHTTPSession(_ok))
    with pytest.raises(ClientError):
        client.dispatch(RequestDescriptor("delete_everything"), 1.0)


def test_lifecycle_only_closes_owned_sessions() -> None:
    borrowed = FakeHTTPSession(_ok)
    with AutomationClient("https://art.example.com/api", session=borrowed) as client:
        client.dispatch(RequestDescriptor(OP_STATUS), 1.0)
    assert not borrowed.closed
    with pytest.raises(ClientError):
        client.dispatch(RequestDescriptor(OP_STATUS), 1.0)

    owned = AutomationClient("https://art.example.com/api")
    owned.close()
    owned.close()


def test_requires_url() -> None:
    with pytest.raises(ClientError):
        AutomationClient("  ")
