"""
client.py

Responsibility: Isolate all direct HTTP interaction with the generation service.

This module must be the only place that:
- Knows the service routes (status poll, access request, generation)
- Sends HTTP requests through `requests`
- Decodes response bodies

Retry, cancellation and error classification are not done here; the client
only performs single attempts for `ResilientExecutor`.
"""

from __future__ import annotations

from typing import Any

import requests

from commitart import __version__
from commitart.executor import RequestDescriptor, Response

OP_STATUS = "status"
OP_REQUEST_ACCESS = "request_access"
OP_GENERATE = "generate"

ROUTES: dict[str, tuple[str, str]] = {
    OP_STATUS: ("GET", "/request/status"),
    OP_REQUEST_ACCESS: ("POST", "/request-access"),
    OP_GENERATE: ("POST", "/generate"),
}


class ClientError(RuntimeError):
    pass


class AutomationClient:
    """
    HTTP handle for the generation service.

    Owns a `requests.Session` (connection pool) for its lifetime. Open one per
    process, pass it to whoever needs it, and close it at shutdown, or use it as
    a context manager. A caller-supplied session is used as-is and not closed.
    """

    def __init__(self, api_url: str, *, session: requests.Session | None = None) -> None:
        if not api_url.strip():
            raise ClientError("Service URL is required.")
        self._api_url = api_url.rstrip("/")
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._closed = False

    @property
    def api_url(self) -> str:
        return self._api_url

    def __enter__(self) -> AutomationClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        if not self._closed and self._owns_session:
            self._session.close()
        self._closed = True

    def _headers(self, descriptor: RequestDescriptor) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": f"commitart/{__version__}",
            "Idempotency-Key": descriptor.request_id,
            "X-Retry-Count": str(descriptor.retry_count),
        }

    def dispatch(self, descriptor: RequestDescriptor, timeout: float) -> Response:
        """
        Perform one attempt of `descriptor`.

        GET operations send the payload as query parameters, others as a JSON
        body. Transport exceptions propagate to the executor untouched.
        """
        if self._closed:
            raise ClientError("Client is closed.")
        try:
            method, path = ROUTES[descriptor.operation]
        except KeyError:
            raise ClientError(f"Unknown operation: {descriptor.operation}") from None

        kwargs: dict[str, Any] = {"headers": self._headers(descriptor), "timeout": timeout}
        if method == "GET":
            kwargs["params"] = descriptor.payload or None
        else:
            kwargs["json"] = descriptor.payload

        r = self._session.request(method, f"{self._api_url}{path}", **kwargs)
        return Response(status_code=r.status_code, data=_decode(r))


def _decode(r: requests.Response) -> Any:
    if r.status_code == 204 or not r.content:
        return None
    try:
        return r.json()
    except ValueError:
        return {"message": r.text}
