from __future__ import annotations

import json
import threading
from collections.abc import Callable
from typing import Any

import pytest

from commitart.executor import RequestDescriptor, Response, RetryPolicy
from commitart.notify import RecordingNotifier


class FakeResponse:
    """The slice of `requests.Response` the client reads."""

    def __init__(self, status_code: int, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        if text is not None:
            self.text = text
        else:
            self.text = json.dumps(body) if body is not None else ""
        self.content = self.text.encode("utf-8")

    def json(self) -> Any:
        return json.loads(self.text)


class FakeHTTPSession:
    """
    Stand-in for `requests.Session`.

    `handler(method, url, kwargs)` returns a FakeResponse or raises; every call
    is recorded in `calls`.
    """

    def __init__(self, handler: Callable[[str, str, dict[str, Any]], FakeResponse]) -> None:
        self._handler = handler
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.closed = False
        self._lock = threading.Lock()

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        with self._lock:
            self.calls.append((method, url, kwargs))
        return self._handler(method, url, kwargs)

    def close(self) -> None:
        self.closed = True


class ScriptedDispatch:
    """
    Dispatch callable for ResilientExecutor that replays a script.

    Each script item is a Response, an exception instance (raised), or a
    callable taking the descriptor. The last item repeats once the script runs out.
    """

    def __init__(self, *script: Any) -> None:
        self._script = list(script)
        self.retry_counts: list[int] = []
        self.request_ids: list[str] = []
        self.timeouts: list[float] = []

    @property
    def calls(self) -> int:
        return len(self.retry_counts)

    def __call__(self, descriptor: RequestDescriptor, timeout: float) -> Response:
        index = min(len(self.retry_counts), len(self._script) - 1)
        self.retry_counts.append(descriptor.retry_count)
        self.request_ids.append(descriptor.request_id)
        self.timeouts.append(timeout)
        item = self._script[index]
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(descriptor)
        return item


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def fast_policy() -> RetryPolicy:
    return RetryPolicy(timeout=2.0, max_retries=3, initial_delay=0.01, jitter=0.0)
