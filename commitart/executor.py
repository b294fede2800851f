"""
executor.py

Responsibility: run one outbound call to a terminal outcome.

`ResilientExecutor.execute()` drives a `RequestDescriptor` through:

    attempting -> resolved
               -> failed      (non-retryable, or retry budget spent)
               -> cancelled   (token cancelled before resolution)
               -> backoff -> attempting

The executor knows nothing about HTTP routes. It is handed a `dispatch`
callable that performs a single attempt and returns a `Response` or raises a
transport exception; classification of failures lives in `errors.py`.

Each attempt runs on a short-lived daemon thread so that the caller can wait
on the descriptor's cancellation token while the call is in flight. Backoff
sleeps wait on the same token.
"""

from __future__ import annotations

import random
import threading
import time
import uuid
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Union

from commitart.errors import Failure, classify_exception, classify_response
from commitart.logging import get_logger
from commitart.notify import Notifier

log = get_logger(__name__)

_POLL_INTERVAL = 0.02


class CancellationToken:
    """Cooperative abort handle shared between a caller and one descriptor."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: str | None = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; return True as soon as the token is cancelled."""
        return self._event.wait(timeout)


@dataclass(frozen=True)
class Response:
    status_code: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class RequestDescriptor:
    """
    Per-call state carried across attempts.

    `request_id` stays fixed for every attempt of the call so the far side can
    deduplicate; `retry_count` is bumped before each re-dispatch. `timeout` and
    `max_retries` override the executor's policy for this call only.
    """

    operation: str
    payload: Any = None
    retryable: bool = True
    suppress_notification: bool = False
    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    timeout: float | None = None
    max_retries: int | None = None
    retry_count: int = 0
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class Resolved:
    response: Response
    ok = True


@dataclass(frozen=True)
class Failed:
    failure: Failure
    ok = False


@dataclass(frozen=True)
class Cancelled:
    reason: str = "cancelled"
    ok = False


Outcome = Union[Resolved, Failed, Cancelled]

Dispatch = Callable[[RequestDescriptor, float], Response]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Timeout and backoff settings.

    delay(n) = initial_delay * 2 ** (n - 1) + uniform(0, jitter), n >= 1
    """

    timeout: float = 10.0
    max_retries: int = 3
    initial_delay: float = 1.0
    jitter: float = 0.1

    def __post_init__(self) -> None:
        # jitter < initial_delay keeps every delay shorter than the next one.
        if self.initial_delay <= 0:
            raise ValueError(f"initial_delay must be > 0, got {self.initial_delay}")
        if not (0 <= self.jitter < self.initial_delay):
            raise ValueError(f"jitter must be in [0, initial_delay), got {self.jitter}")

    def delay_for(self, retry_count: int, rng: random.Random | None = None) -> float:
        base = self.initial_delay * (2 ** (retry_count - 1))
        if self.jitter <= 0:
            return base
        return base + (rng or random).uniform(0, self.jitter)


class ResilientExecutor:
    def __init__(
        self,
        dispatch: Dispatch,
        *,
        policy: RetryPolicy | None = None,
        notifier: Notifier | None = None,
        on_retry: Callable[[RequestDescriptor, Failure, float], None] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._dispatch = dispatch
        self.policy = policy or RetryPolicy()
        self._notifier = notifier
        self._on_retry = on_retry
        self._rng = rng

    def execute(self, descriptor: RequestDescriptor) -> Outcome:
        token = descriptor.cancel_token
        while True:
            if token.cancelled:
                return self._cancelled(descriptor)

            log.debug(
                "request_dispatched",
                operation=descriptor.operation,
                request_id=descriptor.request_id,
                attempt=descriptor.retry_count + 1,
            )
            result = self._attempt(descriptor)
            if result is None or token.cancelled:
                return self._cancelled(descriptor)

            if isinstance(result, Response):
                if result.ok:
                    log.info(
                        "request_resolved",
                        operation=descriptor.operation,
                        status=result.status_code,
                        retries=descriptor.retry_count,
                    )
                    return Resolved(result)
                failure = classify_response(result.status_code, result.data)
            else:
                failure = result

            if not self._should_retry(descriptor, failure):
                return self._failed(descriptor, failure)

            descriptor.retry_count += 1
            delay = self.policy.delay_for(descriptor.retry_count, self._rng)
            log.warning(
                "request_retry_scheduled",
                operation=descriptor.operation,
                retry=descriptor.retry_count,
                delay=round(delay, 3),
                reason=failure.message,
            )
            if self._on_retry is not None:
                self._on_retry(descriptor, failure, delay)
            if token.wait(delay):
                return self._cancelled(descriptor)

    def _should_retry(self, descriptor: RequestDescriptor, failure: Failure) -> bool:
        return descriptor.retryable and failure.transient and descriptor.retry_count < self._budget(descriptor)

    def _budget(self, descriptor: RequestDescriptor) -> int:
        return descriptor.max_retries if descriptor.max_retries is not None else self.policy.max_retries

    def _attempt(self, descriptor: RequestDescriptor) -> Response | Failure | None:
        """Run one dispatch. Returns the response, a classified failure, or None if cancelled mid-flight."""
        timeout = descriptor.timeout if descriptor.timeout is not None else self.policy.timeout
        future: Future[Response] = Future()

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self._dispatch(descriptor, timeout))
            except BaseException as e:  # noqa: BLE001 - handed to the waiting caller
                future.set_exception(e)

        # Daemon, so an abandoned attempt never holds the interpreter open at exit.
        # Its request may still reach the server under the same idempotency key.
        worker = threading.Thread(target=run, name=f"commitart-{descriptor.operation}", daemon=True)
        worker.start()
        deadline = time.monotonic() + timeout
        while not future.done():
            if descriptor.cancel_token.wait(_POLL_INTERVAL):
                return None
            if time.monotonic() >= deadline:
                return classify_exception(TimeoutError(f"no response within {timeout:g}s"))
        try:
            return future.result()
        except Exception as e:  # noqa: BLE001 - classified at the boundary
            return classify_exception(e)

    def _failed(self, descriptor: RequestDescriptor, failure: Failure) -> Failed:
        log.error(
            "request_failed",
            operation=descriptor.operation,
            kind=failure.kind.value,
            status=failure.status_code,
            retries=descriptor.retry_count,
            correlation_id=failure.correlation_id,
        )
        if self._notifier is not None and not descriptor.suppress_notification:
            self._notifier.error(failure.message)
        return Failed(failure)

    def _cancelled(self, descriptor: RequestDescriptor) -> Cancelled:
        reason = descriptor.cancel_token.reason or "cancelled"
        log.info("request_cancelled", operation=descriptor.operation, retries=descriptor.retry_count, reason=reason)
        return Cancelled(reason)
