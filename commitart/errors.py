"""
errors.py

Responsibility: the failure taxonomy and the single place where remote failures
are classified.

Raw HTTP responses and transport exceptions are turned into a `Failure` here,
once, at the boundary. Everything above this module (executor retry loop,
session, CLI) switches on `Failure.kind` and never re-inspects status codes or
error payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import requests


class ContractViolation(ValueError):
    """Internal misuse of the compilers (malformed grid, out-of-range intensity)."""


class FailureKind(str, Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    PERMISSION = "permission"
    CONFLICT = "conflict"
    TRANSIENT = "transient"


DEFAULT_MESSAGE = "An unexpected error occurred"
NETWORK_MESSAGE = "Network Error: No response from server. Please check your connection."


@dataclass(frozen=True)
class Failure:
    """A classified failure, ready to be retried or shown to the user."""

    kind: FailureKind
    message: str
    status_code: int | None = None
    error_code: str | None = None
    correlation_id: str | None = None

    @property
    def transient(self) -> bool:
        return self.kind is FailureKind.TRANSIENT


def _kind_for_status(status: int) -> FailureKind:
    if status >= 500:
        return FailureKind.TRANSIENT
    if status == 401:
        return FailureKind.AUTH
    if status == 403:
        return FailureKind.PERMISSION
    if status == 409:
        return FailureKind.CONFLICT
    # 400, 422 and any other client fault: the request itself was rejected.
    return FailureKind.VALIDATION


def _user_message(status: int, message: str) -> str:
    if status == 503:
        return f"Service Unavailable: {message}"
    if status >= 500:
        return f"Server Error: {message}"
    if status == 400:
        return f"Validation Error: {message}"
    if status == 401:
        return "Session expired. Please sign in again."
    if status == 403:
        return f"Permission Denied: {message}"
    if status == 409:
        return f"Conflict: {message}"
    return f"Error ({status}): {message}"


def classify_response(status: int, payload: Any) -> Failure:
    """
    Classify a non-2xx response.

    `payload` is the decoded body when it was JSON. Recognized fields:
    `message` (or legacy `error`), `errorCode`, `correlationId`.
    """
    data: dict[str, Any] = payload if isinstance(payload, dict) else {}
    message = str(data.get("message") or data.get("error") or DEFAULT_MESSAGE)
    error_code = data.get("errorCode") or data.get("code")
    correlation_id = data.get("correlationId")

    text = _user_message(status, message)
    if correlation_id:
        text = f"{text} [Req ID: {correlation_id}]"

    return Failure(
        kind=_kind_for_status(status),
        message=text,
        status_code=status,
        error_code=str(error_code) if error_code else None,
        correlation_id=str(correlation_id) if correlation_id else None,
    )


def classify_exception(exc: BaseException) -> Failure:
    """Classify a transport-level exception raised while dispatching a call."""
    if isinstance(exc, requests.Timeout):
        return Failure(kind=FailureKind.TRANSIENT, message=f"Request Timed Out: {exc}")
    if isinstance(exc, (requests.ConnectionError, ConnectionError)):
        return Failure(kind=FailureKind.TRANSIENT, message=NETWORK_MESSAGE)
    if isinstance(exc, TimeoutError):
        return Failure(kind=FailureKind.TRANSIENT, message=f"Request Timed Out: {exc}")
    return Failure(kind=FailureKind.VALIDATION, message=f"Request Failed: {exc}")
