"""
session.py

Responsibility: one user's conversation with the generation service.

`GenerationSession` validates generation input, compiles the pattern into a
schedule, and submits it through `ResilientExecutor`. It keeps at most one
generation in flight: a new submission cancels the previous one first.
Status polls and access requests go through the same executor with their own
retry/notification flags.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from datetime import date
from typing import Any

from commitart.client import OP_GENERATE, OP_REQUEST_ACCESS, OP_STATUS, AutomationClient
from commitart.errors import Failure, FailureKind
from commitart.executor import (
    CancellationToken,
    Failed,
    Outcome,
    RequestDescriptor,
    Resolved,
    ResilientExecutor,
    RetryPolicy,
)
from commitart.grid import YEAR_WEEKS, Grid, compile_text, width_of
from commitart.logging import get_logger
from commitart.notify import Notifier
from commitart.schedule import MAX_INTENSITY, MIN_INTENSITY, ScheduleEntry, compile_schedule, schedule_to_payload

log = get_logger(__name__)

MAX_TEXT_LENGTH = 8


@dataclass(frozen=True)
class GenerationRequest:
    """Everything needed to generate one piece of contribution art."""

    owner: str
    email: str
    github_token: str
    anchor: date
    intensity: int = 1
    text: str = ""
    grid: Grid | None = None
    repo_name: str | None = None

    def pattern(self) -> Grid:
        return self.grid if self.grid is not None else compile_text(self.text)


@dataclass(frozen=True)
class AccountStatus:
    credits: int
    access_requested: bool


def derive_repo_name(text: str) -> str:
    """Slug `text` into a repository name: "Hi There" -> "hi-there-contribution"."""
    return re.sub(r"[^a-z0-9]+", "-", (text or "custom").lower()) + "-contribution"


def _invalid(message: str) -> Failure:
    return Failure(kind=FailureKind.VALIDATION, message=message)


class GenerationSession:
    def __init__(self, client: AutomationClient, notifier: Notifier, *, policy: RetryPolicy | None = None) -> None:
        self._notifier = notifier
        self._executor = ResilientExecutor(client.dispatch, policy=policy, notifier=notifier)
        self._lock = threading.Lock()
        self._active: CancellationToken | None = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._active is not None

    def validate(self, request: GenerationRequest) -> tuple[list[ScheduleEntry] | None, Failure | None]:
        """Compile `request`, or explain why it cannot be submitted."""
        if not request.github_token or not request.email or not request.owner:
            return None, _invalid("GitHub token and email are required. Please sign in again.")
        if request.grid is None and len(request.text) > MAX_TEXT_LENGTH:
            return None, _invalid(f"Text is limited to {MAX_TEXT_LENGTH} characters.")
        if type(request.intensity) is not int or not (MIN_INTENSITY <= request.intensity <= MAX_INTENSITY):
            return None, _invalid(f"Intensity must be between {MIN_INTENSITY} and {MAX_INTENSITY}.")

        grid = request.pattern()
        if width_of(grid) > YEAR_WEEKS:
            return None, _invalid(f"Pattern is wider than {YEAR_WEEKS} weeks.")
        schedule = compile_schedule(grid, request.anchor, request.intensity)
        if not schedule:
            return None, _invalid("Pattern is empty. Enter some text or draw on the grid first.")
        return schedule, None

    def build_payload(self, request: GenerationRequest, schedule: list[ScheduleEntry]) -> dict[str, Any]:
        return {
            "githubToken": request.github_token,
            "repoName": request.repo_name or derive_repo_name(request.text),
            "owner": request.owner,
            "email": request.email,
            "patternData": schedule_to_payload(schedule),
        }

    def submit(self, request: GenerationRequest) -> Outcome:
        schedule, problem = self.validate(request)
        if problem is not None:
            log.warning("generation_rejected", owner=request.owner, reason=problem.message)
            self._notifier.error(problem.message)
            return Failed(problem)

        token = CancellationToken()
        with self._lock:
            if self._active is not None:
                self._active.cancel("superseded")
            self._active = token

        descriptor = RequestDescriptor(
            operation=OP_GENERATE,
            payload=self.build_payload(request, schedule),
            cancel_token=token,
        )
        log.info("generation_submitted", owner=request.owner, entries=len(schedule), request_id=descriptor.request_id)
        try:
            outcome = self._executor.execute(descriptor)
        finally:
            with self._lock:
                if self._active is token:
                    self._active = None

        if isinstance(outcome, Resolved) and _succeeded(outcome):
            self._notifier.success("Art generation triggered! Check your GitHub.")
        return outcome

    def cancel(self) -> bool:
        """Cancel the generation in flight, if any."""
        with self._lock:
            token = self._active
        if token is None:
            return False
        token.cancel("cancelled by user")
        self._notifier.info("Cancelling...")
        return True

    def check_status(self, username: str) -> AccountStatus | None:
        """Silent poll: never retried, never notifies, None when unavailable."""
        if not username:
            return None
        outcome = self._executor.execute(
            RequestDescriptor(
                operation=OP_STATUS,
                payload={"username": username},
                retryable=False,
                suppress_notification=True,
            )
        )
        if not isinstance(outcome, Resolved) or not _succeeded(outcome):
            return None
        data = outcome.response.data
        return AccountStatus(
            credits=int(data.get("credits") or 0),
            access_requested=bool(data.get("accessRequested")),
        )

    def request_access(self, username: str, email: str) -> Outcome:
        outcome = self._executor.execute(
            RequestDescriptor(operation=OP_REQUEST_ACCESS, payload={"username": username, "email": email})
        )
        if isinstance(outcome, Resolved):
            self._notifier.success("Request submitted! Waiting for admin approval.")
        return outcome


def _succeeded(outcome: Resolved) -> bool:
    data = outcome.response.data
    return isinstance(data, dict) and bool(data.get("success"))
