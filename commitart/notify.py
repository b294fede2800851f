"""
notify.py

Responsibility: user-facing notifications (the terminal equivalent of toasts).

Notifications are separate from logs: logs are for operators, notices are
short sentences meant for the person who asked for the generation.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Protocol, TextIO

from commitart.logging import get_logger

log = get_logger(__name__)


class Notifier(Protocol):
    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LogNotifier:
    """Print notices to a stream and mirror them into the structured log."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def _emit(self, level: str, message: str) -> None:
        stream = self._stream or sys.stderr
        print(f"[{level}] {message}", file=stream)
        log.info("user_notified", notice=level, message=message)

    def info(self, message: str) -> None:
        self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def error(self, message: str) -> None:
        self._emit("error", message)


@dataclass
class RecordingNotifier:
    """Keep notices in memory as (level, message) pairs."""

    notices: list[tuple[str, str]] = field(default_factory=list)

    def info(self, message: str) -> None:
        self.notices.append(("info", message))

    def success(self, message: str) -> None:
        self.notices.append(("success", message))

    def error(self, message: str) -> None:
        self.notices.append(("error", message))

    def messages(self, level: str) -> list[str]:
        return [msg for lvl, msg in self.notices if lvl == level]
