"""
schedule.py

Responsibility: turn a pixel grid into a dated commit schedule.

Column 0 / row 0 of the grid is anchored to the Sunday on or before the
caller's anchor date. Every lit cell becomes one calendar day carrying
`intensity` commits; blank cells produce nothing.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any

from commitart.errors import ContractViolation
from commitart.grid import validate_grid

MIN_INTENSITY = 1
MAX_INTENSITY = 10


@dataclass(frozen=True)
class ScheduleEntry:
    date: date
    commit_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "commitCount": self.commit_count}


def normalize_anchor(anchor: date | datetime) -> date:
    """
    Return the Sunday on or before `anchor`'s calendar day.

    The day is pinned to 12:00 UTC before stepping back, so no timezone or DST
    offset can move it across midnight. Aware datetimes are converted to UTC
    first; naive ones are taken at face value.
    """
    if isinstance(anchor, datetime):
        if anchor.tzinfo is not None:
            anchor = anchor.astimezone(timezone.utc)
        anchor = anchor.date()
    noon = datetime(anchor.year, anchor.month, anchor.day, 12, 0, 0, tzinfo=timezone.utc)
    # isoweekday: Monday=1 .. Sunday=7, so % 7 gives Sunday=0.
    sunday = noon - timedelta(days=noon.isoweekday() % 7)
    return sunday.date()


def compile_schedule(grid: Sequence[Sequence[int]], anchor: date | datetime, intensity: int) -> list[ScheduleEntry]:
    """
    Compile `grid` into schedule entries, row by row.

    An all-zero grid compiles to an empty list; deciding whether that is
    acceptable is left to the caller.
    """
    if type(intensity) is not int or not (MIN_INTENSITY <= intensity <= MAX_INTENSITY):
        raise ContractViolation(f"Intensity must be an integer in [{MIN_INTENSITY}, {MAX_INTENSITY}], got {intensity!r}")
    validate_grid(grid)

    origin = normalize_anchor(anchor)
    entries: list[ScheduleEntry] = []
    for row, cells in enumerate(grid):
        for col, value in enumerate(cells):
            if not value:
                continue
            day = origin + timedelta(weeks=col, days=row)
            entries.append(ScheduleEntry(date=day, commit_count=intensity))
    return entries


def schedule_to_payload(schedule: Sequence[ScheduleEntry]) -> list[dict[str, Any]]:
    return [entry.to_dict() for entry in schedule]


def total_commits(schedule: Sequence[ScheduleEntry]) -> int:
    return sum(entry.commit_count for entry in schedule)
