"""
preview.py

Responsibility: Render a plain-text preview of a pattern and its schedule.

The report is a Jinja2 template rendered with StrictUndefined so a missing
context key fails loudly instead of printing an empty field.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from commitart.grid import width_of
from commitart.schedule import ScheduleEntry, total_commits

DAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

PREVIEW_TEMPLATE = """\
{% for label, row in rows -%}
{{ label }} {{ row }}
{% endfor -%}
{{ width }} weeks | {{ entries }} active days | {{ commits }} commits
{% if first_date -%}
{{ first_date }} .. {{ last_date }}
{% else -%}
(empty pattern)
{% endif -%}
"""


class RenderError(RuntimeError):
    pass


_env = Environment(
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def _context(grid: Sequence[Sequence[int]], schedule: Sequence[ScheduleEntry]) -> dict[str, Any]:
    dates = sorted(entry.date for entry in schedule)
    return {
        "rows": [(label, "".join("#" if cell else "." for cell in row)) for label, row in zip(DAY_LABELS, grid)],
        "width": width_of(grid),
        "entries": len(schedule),
        "commits": total_commits(schedule),
        "first_date": dates[0].isoformat() if dates else "",
        "last_date": dates[-1].isoformat() if dates else "",
    }


def render_preview(grid: Sequence[Sequence[int]], schedule: Sequence[ScheduleEntry], template: str = PREVIEW_TEMPLATE) -> str:
    try:
        return _env.from_string(template).render(**_context(grid, schedule))
    except TemplateError as e:
        raise RenderError("Failed rendering preview") from e
