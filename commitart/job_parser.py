"""
job_parser.py

Responsibility: Load and parse a generation job file into a typed model.

A job file is markdown (or plain YAML) describing one piece of art:
- It prefers YAML frontmatter at the top of the file.
- A file that is a bare YAML mapping is accepted as well.
- It can fall back to a tiny "key: value" parser (best-effort).

Example:

    ---
    text: HELLO
    date: 2025-05-15
    intensity: 3
    owner: octocat
    email: octocat@example.com
    api:
      url: https://commit-art.example.com/api
      max_retries: 2
    ---
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from commitart.errors import ContractViolation
from commitart.grid import Grid, grid_from_rows


class JobError(ValueError):
    pass


@dataclass(frozen=True)
class ApiSpec:
    """Per-job overrides for the service connection."""

    url: str | None = None
    timeout: float | None = None
    max_retries: int | None = None


@dataclass(frozen=True)
class Job:
    """Parsed job contents used to compile and submit a pattern."""

    anchor: date
    text: str = ""
    grid: Grid | None = None
    intensity: int = 1
    repo_name: str | None = None
    owner: str = ""
    email: str = ""
    api: ApiSpec = field(default_factory=ApiSpec)


def _parse_yaml_frontmatter(text: str) -> tuple[dict[str, Any] | None, str]:
    """
    If the markdown begins with YAML frontmatter delimited by '---', parse it.
    Returns (frontmatter_dict_or_none, remaining_markdown_text).
    """
    if not text.startswith("---\n"):
        return None, text

    # The closing marker is a line of exactly `---`, or `---` ending the file.
    end = text.find("\n---\n", 3)
    if end != -1:
        rest = text[end + len("\n---\n") :].lstrip("\n")
    elif text.endswith("\n---"):
        end = len(text) - len("\n---")
        rest = ""
    else:
        raise JobError("YAML frontmatter starts with '---' but no closing '---' line was found.")

    fm_text = text[4:end]
    data = _load_yaml(fm_text)
    if not isinstance(data, dict):
        raise JobError("YAML frontmatter must be a mapping/object at the top level.")
    return data, rest


def _load_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise JobError(f"Invalid YAML: {e}") from e


def _best_effort_kv_parse(text: str) -> dict[str, Any]:
    """
    Very small fallback parser:
    - Reads lines like `key: value` (ignores markdown headings and empty lines)
    - Stops at the first blank line after having found at least one key/value pair
    """
    out: dict[str, Any] = {}
    found_any = False
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            if found_any and not line:
                break
            continue
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        k = k.strip()
        if not k:
            continue
        found_any = True
        out[k] = v.strip()
    return out


def _parse_date(value: Any) -> date:
    # PyYAML already turns unquoted ISO dates into `date` objects.
    if isinstance(value, date):
        return value
    if not value:
        raise JobError("Job must define `date` (the anchor day, YYYY-MM-DD).")
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise JobError(f"`date` must be an ISO date (YYYY-MM-DD), got {value!r}") from e


def _parse_int(value: Any, name: str, default: int) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise JobError(f"`{name}` must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise JobError(f"`{name}` must be an integer, got {value!r}") from e


def _parse_grid(value: Any) -> Grid | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = [line for line in value.splitlines() if line.strip()]
    if not isinstance(value, list):
        raise JobError("`grid` must be a list of 7 row strings.")
    if not all(isinstance(row, str) for row in value):
        # Unquoted rows of digits are read by YAML as numbers.
        raise JobError("`grid` rows must be strings; quote rows written with 0 and 1.")
    try:
        return grid_from_rows(value)
    except ContractViolation as e:
        raise JobError(f"Invalid `grid`: {e}") from e


def _parse_api(value: Any) -> ApiSpec:
    if value is None:
        return ApiSpec()
    if not isinstance(value, dict):
        raise JobError("`api` must be an object/mapping when provided.")
    url = value.get("url")
    if url is not None:
        url = str(url).strip() or None
    timeout = value.get("timeout")
    try:
        timeout = float(timeout) if timeout is not None else None
    except (TypeError, ValueError) as e:
        raise JobError(f"`api.timeout` must be a number, got {timeout!r}") from e
    max_retries = value.get("max_retries")
    return ApiSpec(
        url=url,
        timeout=timeout,
        max_retries=_parse_int(max_retries, "api.max_retries", 0) if max_retries is not None else None,
    )


def parse_job(job_path: str | Path) -> Job:
    """
    Parse a job file into a `Job`.

    Recognized keys:
    - text: str, or grid: list of row strings (one of them is required)
    - date: anchor day (required)
    - intensity: int (default 1)
    - repo_name, owner, email: str
    - api: {url, timeout, max_retries}
    """
    path = Path(job_path)
    if not path.exists():
        raise JobError(f"Job file does not exist: {path}")
    text = path.read_text(encoding="utf-8")

    frontmatter, _rest = _parse_yaml_frontmatter(text)
    if frontmatter is not None:
        data = frontmatter
    elif path.suffix in {".yml", ".yaml"}:
        data = _load_yaml(text)
        if not isinstance(data, dict):
            raise JobError("Job file must be a mapping/object at the top level.")
    else:
        data = _best_effort_kv_parse(text)

    grid = _parse_grid(data.get("grid"))
    pattern_text = str(data.get("text") or "")
    if grid is None and not pattern_text.strip():
        raise JobError("Job must define `text` or `grid`.")

    repo_name = str(data.get("repo_name") or "").strip() or None

    return Job(
        anchor=_parse_date(data.get("date")),
        text=pattern_text,
        grid=grid,
        intensity=_parse_int(data.get("intensity"), "intensity", 1),
        repo_name=repo_name,
        owner=str(data.get("owner") or "").strip(),
        email=str(data.get("email") or "").strip(),
        api=_parse_api(data.get("api")),
    )
