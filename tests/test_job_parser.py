from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from commitart.job_parser import ApiSpec, JobError, parse_job


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_frontmatter_job(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "job.md",
        "---\n"
        "text: HELLO\n"
        "date: 2025-05-15\n"
        "intensity: 3\n"
        "owner: octocat\n"
        "email: octocat@example.com\n"
        "repo_name: hello-art\n"
        "api:\n"
        "  url: https://art.example.com/api\n"
        "  timeout: 5\n"
        "  max_retries: 1\n"
        "---\n"
        "\n"
        "# Notes\n"
        "Drawn for the profile page.\n",
    )

    job = parse_job(path)

    assert job.text == "HELLO"
    assert job.grid is None
    assert job.anchor == date(2025, 5, 15)
    assert job.intensity == 3
    assert job.owner == "octocat"
    assert job.email == "octocat@example.com"
    assert job.repo_name == "hello-art"
    assert job.api == ApiSpec(url="https://art.example.com/api", timeout=5.0, max_retries=1)


def test_yaml_job_with_grid(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "job.yaml",
        "date: '2025-01-01'\n"
        "grid:\n"
        "  - '#..'\n"
        "  - '.#.'\n"
        "  - '..#'\n"
        "  - '...'\n"
        "  - '...'\n"
        "  - '...'\n"
        "  - '...'\n",
    )

    job = parse_job(path)

    assert job.anchor == date(2025, 1, 1)
    assert job.grid is not None
    assert job.grid[0] == [1, 0, 0]
    assert job.grid[2] == [0, 0, 1]
    assert job.intensity == 1
    assert job.api == ApiSpec()


def test_block_scalar_grid(tmp_path: Path) -> None:
    rows = "\n".join(["    1 1", "    ...", "    ...", "    ...", "    ...", "    ...", "    ..."])
    path = _write(tmp_path, "job.md", f"---\ndate: 2025-01-01\ngrid: |\n{rows}\n---\n")

    job = parse_job(path)

    assert job.grid is not None
    assert job.grid[0] == [1, 0, 1]


def test_key_value_fallback(tmp_path: Path) -> None:
    path = _write(tmp_path, "job.txt", "# My art\n\ntext: ram\ndate: 2024-02-29\nintensity: 2\n\nignored: yes\n")

    job = parse_job(path)

    assert job.text == "ram"
    assert job.anchor == date(2024, 2, 29)
    assert job.intensity == 2


@pytest.mark.parametrize(
    ("body", "fragment"),
    [
        ("---\ndate: 2025-01-01\n---\n", "`text` or `grid`"),
        ("---\ntext: HI\n---\n", "`date`"),
        ("---\ntext: HI\ndate: someday\n---\n", "ISO date"),
        ("---\ntext: HI\ndate: 2025-01-01\nintensity: lots\n---\n", "`intensity`"),
        ("---\ntext: HI\ndate: 2025-01-01\nintensity: 2.9\n---\n", "`intensity`"),
        ("---\ntext: HI\ndate: 2025-01-01\napi:\n  max_retries: 1.5\n---\n", "max_retries"),
        ("---\ndate: 2025-01-01\ngrid: [0110, 1001]\n---\n", "must be strings"),
        ("---\ndate: 2025-01-01\ngrid: ['12', '00']\n---\n", "Invalid `grid`"),
        ("---\ntext: HI\ndate: 2025-01-01\napi: nope\n---\n", "`api`"),
        ("---\ntext: HI\n", "closing"),
        ("---\ntext: HI\ndate: 2025-01-01\n----\n", "closing"),
        ("---\ntext: HI\ndate: 2025-01-01\n---x\n", "closing"),
        ("---\n- a\n- b\n---\n", "mapping"),
    ],
)
def test_invalid_jobs(tmp_path: Path, body: str, fragment: str) -> None:
    path = _write(tmp_path, "job.md", body)
    with pytest.raises(JobError, match=fragment):
        parse_job(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(JobError, match="does not exist"):
        parse_job(tmp_path / "nope.md")


def test_frontmatter_may_close_at_end_of_file(tmp_path: Path) -> None:
    path = _write(tmp_path, "job.md", "---\ntext: HI\ndate: 2025-01-01\nintensity: 3.0\n---")

    job = parse_job(path)

    assert job.text == "HI"
    assert job.intensity == 3
