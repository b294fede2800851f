"""
cli.py

Responsibility: CLI entrypoint for commitart.

Commands:
- `preview`: compile text into a grid and schedule, print the report
- `generate`: parse a job file -> compile -> submit to the generation service
- `status`: poll account credits for a username

This module should orchestrate behavior but keep concerns isolated:
- Job parsing: `job_parser.py`
- Compilation: `grid.py` / `schedule.py`
- Service calls: `session.py` (through `client.py` and `executor.py`)
"""

from __future__ import annotations

import argparse
import json
import signal
import sys
from datetime import date
from types import FrameType

from commitart.client import AutomationClient
from commitart.config import ConfigError, Settings, load_settings
from commitart.executor import Cancelled, Failed, Outcome, Resolved
from commitart.grid import YEAR_WEEKS, compile_text, pad_grid, width_of
from commitart.job_parser import JobError, parse_job
from commitart.logging import configure_logging, get_logger
from commitart.notify import LogNotifier
from commitart.preview import render_preview
from commitart.schedule import MAX_INTENSITY, MIN_INTENSITY, compile_schedule, schedule_to_payload
from commitart.session import GenerationRequest, GenerationSession

log = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


class CLIError(RuntimeError):
    pass


def _parse_date_arg(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {value}") from e


def _intensity_arg(value: str) -> int:
    try:
        n = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an integer: {value}") from e
    if not (MIN_INTENSITY <= n <= MAX_INTENSITY):
        raise argparse.ArgumentTypeError(f"must be between {MIN_INTENSITY} and {MAX_INTENSITY}: {n}")
    return n


def _exit_code(outcome: Outcome) -> int:
    if isinstance(outcome, Resolved):
        return EXIT_OK
    if isinstance(outcome, Cancelled):
        return EXIT_CANCELLED
    return EXIT_FAILED


def preview_cmd(args: argparse.Namespace, settings: Settings) -> int:
    grid = compile_text(args.text)
    if args.pad:
        if width_of(grid) > YEAR_WEEKS:
            raise CLIError(f"\"{args.text}\" is {width_of(grid)} weeks wide and cannot be padded to {YEAR_WEEKS}")
        grid = pad_grid(grid)
    schedule = compile_schedule(grid, args.date, args.intensity)
    print(render_preview(grid, schedule), end="")
    if args.json:
        print(json.dumps(schedule_to_payload(schedule), indent=2))
    return EXIT_OK


def generate_cmd(args: argparse.Namespace, settings: Settings) -> int:
    job = parse_job(args.job_path)

    settings = settings.with_overrides(
        api_url=args.api_url or job.api.url,
        timeout=job.api.timeout,
        max_retries=job.api.max_retries,
        github_token=args.github_token,
    )
    request = GenerationRequest(
        owner=args.owner or job.owner,
        email=args.email or job.email,
        github_token=settings.github_token,
        anchor=job.anchor,
        intensity=job.intensity,
        text=job.text,
        grid=job.grid,
        repo_name=job.repo_name,
    )

    notifier = LogNotifier()
    with AutomationClient(settings.api_url) as client:
        session = GenerationSession(client, notifier, policy=settings.retry_policy())

        if args.dry_run:
            schedule, problem = session.validate(request)
            if problem is not None:
                notifier.error(problem.message)
                return EXIT_FAILED
            print(render_preview(request.pattern(), schedule), end="")
            payload = session.build_payload(request, schedule)
            payload["githubToken"] = "***"
            print(json.dumps(payload, indent=2))
            return EXIT_OK

        def _on_sigint(signum: int, frame: FrameType | None) -> None:
            session.cancel()

        previous = signal.signal(signal.SIGINT, _on_sigint)
        try:
            outcome = session.submit(request)
        finally:
            signal.signal(signal.SIGINT, previous)

    if isinstance(outcome, Resolved):
        data = outcome.response.data
        url = data.get("url") if isinstance(data, dict) else None
        if url:
            print(url)
    elif isinstance(outcome, Failed):
        log.error("generation_failed", kind=outcome.failure.kind.value)
    return _exit_code(outcome)


def status_cmd(args: argparse.Namespace, settings: Settings) -> int:
    settings = settings.with_overrides(api_url=args.api_url)
    with AutomationClient(settings.api_url) as client:
        session = GenerationSession(client, LogNotifier(), policy=settings.retry_policy())
        status = session.check_status(args.username)
    if status is None:
        print("Status unavailable.", file=sys.stderr)
        return EXIT_FAILED
    print(f"credits: {status.credits}")
    print(f"access requested: {'yes' if status.access_requested else 'no'}")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="commitart", description="Compile text or pixel art into a dated commit schedule")
    p.add_argument("--log-level", default=None, help="Log level (default: COMMITART_LOG_LEVEL or INFO)")
    p.add_argument("--log-json", dest="log_json", action="store_true", default=None, help="Emit JSON log lines")
    sub = p.add_subparsers(dest="command", required=True)

    pv = sub.add_parser("preview", help="Compile text and print the grid and schedule summary")
    pv.add_argument("text", help="Text to draw (unknown characters render blank)")
    pv.add_argument("--date", type=_parse_date_arg, default=date.today(), help="Anchor date (default: today)")
    pv.add_argument("--intensity", type=_intensity_arg, default=1, help="Commits per active day, 1-10 (default: 1)")
    pv.add_argument("--pad", action="store_true", help="Pad the grid to a full 52-week year")
    pv.add_argument("--json", action="store_true", help="Also print the schedule as JSON")
    pv.set_defaults(func=preview_cmd)

    g = sub.add_parser(
        "generate",
        help="Compile a job file and submit it to the generation service",
        description="Ctrl-C cancels the submission. A request already on the wire may still be applied by the "
        "service; retries reuse its idempotency key.",
    )
    g.add_argument("job_path", help="Path to the job file (markdown with YAML frontmatter, or YAML)")
    g.add_argument("--api-url", default=None, help="Service URL (or set COMMITART_API_URL)")
    g.add_argument("--github-token", default=None, help="GitHub token (or set env GITHUB_TOKEN)")
    g.add_argument("--owner", default=None, help="GitHub username (overrides job.owner)")
    g.add_argument("--email", default=None, help="Account email (overrides job.email)")
    g.add_argument("--dry-run", action="store_true", help="Validate and print the payload without sending it")
    g.set_defaults(func=generate_cmd)

    s = sub.add_parser("status", help="Show remaining credits for a username")
    s.add_argument("username", help="GitHub username")
    s.add_argument("--api-url", default=None, help="Service URL (or set COMMITART_API_URL)")
    s.set_defaults(func=status_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings().with_overrides(log_level=args.log_level, log_json=args.log_json)
        configure_logging(settings.log_level, settings.log_json)
        return int(args.func(args, settings))
    except (ConfigError, JobError, CLIError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
