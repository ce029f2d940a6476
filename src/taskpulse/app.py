"""Console entry point for TaskPulse reports."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any, TextIO

from .core.analytics import AnalysisWindow, aggregate
from .core.exception_logging import install_global_exception_logger
from .core.exceptions import SettingsError, ValidationError
from .core.importer import load_tasks, load_time_entries
from .core.logging_config import configure_logging
from .core.paths import set_app_data_directory
from .core.settings import Settings, SettingsManager
from .core.task_filter import StatusFilter, filter_tasks
from .core.task_service import dashboard_stats, recent_tasks

LOGGER = logging.getLogger("taskpulse.main")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskpulse", description="Productivity reports from exported tasks.")
    parser.add_argument("--data-dir", type=Path, help="Directory holding settings.json and the log file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Print the analytics snapshot as JSON")
    report.add_argument("--tasks", type=Path, required=True)
    report.add_argument("--entries", type=Path)
    report.add_argument("--days", type=int, help="Length of the trailing window in days")
    report.add_argument("--today", type=date.fromisoformat, help="Last day of the window (YYYY-MM-DD)")

    dashboard = subparsers.add_parser("dashboard", help="Print dashboard counters as JSON")
    dashboard.add_argument("--tasks", type=Path, required=True)
    dashboard.add_argument("--now", type=datetime.fromisoformat, help="Reference time (ISO 8601)")

    listing = subparsers.add_parser("list", help="Print task titles matching the filters")
    listing.add_argument("--tasks", type=Path, required=True)
    listing.add_argument("--search", default="")
    listing.add_argument("--status", default=StatusFilter.ALL.value, choices=[item.value for item in StatusFilter])
    listing.add_argument("--priority", default="all", choices=["all", "low", "medium", "high"])

    entries = subparsers.add_parser("entries", help="Print the most recent time entries with their durations")
    entries.add_argument("--entries", type=Path, required=True)
    entries.add_argument("--limit", type=int, help="Number of entries to show")

    config = subparsers.add_parser("config", help="Show or change the stored settings")
    config.add_argument("--set", dest="assignments", action="append", default=[], metavar="KEY=VALUE")
    return parser


def run_app(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    out = out or sys.stdout
    args = build_parser().parse_args(argv)
    if args.data_dir is not None:
        set_app_data_directory(args.data_dir)
    settings = _load_settings()
    configure_logging(settings.log_level, console=True)
    install_global_exception_logger()
    LOGGER.info("Running command", extra={"event": "cli_command", "command": args.command})

    try:
        if args.command == "report":
            payload = _report(args, settings)
        elif args.command == "dashboard":
            payload = _dashboard(args, settings)
        elif args.command == "entries":
            payload = _recent_entries(args, settings)
        elif args.command == "config":
            payload = _config(args)
        else:
            payload = _listing(args)
    except (ValidationError, SettingsError) as exc:
        LOGGER.error("Invalid input: %s", exc, extra={"event": "cli_invalid_input", "command": args.command})
        return EXIT_INVALID

    json.dump(payload, out, indent=2)
    out.write("\n")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = list(argv) if argv is not None else None
    LOGGER.info("Starting TaskPulse", extra={"event": "app_start"})
    try:
        exit_code = run_app(args)
    except Exception:
        LOGGER.exception("Fatal error during application execution", extra={"event": "app_crash"})
        return EXIT_FAILURE
    LOGGER.info("TaskPulse exited", extra={"event": "app_exit", "code": exit_code})
    return exit_code


# ----------------------------------------------------------------------
def _load_settings() -> Settings:
    try:
        return SettingsManager().load()
    except SettingsError:
        LOGGER.warning("Failed to load settings; using defaults", exc_info=True)
        return Settings()


def _report(args: argparse.Namespace, settings: Settings) -> dict[str, Any]:
    days = args.days if args.days is not None else settings.analytics_window_days
    window = AnalysisWindow.trailing(days=days, today=args.today)
    tasks = load_tasks(args.tasks)
    entries = load_time_entries(args.entries) if args.entries else []
    display_days = min(settings.display_days, len(window.days))
    return aggregate(tasks, entries, window, display_days=display_days).to_dict()


def _dashboard(args: argparse.Namespace, settings: Settings) -> dict[str, Any]:
    tasks = load_tasks(args.tasks)
    now = args.now or datetime.now()
    payload: dict[str, Any] = dashboard_stats(tasks, now).to_dict()
    payload["recent_tasks"] = [task.title for task in recent_tasks(tasks, settings.recent_tasks_limit)]
    return payload


def _listing(args: argparse.Namespace) -> list[str]:
    tasks = sorted(load_tasks(args.tasks), key=lambda task: task.created_at, reverse=True)
    return [task.title for task in filter_tasks(tasks, args.search, args.status, args.priority)]


def _recent_entries(args: argparse.Namespace, settings: Settings) -> list[dict[str, Any]]:
    limit = args.limit if args.limit is not None else settings.recent_entries_limit
    if limit < 0:
        raise ValidationError("--limit must not be negative")
    entries = sorted(load_time_entries(args.entries), key=lambda entry: entry.start_time, reverse=True)
    return [
        {
            "task": entry.task_title or entry.task_id,
            "start_time": entry.start_time.isoformat(timespec="seconds"),
            "duration": entry.pretty_duration,
        }
        for entry in entries[:limit]
    ]


def _config(args: argparse.Namespace) -> dict[str, Any]:
    changes: dict[str, str] = {}
    for assignment in args.assignments:
        key, sep, value = assignment.partition("=")
        key = key.strip()
        if not sep or key not in Settings.__dataclass_fields__:
            raise SettingsError(f"Expected KEY=VALUE with a known setting, got {assignment!r}")
        changes[key] = value.strip()

    manager = SettingsManager()
    if not changes:
        return manager.load().to_dict()
    updated = manager.update(lambda current: Settings.from_dict({**current.to_dict(), **changes}))
    return updated.to_dict()
