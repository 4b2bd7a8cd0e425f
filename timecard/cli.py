from __future__ import annotations
import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

from .config import TimecardSettings, get_settings
from .errors import TimecardError
from .exporter import ExportFormat
from .filters import Period
from .logging import configure_logging
from .models import EventKind, Geolocation, JobRef, JobSelection, TaskRef, parse_date, parse_timestamp
from .service import TimecardService, build_service
from .storage import EventStore


PERIOD_CHOICES = [p.value for p in Period] + ["all"]


def settings_from_args(args: argparse.Namespace) -> TimecardSettings:
    settings = get_settings()
    if args.store:
        settings = settings.model_copy(update={"store_path": Path(args.store)})
    return settings


def service_from_args(args: argparse.Namespace) -> TimecardService:
    return build_service(settings_from_args(args))


def store_from_args(args: argparse.Namespace) -> EventStore:
    return EventStore(settings_from_args(args).store_path)


def parse_now(value: str | None) -> datetime:
    if not value:
        return datetime.now().astimezone()
    stamp = parse_timestamp(value)
    return stamp if stamp.tzinfo else stamp.astimezone()


def print_json(payload) -> None:
    print(json.dumps(payload, default=str, indent=2))


def cmd_select_job(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    task = TaskRef(id=args.task_id, name=args.task_name or args.task_id) if args.task_id else None
    selection = JobSelection(job=JobRef(id=args.job_id, name=args.job_name), task=task)
    store.save_selection(selection)
    print(f"Selected job {selection.job.name}" + (f" / task {task.name}" if task else ""))


def cmd_clock(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    location = None
    if args.lat is not None and args.lon is not None:
        location = Geolocation(latitude=args.lat, longitude=args.lon, address=args.address)
    event = store.record_event(
        args.kind,
        parse_now(args.at),
        work_date=parse_date(args.date) if args.date else None,
        location=location,
    )
    print(f"Recorded {event.kind} at {event.timestamp.isoformat()} for {event.work_date}")


def cmd_days(args: argparse.Namespace) -> None:
    view = service_from_args(args).load(args.period, args.query, parse_now(args.now))
    print_json(view.to_dict())


def cmd_summary(args: argparse.Namespace) -> None:
    view = service_from_args(args).load(args.period, args.query, parse_now(args.now))
    print_json({"period": view.period, "start": view.start, "end": view.end, **view.totals.to_dict()})


def cmd_submit(args: argparse.Namespace) -> None:
    day = parse_date(args.date)
    result = asyncio.run(service_from_args(args).submit(day))
    if not result.ok:
        print(f"Submission for {day} rejected: {result.reason}")
        raise SystemExit(1)
    print(f"Timecard for {day} submitted for approval")


def cmd_approve(args: argparse.Namespace) -> None:
    updated = store_from_args(args).approve_day(parse_date(args.date))
    print(f"Approved {len(updated)} events on {args.date}")


def cmd_export(args: argparse.Namespace) -> None:
    service = service_from_args(args)
    view = service.load(args.period, args.query, parse_now(args.now))
    result = service.export(view, args.format, Path(args.output_dir) if args.output_dir else None)
    print(f"Exported {result.record_count} records to {result.location}")


def add_view_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--period", choices=PERIOD_CHOICES, default=Period.WEEK.value)
    parser.add_argument("--query", default="", help="Match job, task or action")
    parser.add_argument("--now", help="Reference instant (ISO 8601), defaults to the current time")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Timecard history and overtime CLI")
    parser.add_argument("--store", help="Path to the timecard JSON store")
    sub = parser.add_subparsers(dest="command", required=True)

    select = sub.add_parser("select-job", help="Choose the job and task for new clock events")
    select.add_argument("job_id")
    select.add_argument("job_name")
    select.add_argument("--task-id")
    select.add_argument("--task-name")
    select.set_defaults(func=cmd_select_job)

    clock = sub.add_parser("clock", help="Record a clock event")
    clock.add_argument("kind", choices=[k.value for k in EventKind])
    clock.add_argument("--at", help="Event time (ISO 8601), defaults to now")
    clock.add_argument("--date", help="Attributed work date, defaults to the event's date")
    clock.add_argument("--lat", type=float)
    clock.add_argument("--lon", type=float)
    clock.add_argument("--address")
    clock.set_defaults(func=cmd_clock)

    days = sub.add_parser("days", help="Show timecards grouped by day")
    add_view_arguments(days)
    days.set_defaults(func=cmd_days)

    summary = sub.add_parser("summary", help="Show regular, overtime and double-time totals")
    add_view_arguments(summary)
    summary.set_defaults(func=cmd_summary)

    submit = sub.add_parser("submit", help="Submit a day's timecard for approval")
    submit.add_argument("date")
    submit.set_defaults(func=cmd_submit)

    approve = sub.add_parser("approve", help="Supervisor approval of a submitted day")
    approve.add_argument("date")
    approve.set_defaults(func=cmd_approve)

    export = sub.add_parser("export", help="Export the selected timecards")
    export.add_argument("format", choices=[f.value for f in ExportFormat])
    add_view_arguments(export)
    export.add_argument("--output-dir")
    export.set_defaults(func=cmd_export)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, json=settings.log_json)
    try:
        args.func(args)
    except TimecardError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
