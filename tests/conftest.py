import itertools
from datetime import date, datetime, timedelta, timezone

import pytest
import structlog

from timecard.models import ApprovalStatus, ClockEvent, JobRef, TaskRef

PACIFIC = timezone(timedelta(hours=-8))


@pytest.fixture
def make_event():
    ids = itertools.count(1)

    def build(
        kind,
        day,
        clock="08:00",
        *,
        status=ApprovalStatus.DRAFT,
        job=None,
        task=None,
        event_id=None,
        work_date=None,
        tz=PACIFIC,
    ):
        worked = date.fromisoformat(day) if isinstance(day, str) else day
        hour, minute = (int(part) for part in clock.split(":"))
        return ClockEvent(
            id=event_id or f"evt-{next(ids):03d}",
            work_date=work_date or worked,
            timestamp=datetime(worked.year, worked.month, worked.day, hour, minute, tzinfo=tz),
            kind=kind,
            job=JobRef(id=f"job-{job.lower()}", name=job) if job else None,
            task=TaskRef(id=f"task-{task.lower()}", name=task) if task else None,
            status=status,
        )

    return build


@pytest.fixture
def make_shift(make_event):
    """A clock_in at 06:00 followed by a clock_out ``hours`` later on the same work date."""

    def build(day, hours, *, status=ApprovalStatus.DRAFT, job=None):
        clock_in = make_event("clock_in", day, "06:00", status=status, job=job)
        clock_out = ClockEvent(
            id=f"{clock_in.id}-out",
            work_date=clock_in.work_date,
            timestamp=clock_in.timestamp + timedelta(hours=hours),
            kind="clock_out",
            job=clock_in.job,
            status=status,
        )
        return [clock_in, clock_out]

    return build


@pytest.fixture(autouse=True)
def reset_structlog():
    # cli.main binds log output to the stderr of the test that ran it.
    yield
    structlog.reset_defaults()
