from collections import Counter
from datetime import date, datetime, timedelta, timezone

from timecard.grouping import group_by_day
from timecard.models import ApprovalStatus, ClockEvent

PACIFIC = timezone(timedelta(hours=-8))


def test_empty_input_yields_no_days():
    assert group_by_day([]) == []


def test_days_newest_first_events_oldest_first(make_event):
    events = [
        make_event("clock_out", "2024-03-04", "17:00"),
        make_event("clock_in", "2024-03-06", "08:00"),
        make_event("clock_in", "2024-03-04", "09:00"),
        make_event("clock_out", "2024-03-06", "16:00"),
        make_event("lunch_out", "2024-03-05", "12:00"),
    ]

    days = group_by_day(events)

    assert [d.work_date for d in days] == [date(2024, 3, 6), date(2024, 3, 5), date(2024, 3, 4)]
    for day in days:
        stamps = [e.timestamp for e in day.events]
        assert stamps == sorted(stamps)
    assert [e.kind for e in days[2].events] == ["clock_in", "clock_out"]


def test_grouping_is_a_permutation_of_the_input(make_event):
    events = [make_event(kind, f"2024-03-0{n % 3 + 1}", f"{8 + n}:00") for n, kind in enumerate(["clock_in", "clock_out"] * 4)]

    flattened = [e for day in group_by_day(events) for e in day.events]

    assert Counter(flattened) == Counter(events)
    assert len(flattened) == len(events)


def test_events_bucket_by_attributed_date_not_timestamp():
    late = ClockEvent(
        id="late",
        work_date=date(2024, 3, 5),
        timestamp=datetime(2024, 3, 6, 0, 30, tzinfo=PACIFIC),
        kind="clock_out",
    )

    days = group_by_day([late])

    assert [d.work_date for d in days] == [date(2024, 3, 5)]


def test_grouping_is_idempotent(make_event):
    events = [
        make_event("clock_in", "2024-03-06", "08:00"),
        make_event("clock_out", "2024-03-06", "12:00"),
        make_event("clock_in", "2024-03-07", "08:00"),
    ]

    assert group_by_day(events) == group_by_day(list(reversed(events)))


def test_work_day_reports_its_status(make_event):
    days = group_by_day(
        [
            make_event("clock_in", "2024-03-06", status=ApprovalStatus.SUBMITTED),
            make_event("clock_out", "2024-03-06", "16:00"),
        ]
    )

    assert days[0].status is ApprovalStatus.SUBMITTED
