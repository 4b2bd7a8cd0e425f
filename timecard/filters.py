from __future__ import annotations
from calendar import monthrange
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .errors import InputValidationError
from .models import ClockEvent


SUNDAY = 6

PERIOD_ALIASES = {"all": "unrestricted"}


class Period(str, Enum):
    WEEK = "week"
    MONTH = "month"
    UNRESTRICTED = "unrestricted"


DateRange = Tuple[Optional[date], Optional[date]]


def parse_period(value: "Period | str") -> Period:
    if isinstance(value, Period):
        return value
    key = str(value or "").strip().lower()
    try:
        return Period(PERIOD_ALIASES.get(key, key))
    except ValueError as exc:
        raise InputValidationError(f"Unknown period {value!r}; use week, month or unrestricted") from exc


def _reference_date(now: "datetime | date") -> date:
    if isinstance(now, datetime):
        return now.date()
    if isinstance(now, date):
        return now
    raise InputValidationError(f"Reference instant must be a date or datetime, got {now!r}")


def week_bounds(anchor: date, week_start: int = SUNDAY) -> Tuple[date, date]:
    if not 0 <= week_start <= 6:
        raise InputValidationError(f"week_start must be a weekday number 0-6, got {week_start!r}")
    start = anchor - timedelta(days=(anchor.weekday() - week_start) % 7)
    end = start + timedelta(days=6)
    return start, end


def month_bounds(anchor: date) -> Tuple[date, date]:
    _, last_day = monthrange(anchor.year, anchor.month)
    return anchor.replace(day=1), anchor.replace(day=last_day)


def period_bounds(period: "Period | str", now: "datetime | date", week_start: int = SUNDAY) -> DateRange:
    """Inclusive ``(start, end)`` dates of the window containing ``now``.

    ``unrestricted`` has no bounds and returns ``(None, None)``.
    """

    selected = parse_period(period)
    anchor = _reference_date(now)
    if selected is Period.WEEK:
        return week_bounds(anchor, week_start)
    if selected is Period.MONTH:
        return month_bounds(anchor)
    return None, None


def matches_query(event: ClockEvent, query: Optional[str]) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    haystacks = [event.kind.lower(), event.kind_label.lower()]
    if event.job is not None:
        haystacks.append(event.job.name.lower())
    if event.task is not None:
        haystacks.append(event.task.name.lower())
    return any(needle in value for value in haystacks)


def filter_events(
    events: Iterable[ClockEvent],
    period: "Period | str" = Period.UNRESTRICTED,
    query: Optional[str] = None,
    now: "datetime | date | None" = None,
    week_start: int = SUNDAY,
) -> List[ClockEvent]:
    """Keep events whose attributed date lies in the window and that match the query."""

    selected = parse_period(period)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    if selected is not Period.UNRESTRICTED:
        if now is None:
            raise InputValidationError(f"A reference instant is required for the {selected.value} period")
        start_date, end_date = period_bounds(selected, now, week_start)

    def matches(event: ClockEvent) -> bool:
        if start_date and event.work_date < start_date:
            return False
        if end_date and event.work_date > end_date:
            return False
        return matches_query(event, query)

    return [event for event in events if matches(event)]
