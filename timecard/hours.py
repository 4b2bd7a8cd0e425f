from __future__ import annotations
from datetime import datetime, timedelta
from typing import Iterable, Optional

from .grouping import order_events
from .models import ClockEvent, EventKind, WorkDay


SECONDS_PER_HOUR = 3600.0


class _ShiftScan:
    """Running state while walking one day's events in timestamp order.

    Worked time is collected into ``pending`` for the open clock span and only
    moves into ``worked`` when a ``clock_out`` closes that span, so a span
    that never closes contributes nothing.
    """

    def __init__(self) -> None:
        self.clocked_in = False
        self.on_lunch = False
        self.resumed_at: Optional[datetime] = None
        self.pending = timedelta(0)
        self.worked = timedelta(0)

    def _pause(self, at: datetime) -> None:
        if self.resumed_at is not None:
            self.pending += at - self.resumed_at
            self.resumed_at = None

    def clock_in(self, at: datetime) -> None:
        if self.clocked_in:
            return
        self.clocked_in = True
        self.on_lunch = False
        self.resumed_at = at
        self.pending = timedelta(0)

    def lunch_out(self, at: datetime) -> None:
        if not self.clocked_in or self.on_lunch:
            return
        self._pause(at)
        self.on_lunch = True

    def lunch_in(self, at: datetime) -> None:
        if not self.clocked_in or not self.on_lunch:
            return
        self.on_lunch = False
        self.resumed_at = at

    def clock_out(self, at: datetime) -> None:
        if not self.clocked_in:
            return
        # Still on lunch means accrual stopped at the lunch boundary.
        if not self.on_lunch:
            self._pause(at)
        self.worked += self.pending
        self.clocked_in = False
        self.on_lunch = False
        self.resumed_at = None
        self.pending = timedelta(0)


def calculate_day_hours(events: Iterable[ClockEvent]) -> float:
    """Worked hours for one day's events, lunch excluded.

    Orphan ``clock_out`` events, an unterminated trailing clock span and
    unknown event kinds all contribute zero.
    """

    scan = _ShiftScan()
    handlers = {
        EventKind.CLOCK_IN.value: scan.clock_in,
        EventKind.LUNCH_OUT.value: scan.lunch_out,
        EventKind.LUNCH_IN.value: scan.lunch_in,
        EventKind.CLOCK_OUT.value: scan.clock_out,
    }
    for event in order_events(events):
        handler = handlers.get(event.kind)
        if handler is not None:
            handler(event.timestamp)
    return scan.worked.total_seconds() / SECONDS_PER_HOUR


def work_day_hours(day: WorkDay) -> float:
    return calculate_day_hours(day.events)
