from __future__ import annotations
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Tuple

from .models import ClockEvent, WorkDay


def event_order(event: ClockEvent) -> Tuple:
    # Same-instant events fall back to id so ordering is deterministic.
    return (event.timestamp, event.id)


def order_events(events: Iterable[ClockEvent]) -> Tuple[ClockEvent, ...]:
    return tuple(sorted(events, key=event_order))


def group_by_day(events: Iterable[ClockEvent]) -> List[WorkDay]:
    """Partition events into work-days, most recent date first.

    Events are bucketed by their attributed ``work_date`` (never by the
    timestamp's own date) and ordered by timestamp within each day.
    """

    buckets: Dict[date, List[ClockEvent]] = defaultdict(list)
    for event in events:
        buckets[event.work_date].append(event)

    return [
        WorkDay(work_date=work_date, events=order_events(bucket))
        for work_date, bucket in sorted(buckets.items(), key=lambda item: item[0], reverse=True)
    ]
