from __future__ import annotations
import math
from typing import Iterable, List

from .approval import day_status
from .grouping import group_by_day
from .hours import work_day_hours
from .models import ClockEvent, DaySummary, HoursBreakdown, WorkDay
from .overtime import DEFAULT_RULE, DailyTierRule


def summarize_day(day: WorkDay, rule: DailyTierRule = DEFAULT_RULE) -> DaySummary:
    return DaySummary(day=day, hours=rule.classify(work_day_hours(day)), status=day_status(day.events))


def build_day_summaries(events: Iterable[ClockEvent], rule: DailyTierRule = DEFAULT_RULE) -> List[DaySummary]:
    return [summarize_day(day, rule) for day in group_by_day(events)]


def aggregate(summaries: Iterable[DaySummary]) -> HoursBreakdown:
    """Bucket-wise total of per-day breakdowns.

    ``math.fsum`` keeps the result independent of day order.
    """

    breakdowns = [summary.hours for summary in summaries]
    return HoursBreakdown(
        total=math.fsum(b.total for b in breakdowns),
        regular=math.fsum(b.regular for b in breakdowns),
        overtime=math.fsum(b.overtime for b in breakdowns),
        double_time=math.fsum(b.double_time for b in breakdowns),
    )


def summarize(events: Iterable[ClockEvent], rule: DailyTierRule = DEFAULT_RULE) -> HoursBreakdown:
    return aggregate(build_day_summaries(events, rule))
