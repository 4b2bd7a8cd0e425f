"""Timecard aggregation and overtime computation."""

from .models import ApprovalStatus, ClockEvent, DaySummary, EventKind, HoursBreakdown, TimecardView, WorkDay
from .overtime import DailyTierRule, classify_hours

__all__ = [
    "ApprovalStatus",
    "ClockEvent",
    "DailyTierRule",
    "DaySummary",
    "EventKind",
    "HoursBreakdown",
    "TimecardView",
    "WorkDay",
    "classify_hours",
]
