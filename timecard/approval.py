"""Per-day approval lifecycle: draft -> submitted -> approved.

The core derives a day's status and guards submission. Approval itself is
performed by a supervisor-facing system outside this package.

Submission re-reads the day's events right before calling the gateway, but
another client may still submit the same date between that read and the
gateway call. That window is left to the gateway, which must reject a date
that is no longer submittable.
"""
from __future__ import annotations
import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional, Protocol, Set

from .logging import get_logger
from .models import ApprovalStatus, ClockEvent

logger = get_logger(__name__)

ALREADY_SUBMITTED = "already submitted"
IN_FLIGHT = "submission already in progress"
NO_EVENTS = "no timecard events recorded for this date"


def day_status(events: Iterable[ClockEvent]) -> ApprovalStatus:
    statuses = {event.status for event in events}
    if ApprovalStatus.APPROVED in statuses:
        return ApprovalStatus.APPROVED
    if ApprovalStatus.SUBMITTED in statuses:
        return ApprovalStatus.SUBMITTED
    return ApprovalStatus.DRAFT


def can_submit(events: Iterable[ClockEvent]) -> bool:
    return day_status(events) is ApprovalStatus.DRAFT


@dataclass(frozen=True)
class SubmissionResult:
    day: date
    ok: bool
    reason: Optional[str] = None
    conflict: bool = False

    @classmethod
    def success(cls, day: date) -> "SubmissionResult":
        return cls(day=day, ok=True)

    @classmethod
    def rejected(cls, day: date, reason: str = ALREADY_SUBMITTED) -> "SubmissionResult":
        return cls(day=day, ok=False, reason=reason, conflict=True)

    @classmethod
    def failure(cls, day: date, reason: str) -> "SubmissionResult":
        return cls(day=day, ok=False, reason=reason)

    def to_dict(self) -> dict:
        return {"date": self.day.isoformat(), "ok": self.ok, "reason": self.reason, "conflict": self.conflict}


class SubmissionGateway(Protocol):
    async def submit_for_approval(self, day: date) -> SubmissionResult:
        ...


EventFetcher = Callable[[], List[ClockEvent]]


class ApprovalWorkflow:
    """Client-side submission flow for one consumer.

    A second ``submit`` for a date whose first call has not returned yet is
    refused rather than queued. ``fetch_events`` runs in a worker thread.
    """

    def __init__(self, fetch_events: EventFetcher, gateway: SubmissionGateway) -> None:
        self.fetch_events = fetch_events
        self.gateway = gateway
        self._in_flight: Set[date] = set()

    def status_for(self, day: date) -> ApprovalStatus:
        return day_status(e for e in self.fetch_events() if e.work_date == day)

    async def submit(self, day: date) -> SubmissionResult:
        if day in self._in_flight:
            logger.warning("submission_in_flight", date=day.isoformat())
            return SubmissionResult.rejected(day, IN_FLIGHT)

        self._in_flight.add(day)
        try:
            events = await asyncio.to_thread(self.fetch_events)
            day_events = [e for e in events if e.work_date == day]
            if not day_events:
                return SubmissionResult.failure(day, NO_EVENTS)
            if not can_submit(day_events):
                logger.info("submission_conflict", date=day.isoformat(), status=day_status(day_events).value)
                return SubmissionResult.rejected(day)
            result = await self.gateway.submit_for_approval(day)
        finally:
            self._in_flight.discard(day)

        if result.ok:
            logger.info("submission_accepted", date=day.isoformat())
        else:
            logger.info("submission_refused", date=day.isoformat(), reason=result.reason)
        return result
