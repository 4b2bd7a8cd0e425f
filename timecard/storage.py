from __future__ import annotations
import asyncio
import json
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional
from uuid import uuid4

from .approval import NO_EVENTS, SubmissionResult, can_submit, day_status
from .errors import FetchError, InputValidationError
from .logging import get_logger
from .models import ApprovalStatus, ClockEvent, Geolocation, JobRef, JobSelection, TaskRef

logger = get_logger(__name__)


class EventStore:
    """JSON file holding the current user's clock events and job selection.

    The file is read on first use, not on construction, so a broken file
    surfaces as ``FetchError`` from the call that needed the data.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.events: Dict[str, ClockEvent] = {}
        self.selection: Optional[JobSelection] = None
        self._loaded = False

    def load(self) -> None:
        try:
            content = json.loads(self.path.read_text(encoding="utf-8"))
            self.events = {e["id"]: ClockEvent.from_dict(e) for e in content.get("events", [])}
            self.selection = self._deserialize_selection(content.get("selection"))
            self._loaded = True
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            raise FetchError(f"Could not read timecards from {self.path}: {exc}") from exc

    def save(self) -> None:
        payload = {
            "events": [e.to_dict() for e in sorted(self.events.values(), key=lambda e: (e.timestamp, e.id))],
            "selection": self._serialize_selection(self.selection),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def fetch_events(self) -> List[ClockEvent]:
        if self.path.exists():
            self.load()
        return list(self.events.values())

    def events_on(self, day: date) -> List[ClockEvent]:
        return [e for e in self.fetch_events() if e.work_date == day]

    def add_event(self, event: ClockEvent) -> None:
        if not self._loaded and self.path.exists():
            self.load()
        self.events[event.id] = event

    def record_event(
        self,
        kind: str,
        timestamp: datetime,
        *,
        work_date: Optional[date] = None,
        selection: Optional[JobSelection] = None,
        location: Optional[Geolocation] = None,
    ) -> ClockEvent:
        if self.path.exists():
            self.load()
        chosen = selection or self.selection
        event = ClockEvent(
            id=str(uuid4()),
            work_date=work_date or timestamp.date(),
            timestamp=timestamp,
            kind=kind,
            job=chosen.job if chosen else None,
            task=chosen.task if chosen else None,
            location=location,
        )
        self.add_event(event)
        self.save()
        logger.info("event_recorded", event_id=event.id, kind=event.kind, date=event.work_date.isoformat())
        return event

    def set_day_status(self, day: date, status: ApprovalStatus) -> List[ClockEvent]:
        """Replace every event on ``day`` with a copy carrying ``status``."""
        updated = [replace(e, status=status) for e in self.events_on(day)]
        for event in updated:
            self.events[event.id] = event
        self.save()
        return updated

    def approve_day(self, day: date) -> List[ClockEvent]:
        # Stands in for the supervisor-facing system; the engine never approves.
        status = day_status(self.events_on(day))
        if status is not ApprovalStatus.SUBMITTED:
            raise InputValidationError(f"Timecard for {day.isoformat()} is {status.value}, not submitted")
        return self.set_day_status(day, ApprovalStatus.APPROVED)

    def save_selection(self, selection: JobSelection) -> None:
        if self.path.exists():
            self.load()
        self.selection = selection
        self.save()

    def load_selection(self) -> Optional[JobSelection]:
        if self.path.exists():
            self.load()
        return self.selection

    @staticmethod
    def _serialize_selection(selection: Optional[JobSelection]) -> Optional[dict]:
        if selection is None:
            return None
        return {
            "job": {"id": selection.job.id, "name": selection.job.name},
            "task": {"id": selection.task.id, "name": selection.task.name} if selection.task else None,
        }

    @staticmethod
    def _deserialize_selection(data: Optional[dict]) -> Optional[JobSelection]:
        if not data:
            return None
        task = data.get("task")
        return JobSelection(
            job=JobRef(id=str(data["job"]["id"]), name=str(data["job"]["name"])),
            task=TaskRef(id=str(task["id"]), name=str(task["name"])) if task else None,
        )


class StoreSubmissionGateway:
    """Submission collaborator writing ``submitted`` records into an EventStore.

    File reads and writes run in a worker thread to keep the event loop free.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store

    async def submit_for_approval(self, day: date) -> SubmissionResult:
        events = await asyncio.to_thread(self.store.events_on, day)
        if not events:
            return SubmissionResult.failure(day, NO_EVENTS)
        if not can_submit(events):
            return SubmissionResult.rejected(day)
        await asyncio.to_thread(self.store.set_day_status, day, ApprovalStatus.SUBMITTED)
        return SubmissionResult.success(day)
