from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import InputValidationError


class EventKind(str, Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    LUNCH_OUT = "lunch_out"
    LUNCH_IN = "lunch_in"


class ApprovalStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"


@dataclass(frozen=True)
class JobRef:
    id: str
    name: str


@dataclass(frozen=True)
class TaskRef:
    id: str
    name: str


@dataclass(frozen=True)
class Geolocation:
    latitude: float
    longitude: float
    address: Optional[str] = None


@dataclass(frozen=True)
class ClockEvent:
    id: str
    work_date: date
    timestamp: datetime
    kind: str
    job: Optional[JobRef] = None
    task: Optional[TaskRef] = None
    location: Optional[Geolocation] = None
    status: ApprovalStatus = ApprovalStatus.DRAFT

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, datetime):
            raise InputValidationError(f"Event {self.id} timestamp must be a datetime")
        if self.timestamp.tzinfo is None or self.timestamp.utcoffset() is None:
            raise InputValidationError(f"Event {self.id} timestamp must be timezone-aware")
        if isinstance(self.work_date, datetime) or not isinstance(self.work_date, date):
            raise InputValidationError(f"Event {self.id} work_date must be a date")
        if not self.kind:
            raise InputValidationError(f"Event {self.id} has no kind")
        # Plain strings keep unknown kinds intact; EventKind members compare equal to them.
        object.__setattr__(self, "kind", str(getattr(self.kind, "value", self.kind)))
        try:
            object.__setattr__(self, "status", ApprovalStatus(self.status))
        except ValueError as exc:
            raise InputValidationError(f"Event {self.id} has unknown status {self.status!r}") from exc

    @property
    def kind_label(self) -> str:
        return self.kind.replace("_", " ")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.work_date.isoformat(),
            "timestamp": self.timestamp.isoformat(),
            "type": self.kind,
            "job": {"id": self.job.id, "name": self.job.name} if self.job else None,
            "task": {"id": self.task.id, "name": self.task.name} if self.task else None,
            "location": (
                {
                    "latitude": self.location.latitude,
                    "longitude": self.location.longitude,
                    "address": self.location.address,
                }
                if self.location
                else None
            ),
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClockEvent":
        try:
            job = data.get("job")
            task = data.get("task")
            location = data.get("location")
            return cls(
                id=str(data["id"]),
                work_date=parse_date(data["date"]),
                timestamp=parse_timestamp(data["timestamp"]),
                kind=str(data["type"]),
                job=JobRef(id=str(job["id"]), name=str(job["name"])) if job else None,
                task=TaskRef(id=str(task["id"]), name=str(task["name"])) if task else None,
                location=(
                    Geolocation(
                        latitude=float(location["latitude"]),
                        longitude=float(location["longitude"]),
                        address=location.get("address"),
                    )
                    if location
                    else None
                ),
                status=ApprovalStatus(data.get("status") or ApprovalStatus.DRAFT.value),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            if isinstance(exc, InputValidationError):
                raise
            raise InputValidationError(f"Malformed clock event {data!r}: {exc}") from exc


@dataclass(frozen=True)
class WorkDay:
    work_date: date
    events: Tuple[ClockEvent, ...] = ()

    @property
    def status(self) -> ApprovalStatus:
        from .approval import day_status

        return day_status(self.events)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.work_date.isoformat(),
            "events": [event.to_dict() for event in self.events],
        }


@dataclass(frozen=True)
class HoursBreakdown:
    total: float = 0.0
    regular: float = 0.0
    overtime: float = 0.0
    double_time: float = 0.0

    @classmethod
    def zero(cls) -> "HoursBreakdown":
        return cls()

    def __add__(self, other: "HoursBreakdown") -> "HoursBreakdown":
        if not isinstance(other, HoursBreakdown):
            return NotImplemented
        return HoursBreakdown(
            total=self.total + other.total,
            regular=self.regular + other.regular,
            overtime=self.overtime + other.overtime,
            double_time=self.double_time + other.double_time,
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "total": self.total,
            "regular": self.regular,
            "overtime": self.overtime,
            "double_time": self.double_time,
        }


@dataclass(frozen=True)
class DaySummary:
    day: WorkDay
    hours: HoursBreakdown
    status: ApprovalStatus

    @property
    def work_date(self) -> date:
        return self.day.work_date

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.day.to_dict(),
            "hours": self.hours.to_dict(),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class TimecardView:
    period: str
    query: str
    start: Optional[date]
    end: Optional[date]
    days: Tuple[DaySummary, ...] = ()
    totals: HoursBreakdown = field(default_factory=HoursBreakdown.zero)

    @property
    def record_count(self) -> int:
        return sum(len(summary.day.events) for summary in self.days)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "query": self.query,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "days": [summary.to_dict() for summary in self.days],
            "totals": self.totals.to_dict(),
            "record_count": self.record_count,
        }


@dataclass(frozen=True)
class JobSelection:
    job: JobRef
    task: Optional[TaskRef] = None


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise InputValidationError(f"Invalid date {value!r}") from exc


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise InputValidationError(f"Invalid timestamp {value!r}") from exc
