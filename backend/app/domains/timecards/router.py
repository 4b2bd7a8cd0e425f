from datetime import date, datetime
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from app.api.deps import get_timecard_service
from app.core.observability import get_meter, get_tracer
from timecard.errors import ExportError, FetchError, InputValidationError
from timecard.logging import get_logger
from timecard.models import TimecardView
from timecard.service import TimecardService

router = APIRouter(prefix="/timecards", tags=["timecards"])
logger = get_logger(__name__)
tracer = get_tracer(__name__)
submissions_counter = get_meter(__name__).create_counter(
    "timecard.submissions", description="Timecard submissions by outcome"
)

PeriodParam = Literal["week", "month", "unrestricted", "all"]


class HoursOut(BaseModel):
    total: float
    regular: float
    overtime: float
    double_time: float


class SummaryOut(HoursOut):
    period: str
    start: date | None = None
    end: date | None = None


class SubmissionOut(BaseModel):
    day: date
    status: str


class ExportRequest(BaseModel):
    format: Literal["csv", "json", "report"] = "csv"
    period: PeriodParam = "week"
    q: str = ""
    now: datetime | None = None


class ExportOut(BaseModel):
    record_count: int
    location: str
    format: str


def _load_view(service: TimecardService, period: str, q: str, now: datetime | None) -> TimecardView:
    with tracer.start_as_current_span("timecards.load"):
        try:
            return service.load(period, q, now)
        except FetchError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        except InputValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("")
def list_timecards(
    period: PeriodParam = "week",
    q: str = Query(default="", description="Match job, task or action"),
    now: datetime | None = None,
    service: TimecardService = Depends(get_timecard_service),
) -> dict:
    return _load_view(service, period, q, now).to_dict()


@router.get("/summary", response_model=SummaryOut)
def timecard_summary(
    period: PeriodParam = "week",
    q: str = "",
    now: datetime | None = None,
    service: TimecardService = Depends(get_timecard_service),
) -> SummaryOut:
    view = _load_view(service, period, q, now)
    return SummaryOut(period=view.period, start=view.start, end=view.end, **view.totals.to_dict())


@router.post("/{day}/submit", response_model=SubmissionOut)
async def submit_timecard(day: date, service: TimecardService = Depends(get_timecard_service)) -> SubmissionOut:
    with tracer.start_as_current_span("timecards.submit"):
        try:
            result = await service.submit(day)
        except FetchError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc

    outcome = "submitted" if result.ok else ("conflict" if result.conflict else "failed")
    submissions_counter.add(1, {"outcome": outcome})
    if result.conflict:
        raise HTTPException(status_code=409, detail=f"Timecard {result.reason}")
    if not result.ok:
        raise HTTPException(status_code=404, detail=result.reason)
    return SubmissionOut(day=day, status="submitted")


@router.post("/export", response_model=ExportOut)
def export_timecards(payload: ExportRequest, service: TimecardService = Depends(get_timecard_service)) -> ExportOut:
    view = _load_view(service, payload.period, payload.q, payload.now)
    with tracer.start_as_current_span("timecards.export"):
        try:
            result = service.export(view, payload.format)
        except ExportError as exc:
            logger.warning("export_rejected", reason=str(exc))
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ExportOut(**result.to_dict())
