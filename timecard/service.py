from __future__ import annotations
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Protocol

from .approval import ApprovalWorkflow, SubmissionGateway, SubmissionResult
from .config import TimecardSettings
from .errors import FetchError, TimecardError
from .exporter import ExportFormat, ExportResult, export_days
from .filters import SUNDAY, Period, filter_events, parse_period, period_bounds
from .logging import get_logger
from .models import ClockEvent, TimecardView
from .overtime import DEFAULT_RULE, DailyTierRule
from .storage import EventStore, StoreSubmissionGateway
from .summary import aggregate, build_day_summaries

logger = get_logger(__name__)


class EventSource(Protocol):
    def fetch_events(self) -> List[ClockEvent]:
        ...


def build_view(
    events: List[ClockEvent],
    period: "Period | str",
    query: Optional[str],
    now: "datetime | date",
    rule: DailyTierRule = DEFAULT_RULE,
    week_start: int = SUNDAY,
) -> TimecardView:
    """Run filter, grouping, hours and classification over one event snapshot."""

    selected = parse_period(period)
    start, end = period_bounds(selected, now, week_start)
    filtered = filter_events(events, selected, query, now, week_start)
    days = build_day_summaries(filtered, rule)
    return TimecardView(
        period=selected.value,
        query=(query or "").strip(),
        start=start,
        end=end,
        days=tuple(days),
        totals=aggregate(days),
    )


class TimecardService:
    """Entry point shared by the CLI and the HTTP API.

    Every ``load`` fetches a fresh event snapshot; nothing is cached between
    calls, so each consumer refreshes by loading again.
    """

    def __init__(
        self,
        source: EventSource,
        gateway: SubmissionGateway,
        rule: DailyTierRule = DEFAULT_RULE,
        week_start: int = SUNDAY,
        export_dir: Path = Path("exports"),
    ) -> None:
        self.source = source
        self.rule = rule
        self.week_start = week_start
        self.export_dir = export_dir
        self.workflow = ApprovalWorkflow(self.fetch_events, gateway)

    def fetch_events(self) -> List[ClockEvent]:
        try:
            return list(self.source.fetch_events())
        except FetchError:
            raise
        except (OSError, TimecardError) as exc:
            raise FetchError(f"Failed to load timecard history: {exc}") from exc

    def load(
        self,
        period: "Period | str" = Period.WEEK,
        query: Optional[str] = None,
        now: "datetime | date | None" = None,
    ) -> TimecardView:
        reference = now or datetime.now().astimezone()
        try:
            events = self.fetch_events()
        except FetchError as exc:
            logger.error("timecards_load_failed", error=str(exc))
            raise
        view = build_view(events, period, query, reference, self.rule, self.week_start)
        logger.info(
            "timecards_loaded",
            period=view.period,
            query=view.query,
            days=len(view.days),
            records=view.record_count,
            total_hours=round(view.totals.total, 2),
        )
        return view

    async def submit(self, day: date) -> SubmissionResult:
        return await self.workflow.submit(day)

    def export(
        self,
        view: TimecardView,
        fmt: "ExportFormat | str",
        output_dir: Optional[Path] = None,
    ) -> ExportResult:
        return export_days(view.days, fmt, output_dir or self.export_dir)


def build_service(settings: TimecardSettings) -> TimecardService:
    store = EventStore(settings.store_path)
    return TimecardService(
        store,
        StoreSubmissionGateway(store),
        rule=settings.overtime_rule(),
        week_start=settings.week_start,
        export_dir=settings.export_dir,
    )
