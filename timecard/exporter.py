from __future__ import annotations

import csv
import json
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .errors import ExportError, InputValidationError
from .logging import get_logger
from .models import DaySummary
from .summary import aggregate

logger = get_logger(__name__)

ReportRow = Dict[str, Any]

CSV_HEADERS = [
    "date",
    "day_status",
    "day_total_hours",
    "day_regular_hours",
    "day_overtime_hours",
    "day_double_time_hours",
    "event_id",
    "timestamp",
    "type",
    "job",
    "task",
    "latitude",
    "longitude",
    "address",
    "status",
]


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    REPORT = "report"


EXTENSIONS = {
    ExportFormat.CSV: ".csv",
    ExportFormat.JSON: ".json",
    ExportFormat.REPORT: ".pdf",
}


@dataclass(frozen=True)
class ExportResult:
    record_count: int
    location: Path
    format: ExportFormat

    def to_dict(self) -> Dict[str, Any]:
        return {"record_count": self.record_count, "location": str(self.location), "format": self.format.value}


def parse_format(value: "ExportFormat | str") -> ExportFormat:
    if isinstance(value, ExportFormat):
        return value
    key = str(value or "").strip().lower()
    if key == "pdf":
        key = ExportFormat.REPORT.value
    try:
        return ExportFormat(key)
    except ValueError as exc:
        raise InputValidationError(f"Unsupported export format {value!r}. Use csv, json or report") from exc


def _hours(value: float) -> str:
    return f"{value:.2f}"


def timecard_rows(days: Iterable[DaySummary]) -> List[ReportRow]:
    """One flat row per clock event, carrying its day's breakdown and status."""
    rows: List[ReportRow] = []
    for summary in days:
        for event in summary.day.events:
            rows.append(
                {
                    "date": summary.work_date.isoformat(),
                    "day_status": summary.status.value,
                    "day_total_hours": _hours(summary.hours.total),
                    "day_regular_hours": _hours(summary.hours.regular),
                    "day_overtime_hours": _hours(summary.hours.overtime),
                    "day_double_time_hours": _hours(summary.hours.double_time),
                    "event_id": event.id,
                    "timestamp": event.timestamp.isoformat(),
                    "type": event.kind,
                    "job": event.job.name if event.job else "",
                    "task": event.task.name if event.task else "",
                    "latitude": event.location.latitude if event.location else "",
                    "longitude": event.location.longitude if event.location else "",
                    "address": (event.location.address or "") if event.location else "",
                    "status": event.status.value,
                }
            )
    return rows


def _write_csv(days: Sequence[DaySummary], path: Path, title: str) -> None:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=CSV_HEADERS)
        writer.writeheader()
        for row in timecard_rows(days):
            writer.writerow(row)


def _write_json(days: Sequence[DaySummary], path: Path, title: str) -> None:
    payload = {
        "title": title,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "record_count": sum(len(summary.day.events) for summary in days),
        "totals": aggregate(days).to_dict(),
        "days": [summary.to_dict() for summary in days],
    }
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def _table_style() -> TableStyle:
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), colors.whitesmoke),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("LEFTPADDING", (0, 0), (-1, -1), 6),
            ("RIGHTPADDING", (0, 0), (-1, -1), 6),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]
    )


def _build_report_story(days: Sequence[DaySummary], title: str) -> List[Any]:
    styles = getSampleStyleSheet()
    header_style = ParagraphStyle("day_header", parent=styles["Heading3"], fontSize=11)
    body_style = ParagraphStyle("day_body", parent=styles["Normal"], fontSize=9.5)

    totals = aggregate(days)
    story: List[Any] = [Paragraph(escape(title), styles["Title"])]
    summary_table = Table(
        [
            ["Total", "Regular", "Overtime", "Double time"],
            [_hours(totals.total), _hours(totals.regular), _hours(totals.overtime), _hours(totals.double_time)],
        ],
        colWidths=[1.6 * inch] * 4,
    )
    summary_table.setStyle(_table_style())
    story.append(summary_table)
    story.append(Spacer(1, 10))

    for summary in days:
        story.append(HRFlowable(width="100%"))
        story.append(
            Paragraph(
                f"{summary.work_date.strftime('%A, %B %d, %Y')}: {_hours(summary.hours.total)} hours "
                f"({summary.status.value})",
                header_style,
            )
        )
        rows = [["Time", "Action", "Job", "Task"]]
        for event in summary.day.events:
            rows.append(
                [
                    event.timestamp.strftime("%I:%M %p"),
                    event.kind_label.upper(),
                    Paragraph(escape(event.job.name), body_style) if event.job else "-",
                    Paragraph(escape(event.task.name), body_style) if event.task else "-",
                ]
            )
        table = Table(rows, colWidths=[1.1 * inch, 1.4 * inch, 2.2 * inch, 2.2 * inch])
        table.setStyle(_table_style())
        story.append(table)
        story.append(Spacer(1, 8))

    return story


def _write_report(days: Sequence[DaySummary], path: Path, title: str) -> None:
    doc = SimpleDocTemplate(
        str(path),
        pagesize=letter,
        leftMargin=0.6 * inch,
        rightMargin=0.6 * inch,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
        title=title,
    )
    doc.build(_build_report_story(days, title))


WRITERS: Dict[ExportFormat, Callable[[Sequence[DaySummary], Path, str], None]] = {
    ExportFormat.CSV: _write_csv,
    ExportFormat.JSON: _write_json,
    ExportFormat.REPORT: _write_report,
}


def export_days(
    days: Iterable[DaySummary],
    fmt: "ExportFormat | str",
    output_dir: Path,
    title: str = "Timecard History",
    file_stem: str | None = None,
) -> ExportResult:
    """Write the given days to ``output_dir`` in one piece.

    Output goes to a temporary file beside the target and is renamed into
    place only after the writer finishes, so a failed export leaves nothing.
    """

    export_format = parse_format(fmt)
    day_list = list(days)
    record_count = sum(len(summary.day.events) for summary in day_list)
    if record_count == 0:
        raise ExportError("No timecard records to export")

    stem = file_stem or f"timecards_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    target = output_dir / f"{stem}{EXTENSIONS[export_format]}"
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(dir=output_dir, prefix=f".{stem}.", suffix=".tmp")
        os.close(handle)
    except OSError as exc:
        raise ExportError(f"Cannot write to {output_dir}: {exc.strerror or exc}") from exc

    temp_path = Path(temp_name)
    try:
        WRITERS[export_format](day_list, temp_path, title)
        os.replace(temp_path, target)
    except Exception as exc:
        temp_path.unlink(missing_ok=True)
        logger.error("export_failed", format=export_format.value, target=str(target), error=str(exc))
        raise ExportError(f"Failed to export timecards as {export_format.value}: {exc}") from exc

    logger.info("export_written", format=export_format.value, location=str(target), record_count=record_count)
    return ExportResult(record_count=record_count, location=target, format=export_format)
