"""
Report lifecycle commands.

Each command takes a Report and returns a new one; nothing is mutated in
place. Persisting the result is the caller's concern.

    generating -> completed -> archived
    generating -> failed    -> archived
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, Iterable, Optional

from .enums import ExportFormat, ReportStatus
from .errors import InvalidReportState, ReportError
from .models import ExportRecord, Report
from .periods import as_utc

_VIEWABLE = (ReportStatus.COMPLETED, ReportStatus.ARCHIVED)


def _require_status(report: Report, allowed, action: str) -> None:
    if report.status not in allowed:
        raise InvalidReportState(
            f"Cannot {action} report {report.report_id} in status '{report.status.value}'",
            details={"report_id": report.report_id, "status": report.status.value},
        )


def start_report(
    report_id: str,
    generated_by: str,
    now: datetime,
    report_name: str = "Inventory Report",
) -> Report:
    """New report in ``generating`` state"""
    now = as_utc(now)
    return Report(
        report_id=report_id,
        report_name=report_name,
        status=ReportStatus.GENERATING,
        generated_by=generated_by,
        generated_at=now,
        last_viewed_at=now,
    )


def complete_report(report: Report, now: datetime, **results) -> Report:
    """Attach computed results and mark the report completed"""
    _require_status(report, (ReportStatus.GENERATING,), "complete")
    return replace(report, status=ReportStatus.COMPLETED, completed_at=as_utc(now), **results)


def fail_report(report: Report, error: ReportError) -> Report:
    """Mark the report failed, keeping only the reason and error kind"""
    _require_status(report, (ReportStatus.GENERATING,), "fail")
    return replace(
        report,
        status=ReportStatus.FAILED,
        failure_reason=error.message,
        failure_kind=error.kind,
        summary=None,
        stock_levels=(),
        turnover_rates=(),
        aging_analysis=(),
        category_performance=(),
        supplier_performance=(),
        comparison=None,
        insights=(),
    )


def archive_report(report: Report) -> Report:
    _require_status(report, (ReportStatus.COMPLETED, ReportStatus.FAILED), "archive")
    return replace(report, status=ReportStatus.ARCHIVED)


def mark_viewed(report: Report, now: datetime) -> Report:
    """Increment the view count and stamp the view time"""
    _require_status(report, _VIEWABLE, "view")
    return replace(report, view_count=report.view_count + 1, last_viewed_at=as_utc(now))


def add_export(
    report: Report,
    export_format: ExportFormat,
    exported_by: str,
    now: datetime,
    file_size: Optional[int] = None,
    download_url: Optional[str] = None,
) -> Report:
    """Append an entry to the report's export log"""
    _require_status(report, _VIEWABLE, "export")
    record = ExportRecord(
        format=ExportFormat(export_format),
        exported_at=as_utc(now),
        exported_by=exported_by,
        file_size=file_size,
        download_url=download_url,
    )
    return replace(report, exports=report.exports + (record,))


def set_favorite(report: Report, is_favorite: bool = True) -> Report:
    _require_status(report, _VIEWABLE, "favorite")
    return replace(report, is_favorite=is_favorite)


@dataclass
class ReportStats:
    """Usage statistics over a collection of reports"""
    total_reports: int = 0
    completed_reports: int = 0
    total_views: int = 0
    type_breakdown: Dict[str, int] = field(default_factory=dict)
    period_breakdown: Dict[str, int] = field(default_factory=dict)


def report_stats(
    reports: Iterable[Report],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> ReportStats:
    """
    Count reports, completions, views and type/period mix.

    When both ``start`` and ``end`` are given only reports generated within
    that window are counted.
    """
    selected = list(reports)
    if start is not None and end is not None:
        start, end = as_utc(start), as_utc(end)
        selected = [r for r in selected if start <= as_utc(r.generated_at) <= end]

    types = Counter(r.report_type.value for r in selected if r.report_type is not None)
    periods = Counter(r.period_type.value for r in selected if r.period_type is not None)

    return ReportStats(
        total_reports=len(selected),
        completed_reports=sum(1 for r in selected if r.status == ReportStatus.COMPLETED),
        total_views=sum(r.view_count for r in selected),
        type_breakdown=dict(types),
        period_breakdown=dict(periods),
    )
