"""
Inventory Reporting Module
"""
from .enums import (
    AgingCategory,
    ExportFormat,
    Impact,
    InsightCategory,
    InsightType,
    PeriodType,
    ReportStatus,
    ReportType,
    RollupDimension,
    StockStatus,
    TurnoverCategory,
)
from .errors import (
    ComputationFailure,
    DataUnavailable,
    ErrorKind,
    InvalidConfiguration,
    InvalidReportState,
    ReportError,
)
from .config import IncludeMetrics, ReportConfig, ReportFilters, Thresholds
from .models import (
    Insight,
    PeriodComparison,
    PeriodSummary,
    ProductMetric,
    ProductSnapshot,
    Report,
    Rollup,
    SalesActivity,
)
from .classifiers import aging_category, stock_status, turnover_category
from .metrics import MetricAggregator
from .rollups import RollupAggregator, summarize
from .insights import InsightGenerator, generate_insights
from .comparison import compare_periods, percentage_change
from .generator import ReportGenerator, generate_report
from .lifecycle import (
    add_export,
    archive_report,
    complete_report,
    fail_report,
    mark_viewed,
    report_stats,
    set_favorite,
    start_report,
)
from .alerts import LowStockAlerter, StockAlert, summarize_alerts
from .serializers import report_to_dict

__all__ = [
    "AgingCategory",
    "ExportFormat",
    "Impact",
    "InsightCategory",
    "InsightType",
    "PeriodType",
    "ReportStatus",
    "ReportType",
    "RollupDimension",
    "StockStatus",
    "TurnoverCategory",
    "ComputationFailure",
    "DataUnavailable",
    "ErrorKind",
    "InvalidConfiguration",
    "InvalidReportState",
    "ReportError",
    "IncludeMetrics",
    "ReportConfig",
    "ReportFilters",
    "Thresholds",
    "Insight",
    "PeriodComparison",
    "PeriodSummary",
    "ProductMetric",
    "ProductSnapshot",
    "Report",
    "Rollup",
    "SalesActivity",
    "aging_category",
    "stock_status",
    "turnover_category",
    "MetricAggregator",
    "RollupAggregator",
    "summarize",
    "InsightGenerator",
    "generate_insights",
    "compare_periods",
    "percentage_change",
    "ReportGenerator",
    "generate_report",
    "add_export",
    "archive_report",
    "complete_report",
    "fail_report",
    "mark_viewed",
    "report_stats",
    "set_favorite",
    "start_report",
    "LowStockAlerter",
    "StockAlert",
    "summarize_alerts",
    "report_to_dict",
]
