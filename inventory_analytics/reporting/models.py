"""
Inventory Report Records

Typed records flowing through the reporting pipeline. Inputs (snapshots and
sales activity) are supplied by a data source; everything else is derived and
created fresh for each report. All records are immutable: lifecycle changes
produce new values with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from .config import ReportConfig
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
from .errors import ErrorKind
from .periods import DAY, as_utc, period_length_days


# =============================================================================
# INPUTS
# =============================================================================

@dataclass(frozen=True)
class ProductSnapshot:
    """Point-in-time stock record for one product"""
    product_id: str
    current_stock: int
    reorder_point: int
    unit_cost: float
    created_at: datetime
    min_stock: int = 0
    max_stock: Optional[int] = None
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None
    name: Optional[str] = None
    sku: Optional[str] = None


@dataclass(frozen=True)
class SalesActivity:
    """Units sold in a period and the most recent sale"""
    product_id: str
    units_sold: float = 0
    last_sold_at: Optional[datetime] = None


# =============================================================================
# DERIVED RECORDS
# =============================================================================

@dataclass(frozen=True)
class ProductTrend:
    """Movement of a product's stock and turnover versus the previous period"""
    previous_stock: float = 0
    stock_change: float = 0
    stock_change_percentage: float = 0
    previous_turnover_rate: float = 0
    turnover_change: float = 0
    turnover_change_percentage: float = 0


@dataclass(frozen=True)
class ProductMetric:
    """Per-product metrics and classifications for one report"""
    product_id: str
    current_stock: int
    reorder_point: int
    reorder_quantity: int
    units_sold: float
    turnover_rate: float
    days_to_sell: float
    days_in_stock: int
    last_activity_at: datetime  # last sale, or creation when never sold
    stock_value: float
    potential_loss: float
    stock_status: StockStatus
    turnover_category: TurnoverCategory
    aging_category: AgingCategory
    min_stock: int = 0
    max_stock: Optional[int] = None
    unit_cost: float = 0.0
    last_sold_at: Optional[datetime] = None
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None
    name: Optional[str] = None
    trend: ProductTrend = field(default_factory=ProductTrend)
    rank: int = 0


@dataclass(frozen=True)
class RollupTrend:
    """Stock value movement of a group versus the previous period"""
    previous_stock_value: float = 0.0
    stock_value_change: float = 0.0
    stock_value_change_percentage: float = 0.0


@dataclass(frozen=True)
class Rollup:
    """Aggregate over the products sharing a category, a supplier, or the whole period"""
    dimension: RollupDimension
    key: Optional[str]
    product_count: int = 0
    total_stock_value: float = 0.0
    average_turnover_rate: float = 0.0
    total_potential_loss: float = 0.0
    low_stock_products: int = 0
    out_of_stock_products: int = 0
    overstocked_products: int = 0
    fast_moving_products: int = 0
    slow_moving_products: int = 0
    dead_stock_products: int = 0
    aging_products: int = 0
    old_products: int = 0
    very_old_products: int = 0
    trend: Optional[RollupTrend] = None
    rank: int = 0


@dataclass(frozen=True)
class PeriodSummary:
    """Report-wide totals; the unit compared between periods"""
    total_products: int = 0
    total_stock_value: float = 0.0
    average_turnover_rate: float = 0.0
    low_stock_products: int = 0
    out_of_stock_products: int = 0
    overstocked_products: int = 0
    fast_moving_products: int = 0
    slow_moving_products: int = 0
    dead_stock_products: int = 0
    aging_products: int = 0
    old_products: int = 0
    very_old_products: int = 0
    total_potential_loss: float = 0.0


@dataclass(frozen=True)
class Insight:
    """Human readable finding derived from a summary"""
    type: InsightType
    category: InsightCategory
    title: str
    description: str
    impact: Impact = Impact.MEDIUM
    actionable: bool = False
    suggested_actions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetricComparison:
    """One tracked metric in the current and previous period"""
    current: float
    previous: float
    change: float
    percentage_change: float


@dataclass(frozen=True)
class PeriodComparison:
    """Current summary compared with the previous period's summary"""
    previous_summary: PeriodSummary
    total_products: MetricComparison
    total_stock_value: MetricComparison
    average_turnover_rate: MetricComparison
    low_stock_products: MetricComparison
    out_of_stock_products: MetricComparison
    previous_start: Optional[datetime] = None
    previous_end: Optional[datetime] = None


# =============================================================================
# REPORT
# =============================================================================

@dataclass(frozen=True)
class ExportRecord:
    """One export of a report"""
    format: ExportFormat
    exported_at: datetime
    exported_by: str
    file_size: Optional[int] = None
    download_url: Optional[str] = None


@dataclass(frozen=True)
class Report:
    """
    Inventory report aggregate.

    Created in ``generating`` state and moved to ``completed`` or ``failed``
    by the generator. A failed report carries only its failure reason and
    kind, never metrics.
    """
    report_id: str
    report_name: str
    status: ReportStatus
    generated_by: str
    generated_at: datetime
    report_type: Optional[ReportType] = None
    period_type: Optional[PeriodType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    config: Optional[ReportConfig] = None

    summary: Optional[PeriodSummary] = None
    stock_levels: Tuple[ProductMetric, ...] = ()
    turnover_rates: Tuple[ProductMetric, ...] = ()
    aging_analysis: Tuple[ProductMetric, ...] = ()
    category_performance: Tuple[Rollup, ...] = ()
    supplier_performance: Tuple[Rollup, ...] = ()
    comparison: Optional[PeriodComparison] = None
    insights: Tuple[Insight, ...] = ()

    failure_reason: Optional[str] = None
    failure_kind: Optional[ErrorKind] = None
    completed_at: Optional[datetime] = None

    # Audit metadata
    last_viewed_at: Optional[datetime] = None
    view_count: int = 0
    is_favorite: bool = False
    tags: Tuple[str, ...] = ()
    notes: Optional[str] = None
    exports: Tuple[ExportRecord, ...] = ()

    @property
    def duration_days(self) -> int:
        """Length of the reporting window in days"""
        if self.start_date is None or self.end_date is None:
            return 0
        return period_length_days(self.start_date, self.end_date)

    def age_in_hours(self, now: datetime) -> int:
        """Whole hours since the report was generated"""
        return int((as_utc(now) - as_utc(self.generated_at)) / (DAY / 24))

    @property
    def is_completed(self) -> bool:
        return self.status == ReportStatus.COMPLETED
