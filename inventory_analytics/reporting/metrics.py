"""
Product Metric Aggregation

Turns one product snapshot and its sales activity into a ProductMetric:
- Annualized turnover rate and days-to-sell
- Days in stock since the last sale (or since creation)
- Stock value and markdown-risk potential loss
- Stock, turnover and aging classifications

Also provides the ranking helpers shared by every ranked list in a report.
"""

import math
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

import structlog

from .classifiers import aging_category, stock_status, turnover_category
from .config import ReportFilters, Thresholds
from .errors import ComputationFailure
from .models import ProductMetric, ProductSnapshot, SalesActivity
from .periods import DAY, as_utc

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DAYS_PER_YEAR = 365

# Reported as days-to-sell for products that did not sell at all
NEVER_SELLS_DAYS = 999

# Markdown-risk heuristic: share of stock value at risk by days in stock
VERY_OLD_LOSS_DAYS = 365
VERY_OLD_LOSS_RATE = 0.5
OLD_LOSS_DAYS = 180
OLD_LOSS_RATE = 0.2

# Suggested reorder quantity as a multiple of the reorder point
REORDER_QUANTITY_MULTIPLIER = 2


def calculate_turnover_rate(units_sold: float, current_stock: float, period_days: int) -> float:
    """Units sold per year divided by stock on hand; 0 when nothing is on hand"""
    if current_stock <= 0 or period_days <= 0:
        return 0.0
    period_years = period_days / DAYS_PER_YEAR
    return (units_sold / period_years) / current_stock


def calculate_days_to_sell(turnover_rate: float) -> float:
    """Days needed to sell through current stock at the given turnover"""
    if turnover_rate > 0:
        return DAYS_PER_YEAR / turnover_rate
    return float(NEVER_SELLS_DAYS)


def calculate_days_in_stock(reference: datetime, now: datetime) -> int:
    """Whole days (rounded up) between ``reference`` and ``now``"""
    return math.ceil((as_utc(now) - as_utc(reference)) / DAY)


def calculate_potential_loss(stock_value: float, days_in_stock: int) -> float:
    """Stock value likely lost to markdowns given how long it has sat"""
    if days_in_stock > VERY_OLD_LOSS_DAYS:
        return stock_value * VERY_OLD_LOSS_RATE
    if days_in_stock > OLD_LOSS_DAYS:
        return stock_value * OLD_LOSS_RATE
    return 0.0


class MetricAggregator:
    """
    Computes ProductMetrics for one reporting period.

    The evaluation instant ``now`` is explicit so that identical inputs always
    produce identical metrics.

    Example:
        aggregator = MetricAggregator(Thresholds(), period_days=30, now=now)
        metrics = aggregator.compute_all(snapshots, activity_by_product)
    """

    def __init__(self, thresholds: Thresholds, period_days: int, now: datetime):
        self.thresholds = thresholds
        self.period_days = period_days
        self.now = as_utc(now)

    def compute(
        self,
        snapshot: ProductSnapshot,
        activity: Optional[SalesActivity] = None,
    ) -> ProductMetric:
        """Compute the metric for a single product"""
        units_sold = activity.units_sold if activity else 0
        last_sold_at = activity.last_sold_at if activity else None
        last_activity_at = as_utc(last_sold_at or snapshot.created_at)

        rate = calculate_turnover_rate(units_sold, snapshot.current_stock, self.period_days)
        days_in_stock = calculate_days_in_stock(last_activity_at, self.now)
        stock_value = snapshot.current_stock * snapshot.unit_cost

        return ProductMetric(
            product_id=snapshot.product_id,
            current_stock=snapshot.current_stock,
            reorder_point=snapshot.reorder_point,
            reorder_quantity=snapshot.reorder_point * REORDER_QUANTITY_MULTIPLIER,
            units_sold=units_sold,
            turnover_rate=rate,
            days_to_sell=calculate_days_to_sell(rate),
            days_in_stock=days_in_stock,
            last_activity_at=last_activity_at,
            stock_value=stock_value,
            potential_loss=calculate_potential_loss(stock_value, days_in_stock),
            stock_status=stock_status(snapshot.current_stock, snapshot.reorder_point),
            turnover_category=turnover_category(
                rate,
                self.thresholds.fast_turnover,
                self.thresholds.slow_turnover,
            ),
            aging_category=aging_category(
                days_in_stock,
                self.thresholds.aging,
                self.thresholds.old,
                self.thresholds.very_old,
            ),
            min_stock=snapshot.min_stock,
            max_stock=snapshot.max_stock,
            unit_cost=snapshot.unit_cost,
            last_sold_at=as_utc(last_sold_at) if last_sold_at else None,
            category_id=snapshot.category_id,
            supplier_id=snapshot.supplier_id,
            name=snapshot.name,
        )

    def compute_all(
        self,
        snapshots: Iterable[ProductSnapshot],
        activity: Mapping[str, SalesActivity],
    ) -> List[ProductMetric]:
        """Compute metrics for every snapshot, in input order"""
        metrics = [self.compute(s, activity.get(s.product_id)) for s in snapshots]
        logger.debug(
            f"Computed metrics for {len(metrics)} products",
            period_days=self.period_days,
        )
        return metrics


def filter_metrics(
    metrics: Iterable[ProductMetric],
    filters: ReportFilters,
) -> List[ProductMetric]:
    """Keep metrics matching the status, turnover and aging filters (empty = all)"""
    statuses = set(filters.stock_status)
    turnovers = set(filters.turnover_ranges)
    agings = set(filters.aging_ranges)

    return [
        m for m in metrics
        if (not statuses or m.stock_status in statuses)
        and (not turnovers or m.turnover_category in turnovers)
        and (not agings or m.aging_category in agings)
    ]


def assign_ranks(items: Iterable[T], key: Callable[[T], float]) -> Tuple[T, ...]:
    """
    Sort descending by ``key`` and number the result 1..N.

    The sort is stable, so ties keep their input order.
    """
    ordered = sorted(items, key=key, reverse=True)
    return tuple(replace(item, rank=position) for position, item in enumerate(ordered, start=1))


def check_rank_contiguity(items: Sequence, list_name: str = "items") -> None:
    """Raise ComputationFailure unless ranks are exactly 1..N in order"""
    ranks = [item.rank for item in items]
    expected = list(range(1, len(items) + 1))
    if ranks != expected:
        raise ComputationFailure(
            f"Ranks of {list_name} are not contiguous",
            details={"ranks": ranks},
        )
