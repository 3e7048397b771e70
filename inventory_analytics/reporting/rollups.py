"""
Rollup Aggregation

Groups product metrics by category, by supplier, or across the whole period,
and produces ranked rollups and the period summary.

Every product falls in exactly one group per dimension (products without a
category or supplier form a ``None`` group), so group counts always add up to
the number of metrics.
"""

from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import structlog

from .comparison import rollup_trend
from .enums import AgingCategory, RollupDimension, StockStatus, TurnoverCategory
from .errors import ComputationFailure
from .metrics import assign_ranks
from .models import PeriodSummary, ProductMetric, Rollup

logger = structlog.get_logger(__name__)

_KEY_FUNCS: Dict[RollupDimension, Callable[[ProductMetric], Optional[str]]] = {
    RollupDimension.CATEGORY: lambda m: m.category_id,
    RollupDimension.SUPPLIER: lambda m: m.supplier_id,
    RollupDimension.PERIOD: lambda m: None,
}


def _by_stock_value(rollup: Rollup) -> float:
    return rollup.total_stock_value


def group_metrics(
    metrics: Iterable[ProductMetric],
    dimension: RollupDimension,
) -> Dict[Optional[str], List[ProductMetric]]:
    """Group metrics by dimension key, groups in order of first appearance"""
    key_of = _KEY_FUNCS[dimension]
    groups: Dict[Optional[str], List[ProductMetric]] = {}
    for metric in metrics:
        groups.setdefault(key_of(metric), []).append(metric)
    return groups


def build_rollup(
    dimension: RollupDimension,
    key: Optional[str],
    members: Sequence[ProductMetric],
) -> Rollup:
    """Aggregate exactly ``members`` into one rollup"""
    count = len(members)

    def count_where(predicate: Callable[[ProductMetric], bool]) -> int:
        return sum(1 for m in members if predicate(m))

    return Rollup(
        dimension=dimension,
        key=key,
        product_count=count,
        total_stock_value=sum(m.stock_value for m in members),
        average_turnover_rate=(sum(m.turnover_rate for m in members) / count) if count else 0.0,
        total_potential_loss=sum(m.potential_loss for m in members),
        low_stock_products=count_where(lambda m: m.stock_status == StockStatus.LOW_STOCK),
        out_of_stock_products=count_where(lambda m: m.stock_status == StockStatus.OUT_OF_STOCK),
        overstocked_products=count_where(lambda m: m.stock_status == StockStatus.OVERSTOCKED),
        fast_moving_products=count_where(lambda m: m.turnover_category == TurnoverCategory.FAST),
        slow_moving_products=count_where(lambda m: m.turnover_category == TurnoverCategory.SLOW),
        dead_stock_products=count_where(lambda m: m.turnover_category == TurnoverCategory.DEAD),
        aging_products=count_where(lambda m: m.aging_category == AgingCategory.AGING),
        old_products=count_where(lambda m: m.aging_category == AgingCategory.OLD),
        very_old_products=count_where(lambda m: m.aging_category == AgingCategory.VERY_OLD),
    )


class RollupAggregator:
    """
    Builds ranked rollups for one dimension.

    Example:
        aggregator = RollupAggregator(RollupDimension.CATEGORY)
        categories = aggregator.aggregate(metrics, previous=previous_categories)
    """

    def __init__(
        self,
        dimension: RollupDimension,
        sort_key: Callable[[Rollup], float] = _by_stock_value,
    ):
        self.dimension = dimension
        self.sort_key = sort_key

    def aggregate(
        self,
        metrics: Sequence[ProductMetric],
        previous: Optional[Iterable[Rollup]] = None,
    ) -> Tuple[Rollup, ...]:
        """
        Roll up metrics and rank the groups.

        Args:
            metrics: Product metrics of the current period
            previous: Rollups of the previous period, used for trends

        Returns:
            Rollups ranked 1..N by the sort key, ties in first-seen order
        """
        groups = group_metrics(metrics, self.dimension)
        rollups = [build_rollup(self.dimension, key, members) for key, members in groups.items()]

        if previous is not None:
            previous_values = {r.key: r.total_stock_value for r in previous}
            rollups = [
                replace(r, trend=rollup_trend(r.total_stock_value, previous_values.get(r.key, 0.0)))
                for r in rollups
            ]

        covered = sum(r.product_count for r in rollups)
        if covered != len(metrics):
            raise ComputationFailure(
                f"{self.dimension.value} rollups cover {covered} of {len(metrics)} products",
            )

        ranked = assign_ranks(rollups, self.sort_key)
        logger.debug(
            f"Built {len(ranked)} {self.dimension.value} rollups",
            products=len(metrics),
        )
        return ranked


def summarize(metrics: Sequence[ProductMetric]) -> PeriodSummary:
    """Period-wide summary over every metric"""
    overall = build_rollup(RollupDimension.PERIOD, None, metrics)
    return PeriodSummary(
        total_products=overall.product_count,
        total_stock_value=overall.total_stock_value,
        average_turnover_rate=overall.average_turnover_rate,
        low_stock_products=overall.low_stock_products,
        out_of_stock_products=overall.out_of_stock_products,
        overstocked_products=overall.overstocked_products,
        fast_moving_products=overall.fast_moving_products,
        slow_moving_products=overall.slow_moving_products,
        dead_stock_products=overall.dead_stock_products,
        aging_products=overall.aging_products,
        old_products=overall.old_products,
        very_old_products=overall.very_old_products,
        total_potential_loss=overall.total_potential_loss,
    )


def check_summary_consistency(summary: PeriodSummary, metrics: Sequence[ProductMetric]) -> None:
    """Raise ComputationFailure if summary counts disagree with the metrics"""
    expected = {
        "total_products": len(metrics),
        "low_stock_products": StockStatus.LOW_STOCK,
        "out_of_stock_products": StockStatus.OUT_OF_STOCK,
        "overstocked_products": StockStatus.OVERSTOCKED,
        "fast_moving_products": TurnoverCategory.FAST,
        "slow_moving_products": TurnoverCategory.SLOW,
        "dead_stock_products": TurnoverCategory.DEAD,
        "aging_products": AgingCategory.AGING,
        "old_products": AgingCategory.OLD,
        "very_old_products": AgingCategory.VERY_OLD,
    }
    mismatches = {}
    for field_name, label in expected.items():
        if isinstance(label, StockStatus):
            want = sum(1 for m in metrics if m.stock_status == label)
        elif isinstance(label, TurnoverCategory):
            want = sum(1 for m in metrics if m.turnover_category == label)
        elif isinstance(label, AgingCategory):
            want = sum(1 for m in metrics if m.aging_category == label)
        else:
            want = label
        actual = getattr(summary, field_name)
        if actual != want:
            mismatches[field_name] = {"summary": actual, "metrics": want}

    if mismatches:
        raise ComputationFailure("Period summary disagrees with product metrics", details=mismatches)
