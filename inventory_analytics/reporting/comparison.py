"""
Period Comparison

Diffs the current period summary against the previous one. Percentage changes
never divide by zero: a zero previous value yields 0 when the current value is
also zero, and 100 otherwise.
"""

from datetime import datetime
from typing import Optional

from .models import MetricComparison, PeriodComparison, PeriodSummary, ProductTrend, RollupTrend


def percentage_change(current: float, previous: float) -> float:
    """Relative change in percent, with the zero-previous rule applied"""
    if previous == 0:
        return 0.0 if current == 0 else 100.0
    return ((current - previous) / previous) * 100


def compare_metric(current: float, previous: float) -> MetricComparison:
    """Current vs previous value of one tracked metric"""
    return MetricComparison(
        current=current,
        previous=previous,
        change=current - previous,
        percentage_change=percentage_change(current, previous),
    )


def compare_periods(
    current: PeriodSummary,
    previous: PeriodSummary,
    previous_start: Optional[datetime] = None,
    previous_end: Optional[datetime] = None,
) -> PeriodComparison:
    """Compare two period summaries metric by metric"""
    return PeriodComparison(
        previous_summary=previous,
        total_products=compare_metric(current.total_products, previous.total_products),
        total_stock_value=compare_metric(current.total_stock_value, previous.total_stock_value),
        average_turnover_rate=compare_metric(
            current.average_turnover_rate,
            previous.average_turnover_rate,
        ),
        low_stock_products=compare_metric(current.low_stock_products, previous.low_stock_products),
        out_of_stock_products=compare_metric(
            current.out_of_stock_products,
            previous.out_of_stock_products,
        ),
        previous_start=previous_start,
        previous_end=previous_end,
    )


def product_trend(
    current_stock: float,
    previous_stock: float,
    turnover_rate: float,
    previous_turnover_rate: float,
) -> ProductTrend:
    return ProductTrend(
        previous_stock=previous_stock,
        stock_change=current_stock - previous_stock,
        stock_change_percentage=percentage_change(current_stock, previous_stock),
        previous_turnover_rate=previous_turnover_rate,
        turnover_change=turnover_rate - previous_turnover_rate,
        turnover_change_percentage=percentage_change(turnover_rate, previous_turnover_rate),
    )


def rollup_trend(stock_value: float, previous_stock_value: float) -> RollupTrend:
    return RollupTrend(
        previous_stock_value=previous_stock_value,
        stock_value_change=stock_value - previous_stock_value,
        stock_value_change_percentage=percentage_change(stock_value, previous_stock_value),
    )
