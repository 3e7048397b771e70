"""
Stock, turnover and aging classifiers.

Pure functions of their arguments. Inputs are assumed validated by the caller;
negative or NaN values fall through to whichever branch their comparisons hit.
"""

from .enums import AgingCategory, StockStatus, TurnoverCategory

# Stock above this multiple of the reorder point is overstocked
OVERSTOCK_MULTIPLIER = 3


def stock_status(current_stock: float, reorder_point: float) -> StockStatus:
    """Classify current stock against the reorder point"""
    if current_stock == 0:
        return StockStatus.OUT_OF_STOCK
    if current_stock <= reorder_point:
        return StockStatus.LOW_STOCK
    if current_stock > reorder_point * OVERSTOCK_MULTIPLIER:
        return StockStatus.OVERSTOCKED
    return StockStatus.IN_STOCK


def turnover_category(
    turnover_rate: float,
    fast_threshold: float,
    slow_threshold: float,
) -> TurnoverCategory:
    """
    Classify an annualized turnover rate.

    ``fast`` is checked before ``slow``, so with crossing thresholds a rate
    satisfying both is fast. Report configs reject such thresholds.
    """
    if turnover_rate == 0:
        return TurnoverCategory.DEAD
    if turnover_rate >= fast_threshold:
        return TurnoverCategory.FAST
    if turnover_rate <= slow_threshold:
        return TurnoverCategory.SLOW
    return TurnoverCategory.MEDIUM


def aging_category(
    days_in_stock: float,
    aging_threshold: float,
    old_threshold: float,
    very_old_threshold: float,
) -> AgingCategory:
    """Classify days since last sale, oldest bucket first"""
    if days_in_stock > very_old_threshold:
        return AgingCategory.VERY_OLD
    if days_in_stock > old_threshold:
        return AgingCategory.OLD
    if days_in_stock > aging_threshold:
        return AgingCategory.AGING
    return AgingCategory.NEW
