"""
Low-Stock Alerts

Flags products that are out of stock, at or below their minimum stock, or at
or below their reorder point, and estimates how soon each will run out from
sales over a trailing window.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, List, Mapping, Optional, Sequence

import structlog

from .config import ReportFilters
from .models import ProductSnapshot, SalesActivity
from .periods import as_utc

if TYPE_CHECKING:
    from ..sources.base import InventoryDataSource

logger = structlog.get_logger(__name__)

# Reported when nothing sold during the window
NO_SALES_DAYS_UNTIL_OUT = 90


class AlertLevel(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class AlertStockStatus(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    CRITICAL = "critical"
    LOW_STOCK = "low_stock"


@dataclass(frozen=True)
class StockAlert:
    """Alert for one product"""
    product_id: str
    name: Optional[str]
    sku: Optional[str]
    category_id: Optional[str]
    current_stock: int
    reorder_point: int
    min_stock: int
    max_stock: Optional[int]
    reorder_quantity: int
    alert_level: AlertLevel
    stock_status: AlertStockStatus
    days_until_out_of_stock: int
    suggested_reorder_quantity: int
    urgency: int


@dataclass(frozen=True)
class AlertSummary:
    total: int = 0
    critical: int = 0
    warning: int = 0
    out_of_stock: int = 0
    low_stock: int = 0


def days_until_out_of_stock(current_stock: int, units_sold: float, window_days: int) -> int:
    """Days of stock left at the window's average daily sales"""
    if units_sold <= 0 or window_days <= 0:
        return NO_SALES_DAYS_UNTIL_OUT
    daily_sales = units_sold / window_days
    return max(0, math.floor(current_stock / daily_sales))


def suggested_reorder_quantity(
    current_stock: int,
    reorder_point: int,
    default_quantity: int,
    max_stock: Optional[int] = None,
) -> int:
    """Fill up to max stock when known, otherwise back above the reorder point plus a buffer"""
    if max_stock:
        return max(default_quantity, max_stock - current_stock)
    return max(default_quantity, reorder_point - current_stock + default_quantity)


def urgency_score(current_stock: int, reorder_point: int, days_until_out: int) -> int:
    """Urgency from 0 to 100, higher is more urgent"""
    if current_stock == 0:
        return 100
    if days_until_out <= 3:
        return 90
    if days_until_out <= 7:
        return 75
    if days_until_out <= 14:
        return 60
    if current_stock <= reorder_point * 0.5:
        return 50
    return 30


class LowStockAlerter:
    """
    Builds sorted low-stock alerts.

    Example:
        alerter = LowStockAlerter(window_days=30, default_reorder_quantity=50)
        alerts = alerter.evaluate(snapshots, activity_by_product)
        summary = summarize_alerts(alerts)
    """

    def __init__(
        self,
        window_days: int = 30,
        default_reorder_quantity: int = 50,
        include_out_of_stock: bool = True,
        include_critical: bool = True,
        include_warning: bool = True,
    ):
        self.window_days = window_days
        self.default_reorder_quantity = default_reorder_quantity
        self.include_out_of_stock = include_out_of_stock
        self.include_critical = include_critical
        self.include_warning = include_warning

    def _classify(self, snapshot: ProductSnapshot):
        stock = snapshot.current_stock
        if stock == 0 and self.include_out_of_stock:
            return AlertLevel.CRITICAL, AlertStockStatus.OUT_OF_STOCK
        if stock <= snapshot.min_stock and self.include_critical:
            return AlertLevel.CRITICAL, AlertStockStatus.CRITICAL
        if stock <= snapshot.reorder_point and self.include_warning:
            return AlertLevel.WARNING, AlertStockStatus.LOW_STOCK
        return None

    def evaluate(
        self,
        snapshots: Sequence[ProductSnapshot],
        activity: Mapping[str, SalesActivity],
    ) -> List[StockAlert]:
        """
        Alerts for every flagged product.

        Critical alerts come first, then warnings; within a level alerts are
        ordered by days until out of stock, ascending.
        """
        alerts = []
        for snapshot in snapshots:
            classified = self._classify(snapshot)
            if classified is None:
                continue
            level, status = classified

            sold = activity.get(snapshot.product_id)
            days_left = days_until_out_of_stock(
                snapshot.current_stock,
                sold.units_sold if sold else 0,
                self.window_days,
            )
            alerts.append(StockAlert(
                product_id=snapshot.product_id,
                name=snapshot.name,
                sku=snapshot.sku,
                category_id=snapshot.category_id,
                current_stock=snapshot.current_stock,
                reorder_point=snapshot.reorder_point,
                min_stock=snapshot.min_stock,
                max_stock=snapshot.max_stock,
                reorder_quantity=self.default_reorder_quantity,
                alert_level=level,
                stock_status=status,
                days_until_out_of_stock=days_left,
                suggested_reorder_quantity=suggested_reorder_quantity(
                    snapshot.current_stock,
                    snapshot.reorder_point,
                    self.default_reorder_quantity,
                    snapshot.max_stock,
                ),
                urgency=urgency_score(snapshot.current_stock, snapshot.reorder_point, days_left),
            ))

        alerts.sort(key=lambda a: (a.alert_level != AlertLevel.CRITICAL, a.days_until_out_of_stock))
        logger.info(f"Found {len(alerts)} low stock alerts", products=len(snapshots))
        return alerts

    def collect(
        self,
        source: "InventoryDataSource",
        now: datetime,
        filters: Optional[ReportFilters] = None,
    ) -> List[StockAlert]:
        """Fetch current stock and trailing sales from a data source and evaluate"""
        now = as_utc(now)
        snapshots = source.fetch_product_snapshots(filters or ReportFilters(), now)
        activity = source.fetch_sales_activity(
            [s.product_id for s in snapshots],
            now - timedelta(days=self.window_days),
            now,
        )
        return self.evaluate(snapshots, activity)


def summarize_alerts(alerts: Sequence[StockAlert]) -> AlertSummary:
    return AlertSummary(
        total=len(alerts),
        critical=sum(1 for a in alerts if a.alert_level == AlertLevel.CRITICAL),
        warning=sum(1 for a in alerts if a.alert_level == AlertLevel.WARNING),
        out_of_stock=sum(1 for a in alerts if a.stock_status == AlertStockStatus.OUT_OF_STOCK),
        low_stock=sum(1 for a in alerts if a.stock_status == AlertStockStatus.LOW_STOCK),
    )
