"""
Customer Analytics

Batch RFM, segmentation, CLV and churn analysis over an orders frame.

Expected order columns: customer_id, placed_at, total, status,
[payment_status]. An optional customers frame (customer_id, [name]) adds
customers that never ordered.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import polars as pl
import structlog

from ..reporting.errors import DataUnavailable
from ..reporting.periods import DAY, as_utc
from ..sources.frames import normalize_datetime_column
from ..sources.validators import ValidationStatus, create_orders_validator
from .scoring import (
    CLVPrediction,
    ChurnRisk,
    CustomerSegment,
    RFMResult,
    RiskLevel,
    SegmentProfile,
    churn_risk,
    predict_clv,
    score_rfm,
    segment_customer,
)

logger = structlog.get_logger(__name__)

EXCLUDED_STATUSES = ["cancelled", "returned"]
PAID_STATUSES = ["paid", "partial"]
FULFILLED_STATUSES = ["confirmed", "delivered"]


def one_year_before(value: datetime) -> datetime:
    try:
        return value.replace(year=value.year - 1)
    except ValueError:
        # Feb 29
        return value.replace(year=value.year - 1, day=28)


@dataclass(frozen=True)
class CustomerAnalytics:
    customer_id: str
    name: Optional[str]
    rfm: RFMResult
    segment: SegmentProfile
    clv: CLVPrediction
    churn: ChurnRisk


@dataclass
class CustomerAnalyticsSummary:
    total_clv: int = 0
    average_clv: int = 0
    high_risk_count: int = 0
    churned_count: int = 0


@dataclass
class CustomerAnalyticsReport:
    total_customers: int
    customers: List[CustomerAnalytics] = field(default_factory=list)
    segments: Dict[CustomerSegment, List[str]] = field(default_factory=dict)
    summary: CustomerAnalyticsSummary = field(default_factory=CustomerAnalyticsSummary)


class CustomerAnalyzer:
    """
    Scores every customer in an orders frame.

    Eligible orders are neither cancelled nor returned, and are paid (fully
    or partially) or confirmed/delivered.

    Example:
        analyzer = CustomerAnalyzer(analysis_date=now)
        report = analyzer.analyze(orders_df, min_orders=1)
    """

    def __init__(self, analysis_date: datetime):
        self.analysis_date = as_utc(analysis_date)

    def _prepare(self, orders: pl.DataFrame) -> pl.DataFrame:
        df = normalize_datetime_column(orders, "placed_at")
        result = create_orders_validator().validate(df)
        if result.status == ValidationStatus.FAILED:
            raise DataUnavailable(
                "Order data failed validation: " + "; ".join(result.errors),
                details={"errors": result.errors},
            )

        for column in ("status", "payment_status"):
            if column not in df.columns:
                df = df.with_columns(pl.lit(None, dtype=pl.Utf8).alias(column))

        year_ago = one_year_before(self.analysis_date).replace(tzinfo=None)
        eligible = (
            ~pl.col("status").is_in(EXCLUDED_STATUSES).fill_null(False)
            & (
                pl.col("payment_status").is_in(PAID_STATUSES).fill_null(False)
                | pl.col("status").is_in(FULFILLED_STATUSES).fill_null(False)
            )
        )
        return df.with_columns(
            pl.col("customer_id").cast(pl.Utf8),
            eligible.alias("eligible"),
        ).with_columns(
            (pl.col("eligible") & (pl.col("placed_at") >= year_ago)).alias("recent"),
        )

    def aggregate(self, orders: pl.DataFrame) -> pl.DataFrame:
        """Per-customer order statistics"""
        return (
            self._prepare(orders)
            .group_by("customer_id")
            .agg([
                pl.col("placed_at").min().alias("first_order_at"),
                pl.col("placed_at").filter(pl.col("eligible")).max().alias("last_purchase_at"),
                pl.col("eligible").sum().alias("total_orders"),
                pl.col("total").filter(pl.col("eligible")).sum().alias("total_revenue"),
                pl.col("recent").sum().alias("frequency"),
                pl.col("total").filter(pl.col("recent")).sum().alias("monetary"),
            ])
            .sort("customer_id")
        )

    def _days_since(self, value: datetime) -> int:
        return math.floor((self.analysis_date - as_utc(value)) / DAY)

    def score(self, stats: Dict, name: Optional[str] = None) -> CustomerAnalytics:
        """Analytics for one row of ``aggregate`` output"""
        last_purchase = stats.get("last_purchase_at")
        rfm = score_rfm(
            recency=self._days_since(last_purchase) if last_purchase else 0,
            frequency=int(stats.get("frequency") or 0),
            monetary=float(stats.get("monetary") or 0),
            total_orders=int(stats.get("total_orders") or 0),
            total_revenue=float(stats.get("total_revenue") or 0),
            last_purchase_at=as_utc(last_purchase) if last_purchase else None,
        )
        segment = segment_customer(rfm)
        first_order = stats.get("first_order_at")
        clv = predict_clv(rfm, self._days_since(first_order) if first_order else None)
        return CustomerAnalytics(
            customer_id=stats["customer_id"],
            name=name,
            rfm=rfm,
            segment=segment,
            clv=clv,
            churn=churn_risk(rfm, segment),
        )

    def analyze(
        self,
        orders: pl.DataFrame,
        customers: Optional[pl.DataFrame] = None,
        min_orders: int = 0,
    ) -> CustomerAnalyticsReport:
        """
        Analyze every customer.

        Args:
            orders: Orders frame
            customers: Optional customer directory; customers without orders
                are scored with empty history
            min_orders: Customers with fewer eligible orders are left out

        Returns:
            Report with customers sorted by predicted CLV, highest first
        """
        stats = {row["customer_id"]: row for row in self.aggregate(orders).iter_rows(named=True)}

        names: Dict[str, Optional[str]] = {}
        if customers is not None:
            directory = customers.with_columns(pl.col("customer_id").cast(pl.Utf8))
            for row in directory.iter_rows(named=True):
                names[row["customer_id"]] = row.get("name")
                stats.setdefault(row["customer_id"], {"customer_id": row["customer_id"]})

        report = CustomerAnalyticsReport(
            total_customers=len(stats),
            segments={segment: [] for segment in CustomerSegment},
        )
        for customer_id, row in stats.items():
            analytics = self.score(row, names.get(customer_id))
            if analytics.rfm.total_orders < min_orders:
                continue
            report.customers.append(analytics)
            report.segments[analytics.segment.segment].append(customer_id)

            report.summary.total_clv += analytics.clv.predicted_clv
            if analytics.churn.risk_level in (RiskLevel.HIGH, RiskLevel.VERY_HIGH):
                report.summary.high_risk_count += 1
            if analytics.segment.segment == CustomerSegment.CHURNED:
                report.summary.churned_count += 1

        if report.customers:
            report.summary.average_clv = round(report.summary.total_clv / len(report.customers))
        report.customers.sort(key=lambda c: c.clv.predicted_clv, reverse=True)

        logger.info(
            f"Analyzed {len(report.customers)} customers",
            high_risk=report.summary.high_risk_count,
            churned=report.summary.churned_count,
        )
        return report
