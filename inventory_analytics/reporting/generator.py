"""
Report Generation Pipeline

Orchestrates one report:
1. Validate the configuration and resolve the reporting window
2. Fetch snapshots and sales activity for the current and previous periods
3. Compute, filter and rank product metrics
4. Roll up by category and supplier, summarize, compare and derive insights

Invalid configuration and unavailable data end in a ``failed`` report. A broken
internal invariant raises ComputationFailure and is never converted.
"""

from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Set, Tuple, Union

import structlog

from .comparison import compare_periods, product_trend
from .config import ReportConfig
from .enums import ReportType, RollupDimension
from .errors import DataUnavailable, InvalidConfiguration
from .insights import InsightGenerator
from .lifecycle import complete_report, fail_report, start_report
from .metrics import MetricAggregator, assign_ranks, check_rank_contiguity, filter_metrics
from .models import ProductMetric, Report
from .periods import (
    as_utc,
    generate_report_id,
    generate_report_name,
    period_length_days,
    previous_period,
    resolve_date_range,
)
from .rollups import RollupAggregator, check_summary_consistency, summarize

if TYPE_CHECKING:
    from ..sources.base import InventoryDataSource

logger = structlog.get_logger(__name__)

STOCK_LEVELS = "stock_levels"
TURNOVER_RATES = "turnover_rates"
AGING_ANALYSIS = "aging_analysis"

# Sort key of each ranked product list
LIST_SORT_KEYS: Dict[str, Callable[[ProductMetric], float]] = {
    STOCK_LEVELS: lambda m: m.current_stock,
    TURNOVER_RATES: lambda m: m.turnover_rate,
    AGING_ANALYSIS: lambda m: m.days_in_stock,
}

_SINGLE_LIST_TYPES = {
    ReportType.STOCK_LEVELS: STOCK_LEVELS,
    ReportType.TURNOVER_RATES: TURNOVER_RATES,
    ReportType.AGING_ANALYSIS: AGING_ANALYSIS,
}


def report_sections(config: ReportConfig) -> Tuple[Set[str], bool]:
    """
    Ranked lists and rollups carried by a report of the configured type.

    Returns:
        (list names, whether category/supplier rollups are included)
    """
    if config.report_type in _SINGLE_LIST_TYPES:
        return {_SINGLE_LIST_TYPES[config.report_type]}, False

    if config.report_type == ReportType.CUSTOM:
        enabled = config.include_metrics
        lists = {name for name in LIST_SORT_KEYS if getattr(enabled, name)}
        return lists, True

    return set(LIST_SORT_KEYS), True


class ReportGenerator:
    """
    Generates inventory reports from a data source.

    The evaluation instant is always passed in; the generator never reads the
    clock, so the same inputs give the same report.

    Example:
        generator = ReportGenerator(FrameDataSource.from_directory("./data"))
        report = generator.generate(
            {"report_type": "comprehensive", "period_type": "monthly"},
            generated_by="analyst@example.com",
            now=datetime.now(timezone.utc),
        )
    """

    def __init__(
        self,
        source: "InventoryDataSource",
        insight_generator: Optional[InsightGenerator] = None,
    ):
        self.source = source
        self.insight_generator = insight_generator or InsightGenerator()

    def generate(
        self,
        raw_config: Union[ReportConfig, Mapping[str, Any], None],
        generated_by: str,
        now: datetime,
        report_id: Optional[str] = None,
    ) -> Report:
        """
        Generate a report.

        Args:
            raw_config: ReportConfig or raw mapping of report settings
            generated_by: User or system requesting the report
            now: Evaluation instant
            report_id: Identifier to use instead of a generated one

        Returns:
            A ``completed`` report, or a ``failed`` one carrying the reason
        """
        now = as_utc(now)
        report = start_report(report_id or generate_report_id(now), generated_by, now)

        with structlog.contextvars.bound_contextvars(report_id=report.report_id):
            return self._run(report, raw_config, now)

    def _run(
        self,
        report: Report,
        raw_config: Union[ReportConfig, Mapping[str, Any], None],
        now: datetime,
    ) -> Report:
        try:
            config = ReportConfig.load(raw_config)
            start, end = resolve_date_range(
                config.period_type, now, config.start_date, config.end_date
            )
            report = replace(
                report,
                report_name=generate_report_name(config.report_type, config.period_type, start, end),
                report_type=config.report_type,
                period_type=config.period_type,
                start_date=start,
                end_date=end,
                config=config,
            )
            logger.info(
                "Generating report",
                report_type=config.report_type.value,
                period_type=config.period_type.value,
                start=start.isoformat(),
                end=end.isoformat(),
            )
            results = self._build(config, start, end, now)
        except (InvalidConfiguration, DataUnavailable) as e:
            logger.warning(
                f"Report failed: {e.message}",
                error_kind=e.kind.value,
            )
            return fail_report(report, e)

        report = complete_report(report, now, **results)
        logger.info(
            "Report completed",
            products=report.summary.total_products,
            insights=len(report.insights),
        )
        return report

    def _period_metrics(
        self,
        config: ReportConfig,
        start: datetime,
        end: datetime,
        now: datetime,
        period_days: int,
    ) -> List[ProductMetric]:
        """Filtered metrics for one window, evaluated as of min(end, now)"""
        as_of = min(end, now)
        snapshots = self.source.fetch_product_snapshots(config.filters, as_of)
        # Sales after the evaluation instant are not yet known
        activity = self.source.fetch_sales_activity(
            [s.product_id for s in snapshots], start, as_of
        )
        aggregator = MetricAggregator(config.thresholds, period_days, as_of)
        return filter_metrics(aggregator.compute_all(snapshots, activity), config.filters)

    def _build(
        self,
        config: ReportConfig,
        start: datetime,
        end: datetime,
        now: datetime,
    ) -> Dict[str, Any]:
        period_days = period_length_days(start, end)
        prev_start, prev_end = previous_period(start, end)

        metrics = self._period_metrics(config, start, end, now, period_days)
        previous_metrics = self._period_metrics(config, prev_start, prev_end, now, period_days)

        previous_by_product = {m.product_id: m for m in previous_metrics}
        metrics = [self._with_trend(m, previous_by_product.get(m.product_id)) for m in metrics]

        summary = summarize(metrics)
        check_summary_consistency(summary, metrics)
        previous_summary = summarize(previous_metrics)

        results: Dict[str, Any] = {
            "summary": summary,
            "comparison": compare_periods(summary, previous_summary, prev_start, prev_end),
            "insights": tuple(self.insight_generator.generate(summary)),
        }

        lists, include_rollups = report_sections(config)
        for name in LIST_SORT_KEYS:
            if name in lists:
                ranked = assign_ranks(metrics, LIST_SORT_KEYS[name])
                check_rank_contiguity(ranked, name)
                results[name] = ranked

        if include_rollups:
            for field_name, dimension in (
                ("category_performance", RollupDimension.CATEGORY),
                ("supplier_performance", RollupDimension.SUPPLIER),
            ):
                aggregator = RollupAggregator(dimension)
                rollups = aggregator.aggregate(
                    metrics, previous=aggregator.aggregate(previous_metrics)
                )
                check_rank_contiguity(rollups, field_name)
                results[field_name] = rollups

        return results

    @staticmethod
    def _with_trend(metric: ProductMetric, previous: Optional[ProductMetric]) -> ProductMetric:
        previous_stock = previous.current_stock if previous else 0
        previous_rate = previous.turnover_rate if previous else 0.0
        trend = product_trend(metric.current_stock, previous_stock, metric.turnover_rate, previous_rate)
        return replace(metric, trend=trend)


def generate_report(
    source: "InventoryDataSource",
    raw_config: Union[ReportConfig, Mapping[str, Any], None],
    generated_by: str,
    now: datetime,
) -> Report:
    """Generate a report with the default insight rules"""
    return ReportGenerator(source).generate(raw_config, generated_by, now)
