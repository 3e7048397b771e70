"""
Unit Tests - Rollups and Period Summary
"""
from dataclasses import replace

import pytest

from inventory_analytics.reporting.config import Thresholds
from inventory_analytics.reporting.enums import RollupDimension, StockStatus
from inventory_analytics.reporting.errors import ComputationFailure
from inventory_analytics.reporting.metrics import MetricAggregator
from inventory_analytics.reporting.models import Rollup
from inventory_analytics.reporting.rollups import (
    RollupAggregator,
    check_summary_consistency,
    group_metrics,
    summarize,
)


@pytest.fixture
def metrics(sample_snapshots, sample_activity, now):
    return MetricAggregator(Thresholds(), 30, now).compute_all(sample_snapshots, sample_activity)


class TestGrouping:
    """Tests for group_metrics"""

    def test_groups_by_category_in_first_seen_order(self, metrics):
        """Test categories appear in the order their first product does"""
        groups = group_metrics(metrics, RollupDimension.CATEGORY)

        assert list(groups) == ["electronics", "books"]
        assert [m.product_id for m in groups["books"]] == ["P3", "P4"]

    def test_missing_key_forms_its_own_group(self, metrics):
        """Test products without a supplier are grouped under None"""
        metrics = metrics + [replace(metrics[0], product_id="P5", supplier_id=None)]
        groups = group_metrics(metrics, RollupDimension.SUPPLIER)

        assert [m.product_id for m in groups[None]] == ["P5"]

    def test_period_dimension_is_one_group(self, metrics):
        """Test the period dimension puts everything together"""
        groups = group_metrics(metrics, RollupDimension.PERIOD)

        assert list(groups) == [None]
        assert len(groups[None]) == 4


class TestRollupAggregator:
    """Tests for RollupAggregator"""

    def test_rollups_cover_every_product(self, metrics):
        """Test product counts add up to the number of metrics"""
        rollups = RollupAggregator(RollupDimension.SUPPLIER).aggregate(metrics)

        assert sum(r.product_count for r in rollups) == len(metrics)

    def test_ranked_by_stock_value(self, metrics):
        """Test rollups are ranked by total stock value, highest first"""
        rollups = RollupAggregator(RollupDimension.CATEGORY).aggregate(metrics)

        # books: 25*4 + 100*2 = 300, electronics: 0*12 + 5*8 = 40
        assert [r.key for r in rollups] == ["books", "electronics"]
        assert [r.rank for r in rollups] == [1, 2]
        assert rollups[0].total_stock_value == pytest.approx(300.0)
        assert rollups[1].total_stock_value == pytest.approx(40.0)

    def test_counts_per_group(self, metrics):
        """Test status counts are taken per group"""
        rollups = {r.key: r for r in RollupAggregator(RollupDimension.CATEGORY).aggregate(metrics)}

        electronics = rollups["electronics"]
        assert electronics.product_count == 2
        assert electronics.out_of_stock_products == 1
        assert electronics.low_stock_products == 1
        assert rollups["books"].overstocked_products == 1

    def test_no_trend_without_previous(self, metrics):
        """Test trends are only attached when previous rollups are given"""
        rollups = RollupAggregator(RollupDimension.CATEGORY).aggregate(metrics)

        assert all(r.trend is None for r in rollups)

    def test_trend_against_previous(self, metrics):
        """Test the trend diffs stock value against the previous rollup with the same key"""
        previous = [Rollup(RollupDimension.CATEGORY, "books", product_count=2, total_stock_value=200.0)]
        rollups = {
            r.key: r
            for r in RollupAggregator(RollupDimension.CATEGORY).aggregate(metrics, previous=previous)
        }

        assert rollups["books"].trend.stock_value_change == pytest.approx(100.0)
        assert rollups["books"].trend.stock_value_change_percentage == pytest.approx(50.0)
        # No previous group: the zero-previous rule applies
        assert rollups["electronics"].trend.previous_stock_value == 0.0
        assert rollups["electronics"].trend.stock_value_change_percentage == 100.0

    def test_empty_metrics(self):
        """Test no metrics give no rollups"""
        assert RollupAggregator(RollupDimension.CATEGORY).aggregate([]) == ()


class TestSummary:
    """Tests for summarize and check_summary_consistency"""

    def test_summary_totals(self, metrics):
        """Test summary counts and totals"""
        summary = summarize(metrics)

        assert summary.total_products == 4
        assert summary.total_stock_value == pytest.approx(340.0)
        assert summary.out_of_stock_products == 1
        assert summary.low_stock_products == 1
        assert summary.overstocked_products == 1
        assert summary.very_old_products == 1

    def test_empty_summary_averages_zero(self):
        """Test an empty period has a zero average turnover, not an error"""
        summary = summarize([])

        assert summary.total_products == 0
        assert summary.average_turnover_rate == 0.0

    def test_consistent_summary_passes(self, metrics):
        """Test a summary built from the metrics is consistent with them"""
        check_summary_consistency(summarize(metrics), metrics)

    def test_inconsistent_summary_raises(self, metrics):
        """Test a tampered summary is a computation failure"""
        summary = replace(summarize(metrics), low_stock_products=3)

        with pytest.raises(ComputationFailure) as exc_info:
            check_summary_consistency(summary, metrics)

        assert "low_stock_products" in exc_info.value.details

    def test_filtered_status_counts(self, metrics):
        """Test the summary reflects only the metrics given"""
        low = [m for m in metrics if m.stock_status == StockStatus.LOW_STOCK]

        assert summarize(low).total_products == 1
