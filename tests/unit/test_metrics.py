"""
Unit Tests - Product Metrics
"""
from dataclasses import dataclass, replace
from datetime import timedelta

import pytest

from inventory_analytics.reporting.config import ReportFilters, Thresholds
from inventory_analytics.reporting.enums import AgingCategory, StockStatus, TurnoverCategory
from inventory_analytics.reporting.errors import ComputationFailure
from inventory_analytics.reporting.metrics import (
    NEVER_SELLS_DAYS,
    MetricAggregator,
    assign_ranks,
    calculate_days_in_stock,
    calculate_days_to_sell,
    calculate_potential_loss,
    calculate_turnover_rate,
    check_rank_contiguity,
    filter_metrics,
)
from inventory_analytics.reporting.models import SalesActivity


class TestCalculations:
    """Tests for the metric formulas"""

    def test_turnover_rate_is_annualized(self):
        """Test turnover rate annualizes units sold per unit of stock"""
        assert calculate_turnover_rate(24, 2, 30) == pytest.approx(146.0)

    def test_turnover_rate_zero_without_stock(self):
        """Test zero stock yields a turnover rate of 0 instead of an error"""
        assert calculate_turnover_rate(24, 0, 30) == 0.0

    def test_days_to_sell(self):
        """Test days to sell is 365 over the turnover rate"""
        assert calculate_days_to_sell(146.0) == pytest.approx(2.5)

    def test_days_to_sell_sentinel(self):
        """Test products that never sell report the sentinel"""
        assert calculate_days_to_sell(0) == NEVER_SELLS_DAYS == 999

    def test_days_in_stock_rounds_up(self, now):
        """Test partial days count as a whole day"""
        assert calculate_days_in_stock(now - timedelta(days=3, hours=1), now) == 4
        assert calculate_days_in_stock(now - timedelta(days=3), now) == 3

    @pytest.mark.parametrize(
        "days,expected",
        [(100, 0.0), (180, 0.0), (181, 20.0), (365, 20.0), (366, 50.0)],
    )
    def test_potential_loss_is_piecewise(self, days, expected):
        """Test potential loss steps at 180 and 365 days"""
        assert calculate_potential_loss(100.0, days) == pytest.approx(expected)


class TestMetricAggregator:
    """Tests for MetricAggregator"""

    def test_fast_mover(self, now, make_snapshot):
        """Test 24 units over 30 days with 2 on hand is a fast mover"""
        aggregator = MetricAggregator(Thresholds(), period_days=30, now=now)
        metric = aggregator.compute(
            make_snapshot(current_stock=2),
            SalesActivity("P1", units_sold=24, last_sold_at=now - timedelta(days=1)),
        )

        assert metric.turnover_rate == pytest.approx(146.0)
        assert metric.turnover_category == TurnoverCategory.FAST
        assert metric.days_to_sell == pytest.approx(2.5)

    def test_very_old_stock(self, now, make_snapshot):
        """Test stock last sold 400 days ago is very old with 50% potential loss"""
        aggregator = MetricAggregator(Thresholds(), period_days=30, now=now)
        metric = aggregator.compute(
            make_snapshot(current_stock=5, unit_cost=10.0, created_at=now - timedelta(days=800)),
            SalesActivity("P1", units_sold=0, last_sold_at=now - timedelta(days=400)),
        )

        assert metric.stock_value == pytest.approx(50.0)
        assert metric.potential_loss == pytest.approx(25.0)
        assert metric.days_in_stock == 400
        assert metric.aging_category == AgingCategory.VERY_OLD

    def test_out_of_stock(self, now, make_snapshot):
        """Test zero stock is out of stock, dead, and never sells"""
        aggregator = MetricAggregator(Thresholds(), period_days=30, now=now)
        metric = aggregator.compute(make_snapshot(current_stock=0, reorder_point=10))

        assert metric.stock_status == StockStatus.OUT_OF_STOCK
        assert metric.turnover_rate == 0.0
        assert metric.turnover_category == TurnoverCategory.DEAD
        assert metric.days_to_sell == NEVER_SELLS_DAYS

    def test_never_sold_ages_from_creation(self, now, make_snapshot):
        """Test a product without sales ages from its creation date"""
        created = now - timedelta(days=120)
        aggregator = MetricAggregator(Thresholds(), period_days=30, now=now)
        metric = aggregator.compute(make_snapshot(created_at=created))

        assert metric.last_activity_at == created
        assert metric.last_sold_at is None
        assert metric.days_in_stock == 120
        assert metric.aging_category == AgingCategory.AGING

    def test_reorder_quantity_is_twice_reorder_point(self, now, make_snapshot):
        """Test suggested reorder quantity doubles the reorder point"""
        aggregator = MetricAggregator(Thresholds(), period_days=30, now=now)
        metric = aggregator.compute(make_snapshot(reorder_point=15))

        assert metric.reorder_quantity == 30

    def test_custom_thresholds_change_classification(self, now, make_snapshot):
        """Test caller thresholds drive the categories"""
        thresholds = Thresholds(fast_turnover=200, slow_turnover=150, aging=5, old=10, very_old=20)
        aggregator = MetricAggregator(thresholds, period_days=30, now=now)
        metric = aggregator.compute(
            make_snapshot(current_stock=2),
            SalesActivity("P1", units_sold=24, last_sold_at=now - timedelta(days=7)),
        )

        assert metric.turnover_category == TurnoverCategory.SLOW
        assert metric.aging_category == AgingCategory.AGING

    def test_identical_inputs_give_identical_metrics(self, now, make_snapshot):
        """Test computing twice gives equal output"""
        snapshot = make_snapshot(current_stock=7)
        activity = SalesActivity("P1", units_sold=3, last_sold_at=now - timedelta(days=40))

        first = MetricAggregator(Thresholds(), 30, now).compute(snapshot, activity)
        second = MetricAggregator(Thresholds(), 30, now).compute(snapshot, activity)

        assert first == second
        assert repr(first) == repr(second)

    def test_compute_all_keeps_input_order(self, sample_snapshots, sample_activity, now):
        """Test compute_all returns one metric per snapshot in order"""
        metrics = MetricAggregator(Thresholds(), 30, now).compute_all(sample_snapshots, sample_activity)

        assert [m.product_id for m in metrics] == ["P1", "P2", "P3", "P4"]
        assert metrics[1].units_sold == 30
        assert metrics[0].units_sold == 0


class TestFilterMetrics:
    """Tests for filter_metrics"""

    def test_empty_filters_keep_everything(self, sample_snapshots, sample_activity, now):
        """Test empty filters keep all metrics"""
        metrics = MetricAggregator(Thresholds(), 30, now).compute_all(sample_snapshots, sample_activity)

        assert filter_metrics(metrics, ReportFilters()) == metrics

    def test_stock_status_filter(self, sample_snapshots, sample_activity, now):
        """Test filtering by stock status"""
        metrics = MetricAggregator(Thresholds(), 30, now).compute_all(sample_snapshots, sample_activity)
        filtered = filter_metrics(metrics, ReportFilters(stock_status=[StockStatus.LOW_STOCK, StockStatus.OUT_OF_STOCK]))

        assert [m.product_id for m in filtered] == ["P1", "P2"]

    def test_filters_combine_with_and(self, sample_snapshots, sample_activity, now):
        """Test status and aging filters must both match"""
        metrics = MetricAggregator(Thresholds(), 30, now).compute_all(sample_snapshots, sample_activity)
        filtered = filter_metrics(
            metrics,
            ReportFilters(stock_status=[StockStatus.OVERSTOCKED], aging_ranges=[AgingCategory.NEW]),
        )

        assert filtered == []


@dataclass(frozen=True)
class Ranked:
    value: float
    label: str
    rank: int = 0


class TestRanking:
    """Tests for assign_ranks and check_rank_contiguity"""

    def test_ranks_are_contiguous_and_descending(self):
        """Test ranks run 1..N in descending key order"""
        ranked = assign_ranks([Ranked(1, "a"), Ranked(3, "b"), Ranked(2, "c")], key=lambda r: r.value)

        assert [r.label for r in ranked] == ["b", "c", "a"]
        assert [r.rank for r in ranked] == [1, 2, 3]

    def test_ties_keep_input_order(self):
        """Test equal keys keep their first-seen order"""
        ranked = assign_ranks(
            [Ranked(1, "a"), Ranked(5, "b"), Ranked(1, "c"), Ranked(5, "d")],
            key=lambda r: r.value,
        )

        assert [r.label for r in ranked] == ["b", "d", "a", "c"]

    def test_empty_list(self):
        """Test ranking nothing gives nothing"""
        assert assign_ranks([], key=lambda r: r.value) == ()

    def test_contiguity_check_passes(self):
        """Test a ranked list passes the contiguity check"""
        ranked = assign_ranks([Ranked(1, "a"), Ranked(2, "b")], key=lambda r: r.value)

        check_rank_contiguity(ranked)

    def test_contiguity_check_raises_on_gap(self):
        """Test a gap in ranks is a computation failure"""
        items = [Ranked(2, "a", rank=1), Ranked(1, "b", rank=3)]

        with pytest.raises(ComputationFailure):
            check_rank_contiguity(items, "items")

    def test_contiguity_check_raises_on_duplicate(self):
        """Test duplicate ranks are a computation failure"""
        items = [replace(Ranked(2, "a"), rank=1), replace(Ranked(1, "b"), rank=1)]

        with pytest.raises(ComputationFailure):
            check_rank_contiguity(items)
