"""
Unit Tests - Report Configuration and Periods
"""
import re
from datetime import datetime, timedelta, timezone

import pytest

from inventory_analytics.config import Settings
from inventory_analytics.reporting.config import ReportConfig, Thresholds
from inventory_analytics.reporting.enums import PeriodType, ReportType, StockStatus
from inventory_analytics.reporting.errors import ErrorKind, InvalidConfiguration
from inventory_analytics.reporting.periods import (
    as_utc,
    generate_report_id,
    generate_report_name,
    period_length_days,
    previous_period,
    resolve_date_range,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestReportConfig:
    """Tests for ReportConfig.load"""

    def test_defaults(self):
        """Test an empty config is a monthly comprehensive report"""
        config = ReportConfig.load({})

        assert config.report_type == ReportType.COMPREHENSIVE
        assert config.period_type == PeriodType.MONTHLY
        assert config.thresholds.fast_turnover == 12
        assert config.thresholds.very_old == 365
        assert config.include_metrics.stock_levels is True
        assert config.filters.categories == []

    def test_none_is_default_config(self):
        """Test a missing config loads the defaults"""
        assert ReportConfig.load(None) == ReportConfig()

    def test_existing_config_passes_through(self):
        """Test an already validated config is returned as is"""
        config = ReportConfig(report_type=ReportType.STOCK_LEVELS)

        assert ReportConfig.load(config) is config

    def test_string_values_are_coerced(self):
        """Test enum values and nested filters load from plain strings"""
        config = ReportConfig.load({
            "report_type": "aging_analysis",
            "period_type": "weekly",
            "filters": {"stock_status": ["low_stock"], "categories": ["books"]},
        })

        assert config.report_type == ReportType.AGING_ANALYSIS
        assert config.filters.stock_status == [StockStatus.LOW_STOCK]

    def test_unknown_report_type(self):
        """Test an unknown enum value is invalid configuration"""
        with pytest.raises(InvalidConfiguration) as exc_info:
            ReportConfig.load({"report_type": "sales_forecast"})

        assert exc_info.value.kind == ErrorKind.INVALID_CONFIGURATION
        assert any(e.startswith("report_type") for e in exc_info.value.details["errors"])

    def test_unknown_field_is_rejected(self):
        """Test misspelled keys are not silently ignored"""
        with pytest.raises(InvalidConfiguration):
            ReportConfig.load({"report_typ": "comprehensive"})

    def test_negative_threshold(self):
        """Test negative thresholds are rejected"""
        with pytest.raises(InvalidConfiguration) as exc_info:
            ReportConfig.load({"thresholds": {"aging": -1}})

        assert "must be a non-negative number" in exc_info.value.message

    def test_nan_threshold(self):
        """Test a NaN threshold is rejected like a negative one"""
        with pytest.raises(InvalidConfiguration) as exc_info:
            ReportConfig.load({"thresholds": {"very_old": float("nan")}})

        assert any(e.startswith("thresholds.very_old") for e in exc_info.value.details["errors"])

    def test_only_list_sections_can_be_switched(self):
        """Test include_metrics accepts just the three ranked lists"""
        with pytest.raises(InvalidConfiguration):
            ReportConfig.load({"include_metrics": {"profit_margins": False}})

    @pytest.mark.parametrize("fast,slow", [(4, 12), (6, 6)])
    def test_fast_threshold_must_exceed_slow(self, fast, slow):
        """Test fast at or below slow is invalid configuration"""
        with pytest.raises(InvalidConfiguration):
            ReportConfig.load({"thresholds": {"fast_turnover": fast, "slow_turnover": slow}})

    def test_partial_thresholds_keep_defaults(self):
        """Test unspecified thresholds keep their defaults"""
        config = ReportConfig.load({"thresholds": {"fast_turnover": 20}})

        assert config.thresholds == Thresholds(fast_turnover=20)

    def test_start_without_end(self):
        """Test half a date range is rejected"""
        with pytest.raises(InvalidConfiguration):
            ReportConfig.load({"start_date": "2025-01-01T00:00:00"})

    def test_custom_period_requires_dates(self):
        """Test a custom period without dates is rejected"""
        with pytest.raises(InvalidConfiguration):
            ReportConfig.load({"period_type": "custom"})

    @pytest.mark.parametrize("end", ["2025-01-01T00:00:00", "2024-12-01T00:00:00"])
    def test_end_must_follow_start(self, end):
        """Test an empty or reversed range is rejected"""
        with pytest.raises(InvalidConfiguration):
            ReportConfig.load({
                "period_type": "custom",
                "start_date": "2025-01-01T00:00:00",
                "end_date": end,
            })

    def test_dates_are_normalized_to_utc(self):
        """Test naive dates are read as UTC and offsets are converted"""
        config = ReportConfig.load({
            "period_type": "custom",
            "start_date": "2025-01-01T00:00:00",
            "end_date": "2025-02-01T02:00:00+02:00",
        })

        assert config.start_date == utc(2025, 1, 1)
        assert config.end_date == utc(2025, 2, 1)

    def test_thresholds_from_settings(self, test_settings: Settings):
        """Test environment defaults produce valid thresholds"""
        thresholds = Thresholds(**test_settings.reporting.default_thresholds())

        assert thresholds.fast_turnover > thresholds.slow_turnover


class TestResolveDateRange:
    """Tests for resolve_date_range"""

    def test_explicit_dates_win(self, now):
        """Test explicit dates override the period type"""
        start, end = resolve_date_range("daily", now, utc(2025, 1, 1), utc(2025, 3, 1))

        assert (start, end) == (utc(2025, 1, 1), utc(2025, 3, 1))

    def test_daily(self, now):
        """Test the daily window is the current UTC day"""
        assert resolve_date_range("daily", now) == (utc(2025, 6, 15), utc(2025, 6, 16))

    def test_weekly_starts_on_sunday(self, now):
        """Test weeks start on Sunday"""
        # 2025-06-15 is a Sunday
        assert resolve_date_range("weekly", now) == (utc(2025, 6, 15), utc(2025, 6, 22))
        assert resolve_date_range("weekly", utc(2025, 6, 18, 9)) == (utc(2025, 6, 15), utc(2025, 6, 22))
        assert resolve_date_range("weekly", utc(2025, 6, 14, 23)) == (utc(2025, 6, 8), utc(2025, 6, 15))

    def test_monthly(self, now):
        assert resolve_date_range(PeriodType.MONTHLY, now) == (utc(2025, 6, 1), utc(2025, 7, 1))

    def test_monthly_wraps_year(self):
        """Test December rolls over into January"""
        assert resolve_date_range("monthly", utc(2025, 12, 31)) == (utc(2025, 12, 1), utc(2026, 1, 1))

    def test_quarterly(self, now):
        assert resolve_date_range("quarterly", now) == (utc(2025, 4, 1), utc(2025, 7, 1))
        assert resolve_date_range("quarterly", utc(2025, 11, 5)) == (utc(2025, 10, 1), utc(2026, 1, 1))

    def test_yearly(self, now):
        assert resolve_date_range("yearly", now) == (utc(2025, 1, 1), utc(2026, 1, 1))

    def test_unknown_period_falls_back_to_month(self, now):
        """Test an unrecognized period type resolves to the current month"""
        assert resolve_date_range("fortnightly", now) == (utc(2025, 6, 1), utc(2025, 7, 1))

    def test_non_utc_now_is_converted(self):
        """Test the window is computed on the UTC calendar"""
        local = datetime(2025, 7, 1, 1, 0, tzinfo=timezone(timedelta(hours=3)))

        assert resolve_date_range("monthly", local) == (utc(2025, 6, 1), utc(2025, 7, 1))


class TestPeriodHelpers:
    """Tests for previous periods, ids and names"""

    def test_previous_period_has_same_length(self):
        """Test the previous window ends where the current starts"""
        start, end = utc(2025, 6, 1), utc(2025, 7, 1)

        prev_start, prev_end = previous_period(start, end)

        assert prev_end == start
        assert prev_end - prev_start == end - start

    def test_period_length_rounds_up(self):
        assert period_length_days(utc(2025, 6, 1), utc(2025, 7, 1)) == 30
        assert period_length_days(utc(2025, 6, 1), utc(2025, 6, 2, 1)) == 2

    def test_report_id_format(self, now):
        """Test ids carry the epoch millis and a 5-character suffix"""
        report_id = generate_report_id(now)

        assert re.fullmatch(r"INR-\d+-[A-Z0-9]{5}", report_id)
        assert report_id.split("-")[1] == str(int(now.timestamp() * 1000))

    def test_report_name(self):
        """Test the name combines type, period and dates"""
        name = generate_report_name(ReportType.TURNOVER_RATES, PeriodType.MONTHLY, utc(2025, 6, 1), utc(2025, 7, 1))

        assert name == "Turnover Rates Report - Monthly (06/01/2025 - 07/01/2025)"

    def test_as_utc(self):
        """Test naive datetimes are tagged UTC"""
        assert as_utc(datetime(2025, 1, 1)) == utc(2025, 1, 1)
