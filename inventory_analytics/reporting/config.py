"""
Report Configuration

The configuration surface accepted by the report generator: report and period
type, explicit date range, metric switches, filters and thresholds. Validation
happens here, before any data is fetched.
"""

import math
from datetime import datetime
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .enums import AgingCategory, PeriodType, ReportType, StockStatus, TurnoverCategory
from .errors import InvalidConfiguration
from .periods import as_utc


class Thresholds(BaseModel):
    """Classification thresholds (turnover in times per year, aging in days)"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    low_stock: float = Field(default=10, description="Low stock threshold (units)")
    overstock: float = Field(default=100, description="Overstock threshold (units)")
    fast_turnover: float = Field(default=12, description="Turnover at or above which a product is fast")
    slow_turnover: float = Field(default=4, description="Turnover at or below which a product is slow")
    aging: float = Field(default=90, description="Days after which stock is aging")
    old: float = Field(default=180, description="Days after which stock is old")
    very_old: float = Field(default=365, description="Days after which stock is very old")

    @field_validator("*")
    @classmethod
    def validate_non_negative(cls, v: float, info) -> float:
        if math.isnan(v) or v < 0:
            raise ValueError(f"{info.field_name} threshold must be a non-negative number")
        return v

    @model_validator(mode="after")
    def validate_turnover_order(self) -> "Thresholds":
        if self.fast_turnover <= self.slow_turnover:
            raise ValueError(
                f"fast_turnover ({self.fast_turnover}) must be greater than "
                f"slow_turnover ({self.slow_turnover})"
            )
        return self


class IncludeMetrics(BaseModel):
    """Which sections a custom report carries"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    stock_levels: bool = True
    turnover_rates: bool = True
    aging_analysis: bool = True


class ReportFilters(BaseModel):
    """Product filters. Categories and suppliers go to the data source."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    categories: List[str] = Field(default_factory=list)
    suppliers: List[str] = Field(default_factory=list)
    stock_status: List[StockStatus] = Field(default_factory=list)
    turnover_ranges: List[TurnoverCategory] = Field(default_factory=list)
    aging_ranges: List[AgingCategory] = Field(default_factory=list)


class ReportConfig(BaseModel):
    """
    Complete report request.

    Example:
        config = ReportConfig.load({
            "report_type": "turnover_rates",
            "period_type": "custom",
            "start_date": "2025-01-01",
            "end_date": "2025-02-01",
            "thresholds": {"fast_turnover": 10},
        })
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    report_type: ReportType = ReportType.COMPREHENSIVE
    period_type: PeriodType = PeriodType.MONTHLY
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    include_metrics: IncludeMetrics = Field(default_factory=IncludeMetrics)
    filters: ReportFilters = Field(default_factory=ReportFilters)
    thresholds: Thresholds = Field(default_factory=Thresholds)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    @model_validator(mode="after")
    def validate_date_range(self) -> "ReportConfig":
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be given together")
        if self.period_type == PeriodType.CUSTOM and self.start_date is None:
            raise ValueError("custom period requires start_date and end_date")
        if self.start_date is not None and self.end_date <= self.start_date:
            raise ValueError(
                f"end_date ({self.end_date.isoformat()}) must be after "
                f"start_date ({self.start_date.isoformat()})"
            )
        return self

    @classmethod
    def load(cls, raw: Union["ReportConfig", Mapping[str, Any], None] = None) -> "ReportConfig":
        """Validate a raw mapping, raising InvalidConfiguration on any problem"""
        if isinstance(raw, ReportConfig):
            return raw
        try:
            return cls.model_validate(dict(raw or {}))
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            ]
            raise InvalidConfiguration(
                "Invalid report configuration: " + "; ".join(errors),
                details={"errors": errors},
            ) from e
