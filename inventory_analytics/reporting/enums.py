"""
Categorical labels used across inventory reports.
"""

from enum import Enum


class StockStatus(str, Enum):
    """Stock level relative to the reorder point"""
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    OVERSTOCKED = "overstocked"


class TurnoverCategory(str, Enum):
    """Sales velocity bucket"""
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"
    DEAD = "dead"


class AgingCategory(str, Enum):
    """Time since last sale (or receipt) bucket"""
    NEW = "new"
    AGING = "aging"
    OLD = "old"
    VERY_OLD = "very_old"


class ReportType(str, Enum):
    """Kinds of inventory report"""
    STOCK_LEVELS = "stock_levels"
    TURNOVER_RATES = "turnover_rates"
    AGING_ANALYSIS = "aging_analysis"
    COMPREHENSIVE = "comprehensive"
    CUSTOM = "custom"


class PeriodType(str, Enum):
    """Reporting period granularity"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class ReportStatus(str, Enum):
    """Report lifecycle state"""
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"
    ARCHIVED = "archived"


class InsightType(str, Enum):
    """Tone of an insight"""
    WARNING = "warning"
    OPPORTUNITY = "opportunity"
    ACHIEVEMENT = "achievement"
    RECOMMENDATION = "recommendation"
    ALERT = "alert"


class InsightCategory(str, Enum):
    """Area of the report an insight refers to"""
    STOCK_LEVELS = "stock_levels"
    TURNOVER = "turnover"
    AGING = "aging"
    CATEGORY = "category"
    SUPPLIER = "supplier"
    OVERALL = "overall"


class Impact(str, Enum):
    """Business impact of an insight"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ExportFormat(str, Enum):
    """Formats a report may be exported to"""
    PDF = "pdf"
    EXCEL = "excel"
    CSV = "csv"
    JSON = "json"


class RollupDimension(str, Enum):
    """Grouping key for rollups"""
    CATEGORY = "category"
    SUPPLIER = "supplier"
    PERIOD = "period"
