"""
Inventory Analytics Engine
Centralized Configuration Management

Application settings are loaded from environment variables (and an optional
.env file) through Pydantic settings. Only the boundary layers (data sources,
CLI) read these values; the computation core receives everything it needs as
explicit arguments.
"""

from functools import lru_cache
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


class ReportingSettings(BaseSettings):
    """Inventory report defaults"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    # Threshold defaults
    low_stock_threshold: float = Field(default=10, description="Low stock threshold (units)")
    overstock_threshold: float = Field(default=100, description="Overstock threshold (units)")
    fast_turnover_threshold: float = Field(default=12, description="Fast turnover (times per year)")
    slow_turnover_threshold: float = Field(default=4, description="Slow turnover (times per year)")
    aging_threshold: float = Field(default=90, description="Aging threshold (days)")
    old_threshold: float = Field(default=180, description="Old stock threshold (days)")
    very_old_threshold: float = Field(default=365, description="Very old stock threshold (days)")

    default_period_type: str = Field(default="monthly", description="Period used when none is requested")
    default_reorder_point: int = Field(default=10, description="Reorder point applied when a product has none")
    default_reorder_quantity: int = Field(default=50, description="Reorder quantity used by stock alerts")
    alert_window_days: int = Field(default=30, description="Trailing sales window for stock alerts")
    counted_sale_statuses: List[str] = Field(
        default=["delivered"],
        description="Sale statuses that count as units sold",
    )
    data_path: str = Field(default="./data", description="Default input directory for the CLI")

    def default_thresholds(self) -> dict:
        """Threshold defaults keyed the way report configs expect them"""
        return {
            "low_stock": self.low_stock_threshold,
            "overstock": self.overstock_threshold,
            "fast_turnover": self.fast_turnover_threshold,
            "slow_turnover": self.slow_turnover_threshold,
            "aging": self.aging_threshold,
            "old": self.old_threshold,
            "very_old": self.very_old_threshold,
        }


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="inventory-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    reporting: ReportingSettings = Field(default_factory=ReportingSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
