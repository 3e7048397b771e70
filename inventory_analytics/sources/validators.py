"""
Frame Validation

Rule-based checks run on inventory frames before they are served to the
report generator: required columns without nulls, unique product ids,
non-negative quantities and costs, and category/supplier references that
resolve.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Frame is rejected
    WARNING = "warning"  # Logged, frame is still served


class ValidationStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Result of running every check of a validator"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100

    @property
    def errors(self) -> List[str]:
        """Messages of the failed error-severity checks"""
        return [
            c.message for c in self.checks
            if not c.passed and c.severity == ValidationSeverity.ERROR
        ]


def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        passed=False,
        severity=severity,
        message=f"Column '{column}' not found",
    )


class DataValidator:
    """
    Chainable frame validator.

    Example:
        validator = (
            DataValidator()
            .add_not_null_check("product_id")
            .add_range_check("current_stock", min_value=0)
        )
        result = validator.validate(products)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Warnings fail the frame too
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Column must exist and contain no nulls"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            null_count = df[column].null_count()
            passed = null_count == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count},
                failed_rows=null_count,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Column values must not repeat"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            duplicate_count = len(df) - df[column].n_unique()
            passed = duplicate_count == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {duplicate_count} duplicate values" if not passed else f"Column '{column}' values are unique",
                details={"duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
        optional: bool = False,
    ) -> "DataValidator":
        """
        Non-null values must lie within [min_value, max_value].

        With ``optional`` a missing column passes.
        """
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            if column not in df.columns:
                if optional:
                    return ValidationCheck(name=name, passed=True, severity=severity, message=f"Column '{column}' not present")
                return _missing_column(name, column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)
            if not conditions:
                return ValidationCheck(name=name, passed=True, severity=severity, message="No range specified")

            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond

            out_of_range = df.filter(combined).height
            passed = out_of_range == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range [{min_value}, {max_value}]" if not passed else "All values in range",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_positive_check(
        self,
        column: str,
        allow_zero: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
        optional: bool = False,
    ) -> "DataValidator":
        min_val = 0 if allow_zero else 0.0001
        return self.add_range_check(column, min_value=min_val, severity=severity, optional=optional)

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Every non-null value of ``column`` must appear in the reference frame"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"ref_integrity_{column}"
            if column not in df.columns:
                return ValidationCheck(name=name, passed=True, severity=severity, message=f"Column '{column}' not present")

            ref_values = reference_df[reference_column].unique().to_list()
            orphans = df.filter(
                ~pl.col(column).is_in(ref_values) & pl.col(column).is_not_null()
            ).height
            passed = orphans == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {orphans} orphan records" if not passed else "Referential integrity maintained",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on a frame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.now(timezone.utc)
        logger.debug(f"Running {len(self._checks)} validation checks on {len(df)} rows")

        results = []
        for check_func in self._checks:
            result = check_func(df)
            results.append(result)
            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0 or (warning_count > 0 and self.strict_mode):
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        return ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )


def create_products_validator(
    categories: Optional[pl.DataFrame] = None,
    suppliers: Optional[pl.DataFrame] = None,
) -> DataValidator:
    """Validator for product frames, with reference checks when lookups are given"""
    validator = (
        DataValidator()
        .add_not_null_check("product_id")
        .add_unique_check("product_id")
        .add_not_null_check("current_stock")
        .add_not_null_check("created_at")
        .add_positive_check("current_stock")
        .add_positive_check("reorder_point", optional=True)
        .add_positive_check("min_stock", optional=True)
        .add_positive_check("unit_cost", optional=True)
    )
    if categories is not None:
        validator.add_referential_integrity_check("category_id", categories, "category_id")
    if suppliers is not None:
        validator.add_referential_integrity_check("supplier_id", suppliers, "supplier_id")
    return validator


def create_sales_validator() -> DataValidator:
    """Validator for sale-line frames"""
    return (
        DataValidator()
        .add_not_null_check("product_id")
        .add_not_null_check("sold_at")
        .add_not_null_check("quantity")
        .add_positive_check("quantity")
    )


def create_orders_validator() -> DataValidator:
    """Validator for customer order frames"""
    return (
        DataValidator()
        .add_not_null_check("customer_id")
        .add_not_null_check("placed_at")
        .add_not_null_check("total")
        .add_positive_check("total")
    )
