"""
Reporting period helpers: date ranges, previous periods, report identity.

All datetimes are handled as timezone-aware UTC. Naive values are assumed to
already be in UTC.
"""

import math
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

DAY = timedelta(days=1)

_REPORT_ID_ALPHABET = string.ascii_uppercase + string.digits

_TYPE_NAMES = {
    "stock_levels": "Stock Levels",
    "turnover_rates": "Turnover Rates",
    "aging_analysis": "Aging Analysis",
    "comprehensive": "Comprehensive",
    "custom": "Custom",
}

_PERIOD_NAMES = {
    "daily": "Daily",
    "weekly": "Weekly",
    "monthly": "Monthly",
    "quarterly": "Quarterly",
    "yearly": "Yearly",
    "custom": "Custom",
}


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _add_months(year: int, month: int, months: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def resolve_date_range(
    period_type: str,
    now: datetime,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """
    Resolve the reporting window.

    Explicit dates always win. Otherwise the window is the calendar period
    containing ``now``: weeks start on Sunday, months/quarters/years on
    their first day. Unknown period types fall back to the current month.
    """
    if start_date is not None and end_date is not None:
        return as_utc(start_date), as_utc(end_date)

    now = as_utc(now)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    period = getattr(period_type, "value", period_type)

    if period == "daily":
        return today, today + DAY

    if period == "weekly":
        days_since_sunday = (today.weekday() + 1) % 7
        start = today - timedelta(days=days_since_sunday)
        return start, start + timedelta(days=7)

    if period == "quarterly":
        first_month = (today.month - 1) // 3 * 3 + 1
        start = today.replace(month=first_month, day=1)
        year, month = _add_months(start.year, start.month, 3)
        return start, start.replace(year=year, month=month)

    if period == "yearly":
        start = today.replace(month=1, day=1)
        return start, start.replace(year=start.year + 1)

    # monthly, and the default for anything else
    start = today.replace(day=1)
    year, month = _add_months(start.year, start.month, 1)
    return start, start.replace(year=year, month=month)


def previous_period(start_date: datetime, end_date: datetime) -> Tuple[datetime, datetime]:
    """Same-length window immediately preceding [start_date, end_date]"""
    duration = end_date - start_date
    return start_date - duration, end_date - duration


def period_length_days(start_date: datetime, end_date: datetime) -> int:
    """Whole days covered by the window, rounded up"""
    return math.ceil((end_date - start_date) / DAY)


def generate_report_id(now: datetime) -> str:
    """Report identifier of the form INR-<epoch millis>-<5 chars>"""
    millis = int(as_utc(now).timestamp() * 1000)
    suffix = "".join(secrets.choice(_REPORT_ID_ALPHABET) for _ in range(5))
    return f"INR-{millis}-{suffix}"


def generate_report_name(
    report_type: str,
    period_type: str,
    start_date: datetime,
    end_date: datetime,
) -> str:
    """Human readable report title"""
    type_name = _TYPE_NAMES.get(getattr(report_type, "value", report_type), "Inventory")
    period_name = _PERIOD_NAMES.get(getattr(period_type, "value", period_type), "Custom")
    return (
        f"{type_name} Report - {period_name} "
        f"({start_date:%m/%d/%Y} - {end_date:%m/%d/%Y})"
    )
