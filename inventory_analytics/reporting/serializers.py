"""
JSON-ready rendering of reports and alerts for the boundary layer.
"""

import dataclasses
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel

from .models import Report


def to_jsonable(value: Any) -> Any:
    """Recursively convert dataclasses, enums, datetimes and models to plain JSON types"""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {
            (k.value if isinstance(k, Enum) else str(k)): to_jsonable(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def report_to_dict(report: Report) -> Dict[str, Any]:
    """
    Serialize a report.

    A failed report carries its status and failure reason only.
    """
    data = to_jsonable(report)
    data["duration_days"] = report.duration_days
    if report.failure_reason is not None:
        for key in (
            "summary", "stock_levels", "turnover_rates", "aging_analysis",
            "category_performance", "supplier_performance", "comparison", "insights",
        ):
            data.pop(key, None)
    return data
