"""
Inventory Data Sources Module
"""
from .base import InventoryDataSource
from .frames import FrameDataSource
from .validators import DataValidator, ValidationResult

__all__ = [
    "InventoryDataSource",
    "FrameDataSource",
    "DataValidator",
    "ValidationResult",
]
