"""
Data Generation Module
"""
from .generators import (
    CatalogGenerator,
    InventoryDataGenerator,
    OrderGenerator,
    ProductGenerator,
    SalesGenerator,
)

__all__ = [
    "CatalogGenerator",
    "InventoryDataGenerator",
    "OrderGenerator",
    "ProductGenerator",
    "SalesGenerator",
]
