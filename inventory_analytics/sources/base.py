"""
Data source contract consumed by the report generator.
"""

from datetime import datetime
from typing import Mapping, Protocol, Sequence, runtime_checkable

from ..reporting.config import ReportFilters
from ..reporting.models import ProductSnapshot, SalesActivity


@runtime_checkable
class InventoryDataSource(Protocol):
    """
    Supplies point-in-time inventory records.

    Both methods return static data; implementations raise DataUnavailable
    when they cannot satisfy a request.
    """

    def fetch_product_snapshots(
        self,
        filters: ReportFilters,
        as_of: datetime,
    ) -> Sequence[ProductSnapshot]:
        """Products matching the category/supplier filters as they stood at ``as_of``"""
        ...

    def fetch_sales_activity(
        self,
        product_ids: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> Mapping[str, SalesActivity]:
        """Units sold in [start, end] and the last sale at or before ``end``, per product"""
        ...
