"""
Test Suite Configuration
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Mapping, Sequence

import pytest
import polars as pl

from inventory_analytics.config import Settings
from inventory_analytics.reporting.config import ReportFilters
from inventory_analytics.reporting.errors import DataUnavailable
from inventory_analytics.reporting.models import ProductSnapshot, SalesActivity

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


class StaticDataSource:
    """In-memory data source returning fixed snapshots and activity"""

    def __init__(
        self,
        snapshots: List[ProductSnapshot],
        activity: Dict[str, SalesActivity] = None,
        previous_snapshots: List[ProductSnapshot] = None,
        previous_activity: Dict[str, SalesActivity] = None,
        previous_before: datetime = None,
    ):
        self.snapshots = snapshots
        self.activity = activity or {}
        self.previous_snapshots = previous_snapshots if previous_snapshots is not None else snapshots
        self.previous_activity = previous_activity or {}
        # Requests at or before this instant are served the previous-period data
        self.previous_before = previous_before
        self.calls: List[tuple] = []

    def _is_previous(self, instant: datetime) -> bool:
        return self.previous_before is not None and instant <= self.previous_before

    def fetch_product_snapshots(self, filters: ReportFilters, as_of: datetime) -> Sequence[ProductSnapshot]:
        self.calls.append(("snapshots", as_of))
        known = {s.category_id for s in self.snapshots}
        unknown = set(filters.categories) - known
        if unknown:
            raise DataUnavailable(f"Unknown category referenced by filter: {', '.join(sorted(unknown))}")
        snapshots = self.previous_snapshots if self._is_previous(as_of) else self.snapshots
        if filters.categories:
            snapshots = [s for s in snapshots if s.category_id in filters.categories]
        return snapshots

    def fetch_sales_activity(self, product_ids: Sequence[str], start: datetime, end: datetime) -> Mapping[str, SalesActivity]:
        self.calls.append(("activity", start, end))
        activity = self.previous_activity if self._is_previous(end) else self.activity
        return {pid: activity[pid] for pid in product_ids if pid in activity}


def _make_snapshot(product_id: str = "P1", **overrides) -> ProductSnapshot:
    values = dict(
        product_id=product_id,
        current_stock=20,
        reorder_point=10,
        unit_cost=5.0,
        created_at=NOW - timedelta(days=30),
        category_id="electronics",
        supplier_id="SUP-001",
        name=f"Product {product_id}",
    )
    values.update(overrides)
    return ProductSnapshot(**values)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(APP_ENV="testing", DEBUG=True)


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation instant"""
    return NOW


@pytest.fixture
def sample_snapshots() -> List[ProductSnapshot]:
    """One product per stock status across two categories and suppliers"""
    return [
        _make_snapshot("P1", current_stock=0, reorder_point=10, unit_cost=12.0),
        _make_snapshot("P2", current_stock=5, reorder_point=10, unit_cost=8.0),
        _make_snapshot("P3", current_stock=25, reorder_point=10, unit_cost=4.0, category_id="books", supplier_id="SUP-002"),
        _make_snapshot(
            "P4",
            current_stock=100,
            reorder_point=10,
            unit_cost=2.0,
            category_id="books",
            supplier_id="SUP-002",
            created_at=NOW - timedelta(days=400),
        ),
    ]


@pytest.fixture
def sample_activity() -> Dict[str, SalesActivity]:
    return {
        "P2": SalesActivity("P2", units_sold=30, last_sold_at=NOW - timedelta(days=2)),
        "P3": SalesActivity("P3", units_sold=4, last_sold_at=NOW - timedelta(days=10)),
    }


@pytest.fixture
def static_source(sample_snapshots, sample_activity) -> StaticDataSource:
    return StaticDataSource(sample_snapshots, sample_activity)


@pytest.fixture
def products_df() -> pl.DataFrame:
    """Sample product frame"""
    return pl.DataFrame({
        "product_id": ["P1", "P2", "P3", "P4"],
        "name": ["Phone", "Laptop", "Novel", "Atlas"],
        "sku": ["SKU-1", "SKU-2", "SKU-3", "SKU-4"],
        "category_id": ["electronics", "electronics", "books", "books"],
        "supplier_id": ["SUP-001", "SUP-001", "SUP-002", "SUP-002"],
        "current_stock": [0, 5, 25, 100],
        "reorder_point": [10, 10, None, 10],
        "min_stock": [2, 6, 0, None],
        "max_stock": [50, None, 40, None],
        "unit_cost": [12.0, 8.0, 4.0, 2.0],
        "created_at": [
            datetime(2025, 1, 1),
            datetime(2025, 1, 1),
            datetime(2025, 3, 1),
            datetime(2024, 5, 1),
        ],
    })


@pytest.fixture
def sales_df() -> pl.DataFrame:
    """Sample sale lines"""
    return pl.DataFrame({
        "product_id": ["P2", "P2", "P2", "P3", "P3", "P1"],
        "quantity": [10, 5, 3, 4, 7, 2],
        "sold_at": [
            datetime(2025, 6, 2, 9, 0),
            datetime(2025, 6, 10, 9, 0),
            datetime(2025, 5, 20, 9, 0),
            datetime(2025, 6, 5, 9, 0),
            datetime(2025, 6, 12, 9, 0),
            datetime(2025, 6, 3, 9, 0),
        ],
        "status": ["delivered", "delivered", "delivered", "delivered", "cancelled", "delivered"],
    })


@pytest.fixture
def categories_df() -> pl.DataFrame:
    return pl.DataFrame({
        "category_id": ["electronics", "books"],
        "name": ["Electronics", "Books"],
    })


@pytest.fixture
def suppliers_df() -> pl.DataFrame:
    return pl.DataFrame({
        "supplier_id": ["SUP-001", "SUP-002"],
        "name": ["Acme", "Globex"],
    })


@pytest.fixture
def orders_df() -> pl.DataFrame:
    """Customer orders relative to the fixed evaluation instant"""
    return pl.DataFrame({
        "customer_id": ["C1", "C1", "C1", "C2", "C2", "C3"],
        "placed_at": [
            datetime(2025, 6, 1),
            datetime(2025, 5, 1),
            datetime(2024, 12, 1),
            datetime(2024, 1, 10),
            datetime(2024, 11, 1),
            datetime(2025, 6, 10),
        ],
        "total": [60000.0, 30000.0, 20000.0, 500.0, 800.0, 150.0],
        "status": ["delivered", "delivered", "confirmed", "delivered", "cancelled", "pending"],
        "payment_status": ["paid", "paid", "pending", "paid", "paid", "pending"],
    })


@pytest.fixture
def make_snapshot():
    """Factory for product snapshots with sensible defaults"""
    return _make_snapshot


@pytest.fixture
def source_factory():
    """Factory for in-memory data sources"""
    return StaticDataSource
