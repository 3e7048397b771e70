"""
Polars-backed inventory data source.

Serves product snapshots and sales activity from in-memory frames, or from a
directory holding ``products``, ``sales`` and optional ``categories``,
``suppliers`` and ``stock_history`` files in CSV or Parquet format.

Expected columns:
    products:       product_id, current_stock, created_at, [reorder_point,
                    min_stock, max_stock, unit_cost, category_id, supplier_id,
                    name, sku]
    sales:          product_id, quantity, sold_at, [status]
    categories:     category_id, [name]
    suppliers:      supplier_id, [name]
    stock_history:  product_id, recorded_at, stock
"""

from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

import polars as pl
import structlog

from ..config import get_settings
from ..reporting.config import ReportFilters
from ..reporting.errors import DataUnavailable
from ..reporting.models import ProductSnapshot, SalesActivity
from ..reporting.periods import as_utc
from .validators import ValidationStatus, create_products_validator, create_sales_validator

logger = structlog.get_logger(__name__)

_OPTIONAL_TEXT_COLUMNS = ("category_id", "supplier_id", "name", "sku")


def _naive_utc(value: datetime) -> datetime:
    """Frame datetimes are stored as naive UTC"""
    return as_utc(value).replace(tzinfo=None)


def normalize_datetime_column(df: pl.DataFrame, column: str) -> pl.DataFrame:
    """Parse/convert ``column`` to a naive UTC Datetime"""
    if column not in df.columns:
        return df

    dtype = df.schema[column]
    if dtype == pl.Utf8:
        df = df.with_columns(pl.col(column).str.to_datetime())
    elif dtype == pl.Date:
        df = df.with_columns(pl.col(column).cast(pl.Datetime))

    if getattr(df.schema[column], "time_zone", None):
        df = df.with_columns(
            pl.col(column).dt.convert_time_zone("UTC").dt.replace_time_zone(None)
        )
    return df


def _read_frame(directory: Path, name: str) -> Optional[pl.DataFrame]:
    readers = (
        (".parquet", pl.read_parquet),
        (".csv", partial(pl.read_csv, try_parse_dates=True)),
    )
    for suffix, reader in readers:
        path = directory / f"{name}{suffix}"
        if path.exists():
            logger.debug(f"Loading {path}")
            return reader(path)
    return None


class FrameDataSource:
    """
    Inventory data source over polars DataFrames.

    Frames are validated and normalized once, on construction. Missing
    optional product values get explicit defaults here: minimum stock 0,
    unit cost 0 and the configured default reorder point.

    Example:
        source = FrameDataSource(products=products_df, sales=sales_df)
        snapshots = source.fetch_product_snapshots(ReportFilters(), as_of=now)
    """

    def __init__(
        self,
        products: pl.DataFrame,
        sales: Optional[pl.DataFrame] = None,
        categories: Optional[pl.DataFrame] = None,
        suppliers: Optional[pl.DataFrame] = None,
        stock_history: Optional[pl.DataFrame] = None,
        default_reorder_point: Optional[int] = None,
        counted_sale_statuses: Optional[List[str]] = None,
    ):
        reporting = get_settings().reporting
        self.default_reorder_point = (
            default_reorder_point if default_reorder_point is not None else reporting.default_reorder_point
        )
        self.counted_sale_statuses = list(counted_sale_statuses or reporting.counted_sale_statuses)

        self.categories = self._prepare_lookup(categories, "category_id")
        self.suppliers = self._prepare_lookup(suppliers, "supplier_id")
        self.products = self._prepare_products(products)
        self.sales = self._prepare_sales(sales)
        self.stock_history = self._prepare_history(stock_history)

        logger.info(
            "Frame data source ready",
            products=self.products.height,
            sales=self.sales.height,
        )

    @classmethod
    def from_directory(cls, path: Union[str, Path], **kwargs) -> "FrameDataSource":
        """Load frames from CSV or Parquet files in ``path``"""
        directory = Path(path)
        products = _read_frame(directory, "products")
        if products is None:
            raise DataUnavailable(
                f"No products file found in {directory}",
                details={"path": str(directory)},
            )
        return cls(
            products=products,
            sales=_read_frame(directory, "sales"),
            categories=_read_frame(directory, "categories"),
            suppliers=_read_frame(directory, "suppliers"),
            stock_history=_read_frame(directory, "stock_history"),
            **kwargs,
        )

    # -------------------------------------------------------------------------
    # Preparation
    # -------------------------------------------------------------------------

    @staticmethod
    def _prepare_lookup(df: Optional[pl.DataFrame], key: str) -> Optional[pl.DataFrame]:
        if df is None:
            return None
        if key not in df.columns:
            raise DataUnavailable(f"Lookup frame is missing column '{key}'")
        return df.with_columns(pl.col(key).cast(pl.Utf8))

    def _prepare_products(self, products: pl.DataFrame) -> pl.DataFrame:
        df = normalize_datetime_column(products, "created_at")
        for column in ("product_id",) + _OPTIONAL_TEXT_COLUMNS:
            if column in df.columns:
                df = df.with_columns(pl.col(column).cast(pl.Utf8))

        result = create_products_validator(self.categories, self.suppliers).validate(df)
        if result.status == ValidationStatus.FAILED:
            raise DataUnavailable(
                "Product data failed validation: " + "; ".join(result.errors),
                details={"errors": result.errors},
            )

        defaults = {
            "reorder_point": self.default_reorder_point,
            "min_stock": 0,
            "unit_cost": 0.0,
        }
        for column, default in defaults.items():
            if column in df.columns:
                df = df.with_columns(pl.col(column).fill_null(default))
            else:
                df = df.with_columns(pl.lit(default).alias(column))

        if "max_stock" not in df.columns:
            df = df.with_columns(pl.lit(None, dtype=pl.Int64).alias("max_stock"))
        for column in _OPTIONAL_TEXT_COLUMNS:
            if column not in df.columns:
                df = df.with_columns(pl.lit(None, dtype=pl.Utf8).alias(column))
        return df

    def _prepare_sales(self, sales: Optional[pl.DataFrame]) -> pl.DataFrame:
        if sales is None:
            return pl.DataFrame(
                schema={"product_id": pl.Utf8, "quantity": pl.Int64, "sold_at": pl.Datetime}
            )

        df = normalize_datetime_column(sales, "sold_at")
        if "product_id" in df.columns:
            df = df.with_columns(pl.col("product_id").cast(pl.Utf8))

        result = create_sales_validator().validate(df)
        if result.status == ValidationStatus.FAILED:
            raise DataUnavailable(
                "Sales data failed validation: " + "; ".join(result.errors),
                details={"errors": result.errors},
            )
        return df

    @staticmethod
    def _prepare_history(history: Optional[pl.DataFrame]) -> Optional[pl.DataFrame]:
        if history is None:
            return None
        missing = {"product_id", "recorded_at", "stock"} - set(history.columns)
        if missing:
            raise DataUnavailable(
                f"Stock history is missing columns: {sorted(missing)}",
                details={"missing": sorted(missing)},
            )
        return normalize_datetime_column(history, "recorded_at").with_columns(
            pl.col("product_id").cast(pl.Utf8)
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _known_keys(self, lookup: Optional[pl.DataFrame], column: str) -> set:
        frame = lookup if lookup is not None else self.products
        return set(frame[column].drop_nulls().to_list())

    def _check_filter_references(self, filters: ReportFilters) -> None:
        for requested, lookup, column in (
            (filters.categories, self.categories, "category_id"),
            (filters.suppliers, self.suppliers, "supplier_id"),
        ):
            unknown = sorted(set(requested) - self._known_keys(lookup, column))
            if unknown:
                raise DataUnavailable(
                    f"Unknown {column.replace('_id', '')} referenced by filter: {', '.join(unknown)}",
                    details={column: unknown},
                )

    def fetch_product_snapshots(
        self,
        filters: ReportFilters,
        as_of: datetime,
    ) -> List[ProductSnapshot]:
        """Products created by ``as_of`` matching the category/supplier filters"""
        self._check_filter_references(filters)
        bound = _naive_utc(as_of)

        df = self.products.filter(pl.col("created_at") <= bound)
        if filters.categories:
            df = df.filter(pl.col("category_id").is_in(filters.categories))
        if filters.suppliers:
            df = df.filter(pl.col("supplier_id").is_in(filters.suppliers))

        if self.stock_history is not None:
            stock_as_of = (
                self.stock_history
                .filter(pl.col("recorded_at") <= bound)
                .group_by("product_id")
                .agg(pl.col("stock").sort_by("recorded_at").last().alias("stock_as_of"))
            )
            df = (
                df.join(stock_as_of, on="product_id", how="left")
                .with_columns(pl.coalesce(["stock_as_of", "current_stock"]).alias("current_stock"))
                .drop("stock_as_of")
            )

        snapshots = [
            ProductSnapshot(
                product_id=row["product_id"],
                current_stock=int(row["current_stock"]),
                reorder_point=int(row["reorder_point"]),
                unit_cost=float(row["unit_cost"]),
                created_at=as_utc(row["created_at"]),
                min_stock=int(row["min_stock"]),
                max_stock=int(row["max_stock"]) if row["max_stock"] is not None else None,
                category_id=row["category_id"],
                supplier_id=row["supplier_id"],
                name=row["name"],
                sku=row["sku"],
            )
            for row in df.iter_rows(named=True)
        ]
        logger.debug(f"Fetched {len(snapshots)} product snapshots", as_of=as_of.isoformat())
        return snapshots

    def fetch_sales_activity(
        self,
        product_ids: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> Mapping[str, SalesActivity]:
        """Counted units sold in [start, end] and the last counted sale up to ``end``"""
        activity: Dict[str, SalesActivity] = {pid: SalesActivity(product_id=pid) for pid in product_ids}
        if not product_ids or self.sales.is_empty():
            return activity

        start_bound, end_bound = _naive_utc(start), _naive_utc(end)
        lines = self.sales.filter(
            pl.col("product_id").is_in(list(product_ids)) & (pl.col("sold_at") <= end_bound)
        )
        if "status" in lines.columns:
            lines = lines.filter(pl.col("status").is_in(self.counted_sale_statuses))

        stats = lines.group_by("product_id").agg([
            pl.col("quantity").filter(pl.col("sold_at") >= start_bound).sum().alias("units_sold"),
            pl.col("sold_at").max().alias("last_sold_at"),
        ])

        for row in stats.iter_rows(named=True):
            activity[row["product_id"]] = SalesActivity(
                product_id=row["product_id"],
                units_sold=row["units_sold"] or 0,
                last_sold_at=as_utc(row["last_sold_at"]) if row["last_sold_at"] else None,
            )

        logger.debug(
            f"Fetched sales activity for {len(activity)} products",
            start=start.isoformat(),
            end=end.isoformat(),
            lines=lines.height,
        )
        return activity
