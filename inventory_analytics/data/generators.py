"""
Synthetic Inventory Data Generator

Generates realistic inventory data for testing and development.
Includes:
- Categories and suppliers
- Products with stock levels, reorder points and costs
- Sale lines with a mix of fast, slow and dead movers
- Customer orders for customer analytics
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import polars as pl
import structlog
from faker import Faker

from ..config import get_settings

logger = structlog.get_logger(__name__)

fake = Faker()


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("electronics", ["Phones", "Laptops", "Tablets", "Headphones", "Cameras"]),
    ("clothing", ["Shirts", "Pants", "Dresses", "Shoes", "Jackets"]),
    ("home_garden", ["Furniture", "Kitchen", "Bedding", "Garden", "Decor"]),
    ("sports", ["Fitness", "Outdoor", "Team Sports", "Water Sports", "Cycling"]),
    ("beauty", ["Skincare", "Makeup", "Haircare", "Fragrance", "Tools"]),
    ("books", ["Fiction", "Non-Fiction", "Educational", "Children", "Comics"]),
]

COST_RANGES = {
    "electronics": (30, 1200),
    "clothing": (8, 200),
    "home_garden": (15, 500),
    "sports": (10, 400),
    "beauty": (4, 80),
    "books": (4, 25),
}

# Share of products by sales velocity, and units per sale line
VELOCITY_MIX = {"fast": 0.2, "medium": 0.4, "slow": 0.25, "dead": 0.15}

SALE_STATUSES = [
    ("delivered", 0.80),
    ("shipped", 0.08),
    ("pending", 0.05),
    ("cancelled", 0.04),
    ("returned", 0.03),
]

ORDER_STATUSES = [
    ("delivered", 0.70),
    ("confirmed", 0.08),
    ("pending", 0.10),
    ("cancelled", 0.07),
    ("returned", 0.05),
]

PAYMENT_STATUSES = [("paid", 0.75), ("partial", 0.05), ("pending", 0.20)]


def _naive(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# =============================================================================
# GENERATORS
# =============================================================================

class CatalogGenerator:
    """Generate categories and suppliers"""

    def categories(self) -> pl.DataFrame:
        return pl.DataFrame({
            "category_id": [name for name, _ in CATEGORIES],
            "name": [name.replace("_", " ").title() for name, _ in CATEGORIES],
        })

    def suppliers(self, n: int = 12) -> pl.DataFrame:
        return pl.DataFrame({
            "supplier_id": [f"SUP-{i:03d}" for i in range(1, n + 1)],
            "name": [fake.company() for _ in range(n)],
            "email": [fake.company_email() for _ in range(n)],
            "country": [fake.country_code() for _ in range(n)],
        })


class ProductGenerator:
    """Generate a product catalog with stock levels"""

    def __init__(self, supplier_ids: List[str], now: datetime):
        self.supplier_ids = supplier_ids
        self.now = now

    def generate(self, n: int = 500) -> pl.DataFrame:
        """Generate n products"""
        products = []

        for i in range(n):
            category, subcategories = random.choice(CATEGORIES)
            low, high = COST_RANGES[category]
            reorder_point = random.randint(5, 50)
            velocity = random.choices(list(VELOCITY_MIX), weights=list(VELOCITY_MIX.values()))[0]

            # Stock spread across out-of-stock, low, normal and overstocked
            stock = int(np.random.choice(
                [0, random.randint(1, reorder_point), random.randint(reorder_point + 1, reorder_point * 3),
                 random.randint(reorder_point * 3 + 1, reorder_point * 6)],
                p=[0.08, 0.17, 0.55, 0.20],
            ))

            products.append({
                "product_id": str(uuid.uuid4()),
                "sku": f"SKU-{i:08d}",
                "name": f"{fake.word().title()} {random.choice(subcategories)}",
                "category_id": category,
                "supplier_id": random.choice(self.supplier_ids),
                "current_stock": stock,
                "reorder_point": reorder_point,
                "min_stock": max(0, reorder_point // 3),
                "max_stock": reorder_point * 5 if random.random() < 0.6 else None,
                "unit_cost": round(random.uniform(low, high), 2),
                "velocity": velocity,
                "created_at": _naive(self.now - timedelta(days=random.randint(30, 900))),
            })

        return pl.DataFrame(products)


class SalesGenerator:
    """Generate sale lines following each product's velocity"""

    LINES_PER_YEAR = {"fast": (120, 300), "medium": (30, 90), "slow": (4, 20), "dead": (0, 0)}

    def __init__(self, products_df: pl.DataFrame, now: datetime):
        self.products = products_df.select(["product_id", "velocity", "created_at"]).to_dicts()
        self.now = now

    def generate(self, days: int = 365) -> pl.DataFrame:
        end = _naive(self.now)
        lines = []

        for product in self.products:
            low, high = self.LINES_PER_YEAR[product["velocity"]]
            n_lines = int(random.randint(low, high) * days / 365)
            first_day = max(product["created_at"], end - timedelta(days=days))
            span_seconds = max(int((end - first_day).total_seconds()), 1)

            offsets = np.random.randint(0, span_seconds, n_lines)
            quantities = np.random.choice([1, 2, 3, 4, 5], n_lines, p=[0.55, 0.25, 0.12, 0.05, 0.03])
            statuses = random.choices(
                [s[0] for s in SALE_STATUSES],
                weights=[s[1] for s in SALE_STATUSES],
                k=n_lines,
            )
            for offset, quantity, status in zip(offsets, quantities, statuses):
                lines.append({
                    "sale_id": str(uuid.uuid4()),
                    "product_id": product["product_id"],
                    "quantity": int(quantity),
                    "sold_at": first_day + timedelta(seconds=int(offset)),
                    "status": status,
                })

        if not lines:
            return pl.DataFrame(schema={
                "sale_id": pl.Utf8, "product_id": pl.Utf8, "quantity": pl.Int64,
                "sold_at": pl.Datetime, "status": pl.Utf8,
            })
        return pl.DataFrame(lines).sort("sold_at")


class OrderGenerator:
    """Generate customer orders for customer analytics"""

    def __init__(self, now: datetime):
        self.now = now

    def generate(self, n_customers: int = 200, n_orders: int = 3000) -> Dict[str, pl.DataFrame]:
        customers = pl.DataFrame({
            "customer_id": [f"CUST-{i:06d}" for i in range(1, n_customers + 1)],
            "name": [fake.name() for _ in range(n_customers)],
            "email": [fake.email() for _ in range(n_customers)],
        })

        # Skewed activity so every segment shows up
        weights = np.random.pareto(1.2, n_customers) + 0.05
        weights = weights / weights.sum()
        customer_ids = np.random.choice(customers["customer_id"].to_list(), n_orders, p=weights)

        end = _naive(self.now)
        offsets = np.random.randint(0, 730 * 24, n_orders)
        orders = pl.DataFrame({
            "order_id": [str(uuid.uuid4()) for _ in range(n_orders)],
            "customer_id": customer_ids,
            "placed_at": [end - timedelta(hours=int(h)) for h in offsets],
            "total": np.round(np.random.lognormal(6.5, 1.0, n_orders), 2),
            "status": random.choices(
                [s[0] for s in ORDER_STATUSES], weights=[s[1] for s in ORDER_STATUSES], k=n_orders
            ),
            "payment_status": random.choices(
                [s[0] for s in PAYMENT_STATUSES], weights=[s[1] for s in PAYMENT_STATUSES], k=n_orders
            ),
        })
        return {"customers": customers, "orders": orders.sort("placed_at")}


# =============================================================================
# MAIN GENERATOR
# =============================================================================

class InventoryDataGenerator:
    """
    Generates a complete inventory dataset.

    Example:
        data = InventoryDataGenerator("./data", seed=42).generate_all(n_products=200)
    """

    def __init__(
        self,
        output_dir: Optional[str] = None,
        seed: Optional[int] = 42,
        now: Optional[datetime] = None,
    ):
        self.output_dir = Path(output_dir or get_settings().reporting.data_path)
        self.now = now or datetime.now(timezone.utc)
        if seed is not None:
            random.seed(seed)
            np.random.seed(seed)
            Faker.seed(seed)

    def generate_all(
        self,
        n_products: int = 500,
        n_suppliers: int = 12,
        sales_days: int = 365,
        n_customers: int = 200,
        n_orders: int = 3000,
        save: bool = True,
        file_format: str = "csv",
    ) -> Dict[str, pl.DataFrame]:
        """Generate categories, suppliers, products, sales, customers and orders"""
        logger.info("Generating synthetic inventory data", products=n_products, orders=n_orders)

        catalog = CatalogGenerator()
        categories = catalog.categories()
        suppliers = catalog.suppliers(n_suppliers)
        products = ProductGenerator(suppliers["supplier_id"].to_list(), self.now).generate(n_products)
        sales = SalesGenerator(products, self.now).generate(sales_days)

        data = {
            "categories": categories,
            "suppliers": suppliers,
            "products": products.drop("velocity"),
            "sales": sales,
            **OrderGenerator(self.now).generate(n_customers, n_orders),
        }

        if save:
            self._save_data(data, file_format)

        logger.info("Data generation complete", **{name: df.height for name, df in data.items()})
        return data

    def _save_data(self, data: Dict[str, pl.DataFrame], file_format: str) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        for name, df in data.items():
            path = self.output_dir / f"{name}.{file_format}"
            if file_format == "parquet":
                df.write_parquet(path)
            else:
                df.write_csv(path)
            logger.info(f"Saved {name}: {len(df)} rows -> {path}")
