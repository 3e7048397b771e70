"""
Inventory Dataset Generator

Writes a synthetic products/sales/categories/suppliers/customers/orders
dataset that the ``inventory-analytics`` commands can read.

Usage:
    python scripts/generate_dataset.py --output data/generated --products 1000
"""

import argparse
from pathlib import Path

from inventory_analytics.config.logging import configure_logging
from inventory_analytics.data import InventoryDataGenerator

DEFAULT_OUTPUT = Path(__file__).parent.parent / "data" / "generated"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a synthetic inventory dataset")
    parser.add_argument("--output", default=str(DEFAULT_OUTPUT), help="Output directory")
    parser.add_argument("--products", type=int, default=500, help="Number of products")
    parser.add_argument("--suppliers", type=int, default=12, help="Number of suppliers")
    parser.add_argument("--sales-days", type=int, default=365, help="Days of sales history")
    parser.add_argument("--customers", type=int, default=200, help="Number of customers")
    parser.add_argument("--orders", type=int, default=3000, help="Number of customer orders")
    parser.add_argument("--format", choices=["csv", "parquet"], default="csv", help="Output file format")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    return parser.parse_args()


def main():
    args = parse_args()
    configure_logging()

    data = InventoryDataGenerator(args.output, seed=args.seed).generate_all(
        n_products=args.products,
        n_suppliers=args.suppliers,
        sales_days=args.sales_days,
        n_customers=args.customers,
        n_orders=args.orders,
        file_format=args.format,
    )

    print(f"\nOutput: {args.output}")
    for name, df in data.items():
        print(f"   {name}.{args.format}: {df.height:,} rows")


if __name__ == "__main__":
    main()
