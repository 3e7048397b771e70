"""
Command-line entry point.

Usage:
    inventory-analytics report --data-dir ./data --type comprehensive --period monthly
    inventory-analytics report --data-dir ./data --period custom --start 2025-01-01T00:00:00 --end 2025-02-01T00:00:00
    inventory-analytics alerts --data-dir ./data
    inventory-analytics customers --orders ./data/orders.csv --customers ./data/customers.csv
"""

import argparse
import json
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import polars as pl
import structlog

from .config import get_settings
from .config.logging import configure_logging
from .customers import CustomerAnalyzer
from .reporting import (
    LowStockAlerter,
    PeriodType,
    ReportGenerator,
    ReportType,
    report_to_dict,
    summarize_alerts,
)
from .reporting.errors import ReportError
from .reporting.serializers import to_jsonable
from .sources import FrameDataSource

logger = structlog.get_logger(__name__)


def _parse_datetime(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Not an ISO date/datetime: {value}")
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _read_table(path: str) -> pl.DataFrame:
    if path.endswith(".parquet"):
        return pl.read_parquet(path)
    return pl.read_csv(path, try_parse_dates=True)


def _emit(payload, output: Optional[str]) -> None:
    text = json.dumps(payload, indent=2, default=str)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        logger.info(f"Wrote {output}")
    else:
        print(text)


def _cmd_report(args: argparse.Namespace) -> int:
    """Generate one report; a failed report exits with status 1"""
    reporting = get_settings().reporting
    config = {
        "report_type": args.type,
        "period_type": args.period or reporting.default_period_type,
        "thresholds": reporting.default_thresholds(),
    }
    if args.start or args.end:
        config["start_date"] = args.start
        config["end_date"] = args.end
    if args.category:
        config["filters"] = {"categories": args.category}
    if args.supplier:
        config.setdefault("filters", {})["suppliers"] = args.supplier

    source = FrameDataSource.from_directory(args.data_dir)
    report = ReportGenerator(source).generate(config, generated_by=args.generated_by, now=args.now)
    _emit(report_to_dict(report), args.output)

    if report.failure_reason is not None:
        print(f"Report failed ({report.failure_kind.value}): {report.failure_reason}", file=sys.stderr)
        return 1
    return 0


def _cmd_alerts(args: argparse.Namespace) -> int:
    reporting = get_settings().reporting
    alerter = LowStockAlerter(
        window_days=args.window_days or reporting.alert_window_days,
        default_reorder_quantity=reporting.default_reorder_quantity,
        include_out_of_stock=not args.no_out_of_stock,
        include_critical=not args.no_critical,
        include_warning=not args.no_warning,
    )
    alerts = alerter.collect(FrameDataSource.from_directory(args.data_dir), args.now)
    _emit(
        {"summary": asdict(summarize_alerts(alerts)), "alerts": to_jsonable(alerts)},
        args.output,
    )
    return 0


def _cmd_customers(args: argparse.Namespace) -> int:
    orders = _read_table(args.orders)
    customers = _read_table(args.customers) if args.customers else None
    report = CustomerAnalyzer(args.now).analyze(orders, customers, min_orders=args.min_orders)
    _emit(to_jsonable(report), args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inventory-analytics",
        description="Inventory reports, stock alerts and customer analytics",
    )
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    parser.add_argument(
        "--now",
        type=_parse_datetime,
        default=None,
        help="Evaluation instant (ISO format, default: current UTC time)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Generate an inventory report")
    report.add_argument("--data-dir", default=None, help="Directory with products/sales files")
    report.add_argument("--type", default=ReportType.COMPREHENSIVE.value, choices=[t.value for t in ReportType])
    report.add_argument("--period", default=None, choices=[p.value for p in PeriodType])
    report.add_argument("--start", type=_parse_datetime, help="Period start (ISO format)")
    report.add_argument("--end", type=_parse_datetime, help="Period end (ISO format)")
    report.add_argument("--category", action="append", help="Restrict to a category (repeatable)")
    report.add_argument("--supplier", action="append", help="Restrict to a supplier (repeatable)")
    report.add_argument("--generated-by", default="cli", help="Requesting user")
    report.add_argument("--output", help="Write JSON to this file instead of stdout")
    report.set_defaults(handler=_cmd_report)

    alerts = subparsers.add_parser("alerts", help="List low-stock alerts")
    alerts.add_argument("--data-dir", default=None, help="Directory with products/sales files")
    alerts.add_argument("--window-days", type=int, default=None, help="Trailing sales window")
    alerts.add_argument("--no-out-of-stock", action="store_true", help="Skip out-of-stock alerts")
    alerts.add_argument("--no-critical", action="store_true", help="Skip below-minimum alerts")
    alerts.add_argument("--no-warning", action="store_true", help="Skip reorder-point warnings")
    alerts.add_argument("--output", help="Write JSON to this file instead of stdout")
    alerts.set_defaults(handler=_cmd_alerts)

    customers = subparsers.add_parser("customers", help="Customer RFM, CLV and churn analytics")
    customers.add_argument("--orders", required=True, help="Orders CSV or Parquet file")
    customers.add_argument("--customers", help="Optional customers CSV or Parquet file")
    customers.add_argument("--min-orders", type=int, default=0, help="Minimum eligible orders")
    customers.add_argument("--output", help="Write JSON to this file instead of stdout")
    customers.set_defaults(handler=_cmd_customers)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.now is None:
        args.now = datetime.now(timezone.utc)
    if getattr(args, "data_dir", None) is None and args.command in ("report", "alerts"):
        args.data_dir = get_settings().reporting.data_path

    try:
        return args.handler(args)
    except ReportError as e:
        logger.error(f"{args.command} failed: {e.message}", error_kind=e.kind.value)
        print(f"Error ({e.kind.value}): {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
