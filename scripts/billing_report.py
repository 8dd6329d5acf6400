#!/usr/bin/env python3
"""
Print or export the billing overview.

Reads clients, contracts, projects and payments from a JSON data directory
(or a database), groups the billing items by client and prints them as a
table, JSON, or an XLSX workbook.

Usage:
    python3 scripts/billing_report.py --data-dir data
    python3 scripts/billing_report.py --data-dir data --status partial --type contract
    python3 scripts/billing_report.py --data-dir data --format xlsx --output billing.xlsx
    python3 scripts/billing_report.py --database-url sqlite:///billing.db --format json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

import yaml

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from billing_config import BillingConfig, get_active_config  # noqa: E402
from billing_engines import (  # noqa: E402
    BillingGroup,
    group_billing_items,
    sort_groups,
    summarize_items,
)
from billing_kernel.domain.values import format_amount  # noqa: E402
from billing_kernel.exceptions import BillingError  # noqa: E402
from billing_kernel.logging_config import configure_logging  # noqa: E402
from billing_services import (  # noqa: E402
    BillingService,
    JsonFileStore,
    SqlStore,
    write_billing_xlsx,
)
from billing_services.export import STATUS_LABELS, TYPE_LABELS  # noqa: E402


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Billing overview by client: totals, paid and pending amounts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory with the JSON collections (default: data_dir from config)",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Read from a database instead of JSON files (e.g. sqlite:///billing.db)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file (default: $BILLING_CONFIG or packaged defaults)",
    )
    parser.add_argument(
        "--status",
        choices=("all",) + tuple(STATUS_LABELS),
        default="all",
        help="Only items with this payment status",
    )
    parser.add_argument(
        "--type",
        dest="item_type",
        choices=("all", "contract", "project"),
        default="all",
        help="Only contracts or only independent projects",
    )
    parser.add_argument(
        "--search",
        default=None,
        help="Case-insensitive match on name, client or description",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=("table", "json", "xlsx"),
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output file; required for xlsx, optional for json",
    )
    return parser.parse_args(argv)


def _build_service(args: argparse.Namespace, config: BillingConfig) -> BillingService:
    if args.database_url:
        from billing_kernel.db.engine import init_engine_from_url

        init_engine_from_url(args.database_url)
        store = SqlStore()
    else:
        store = JsonFileStore(args.data_dir or config.data_dir)
    return BillingService(store, config)


def _groups_to_json(groups: Sequence[BillingGroup]) -> list[dict[str, Any]]:
    return [
        {
            "client_name": group.client_name,
            "total_value": str(group.total_value),
            "paid_amount": str(group.paid_amount),
            "pending_amount": str(group.pending_amount),
            "payment_percentage": str(round(group.payment_percentage, 2)),
            "payment_status": group.payment_status.value,
            "items": [
                {
                    "item_type": item.item_type.value,
                    "item_id": item.item_id,
                    "name": item.name,
                    "description": item.description,
                    "total_value": str(item.total_value),
                    "paid_amount": str(item.paid_amount),
                    "pending_amount": str(item.pending_amount),
                    "payment_percentage": str(round(item.payment_percentage, 2)),
                    "payment_status": item.payment_status.value,
                    "payment_count": item.payment_count,
                    "last_payment_date": (
                        item.last_payment_date.isoformat()
                        if item.last_payment_date
                        else None
                    ),
                }
                for item in group.items
            ],
        }
        for group in groups
    ]


def _print_table(groups: Sequence[BillingGroup], currency: str) -> None:
    def money(value) -> str:
        return format_amount(value, currency)

    for group in groups:
        print()
        print(f"  {group.client_name}")
        print(f"  {'-' * 96}")
        for item in group.items:
            print(
                f"    {TYPE_LABELS[item.item_type.value]:<9} {item.name[:30]:<30} "
                f"{money(item.total_value):>18} {money(item.paid_amount):>18} "
                f"{money(item.pending_amount):>18}  "
                f"{STATUS_LABELS[item.payment_status.value]}"
            )
        print(
            f"    {'Subtotal':<40} {money(group.total_value):>18} "
            f"{money(group.paid_amount):>18} {money(group.pending_amount):>18}  "
            f"{group.payment_percentage:.1f}%"
        )

    summary = summarize_items(item for group in groups for item in group.items)
    print()
    print(f"  Valor total:     {money(summary.total_value)}")
    print(f"  Pagado:          {money(summary.paid_amount)}")
    print(f"  Pendiente:       {money(summary.pending_amount)}")
    print(f"  Items:           {summary.item_count}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.output_format == "xlsx" and args.output is None:
        print("  ERROR: --output is required for xlsx", file=sys.stderr)
        return 1

    try:
        config = get_active_config(args.config)
        configure_logging(level=config.log_level, stream=sys.stderr)

        service = _build_service(args, config)
        items = service.billing_items(
            search=args.search,
            payment_status=args.status,
            item_type=args.item_type,
        )
        groups = group_billing_items(items)
        if config.sort_groups:
            groups = sort_groups(groups)

        if args.output_format == "xlsx":
            path = write_billing_xlsx(groups, args.output)
            print(f"  Written: {path}")
        elif args.output_format == "json":
            text = json.dumps(_groups_to_json(groups), ensure_ascii=False, indent=2)
            if args.output:
                args.output.write_text(text + "\n", encoding="utf-8")
            else:
                print(text)
        else:
            _print_table(groups, config.currency)
    except (BillingError, ValueError, OSError, yaml.YAMLError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
