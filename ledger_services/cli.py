"""
Command line over BackOfficeLedger.

Every subcommand prints one JSON document: ``{"status": "ok", "value": ...}``
on success, or the status, error code, message and details on failure.
The exit code is 0 on success and 1 on a rejected command.

Examples:
    backoffice-ledger cash-set 2024-03-01 500
    backoffice-ledger expense-add --amount 1000 --purpose fuel \\
        --date 2024-03-04 --receipt receipts/fuel.jpg
    backoffice-ledger expense-move <expense-id> 2024-03-05
    backoffice-ledger expenses --month 2024-03
    backoffice-ledger holiday-add 2024-12-25 --reason Christmas --recurring
    backoffice-ledger holidays --year 2025
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from collections.abc import Sequence
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO

from ledger_config import get_active_config
from ledger_kernel.domain.dtos import ExpenseInfo
from ledger_kernel.exceptions import ConfigurationError
from ledger_services.backoffice_ledger import BackOfficeLedger
from ledger_services.bootstrap import build_ledger
from ledger_services.result import CommandResult


# =============================================================================
# Output
# =============================================================================


def to_payload(value: Any) -> Any:
    """JSON-ready form of DTOs, results and their contents."""
    if isinstance(value, CommandResult):
        if value.is_success:
            return {"status": value.status.value, "value": to_payload(value.value)}
        return {
            "status": value.status.value,
            "error_code": value.error_code,
            "message": value.message,
            "details": to_payload(value.details),
        }
    if isinstance(value, ExpenseInfo):
        return {
            "id": str(value.id),
            "amount": str(value.amount),
            "purpose": value.purpose,
            "date": value.date,
            "spender_type": value.spender_type,
            "spender_id": value.spender_id,
            "spender_name": value.spender_name,
            "receipt_img": value.receipt_img,
            "submitted_at": value.submitted_at.isoformat(),
            "moved_at": value.moved_at.isoformat() if value.moved_at else None,
            "status": value.status.value,
        }
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        payload = {
            f.name: to_payload(getattr(value, f.name)) for f in dataclasses.fields(value)
        }
        if hasattr(value, "count") and "count" not in payload:
            payload["count"] = value.count
        return payload
    if isinstance(value, dict):
        return {str(k): to_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def emit(result: CommandResult, out: TextIO) -> int:
    out.write(json.dumps(to_payload(result), indent=2, sort_keys=True))
    out.write("\n")
    return 0 if result.is_success else 1


# =============================================================================
# Subcommands
# =============================================================================


def _year_month(text: str) -> tuple[int, int]:
    try:
        year, month = text.split("-")
        return int(year), int(month)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {text!r}") from None


def _dispatch(ledger: BackOfficeLedger, args: argparse.Namespace) -> CommandResult:
    command = args.command
    if command == "cash-set":
        return ledger.set_cash_at_hand(args.date, args.amount)
    if command == "cash":
        if args.month:
            return ledger.cash_history(*args.month)
        return ledger.cash_entries(args.date)
    if command == "expense-add":
        return ledger.create_expense(
            amount=args.amount,
            purpose=args.purpose,
            date=args.date,
            receipt_img=args.receipt,
            spender_type=args.spender_type,
            spender_id=args.spender_id,
        )
    if command == "expense-move":
        return ledger.move_expense(args.expense_id, args.target_date)
    if command == "expense-moves":
        return ledger.expense_moves(args.expense_id)
    if command == "expenses":
        if args.date:
            return ledger.daily_expenses(args.date)
        if args.month:
            return ledger.monthly_expense_summary(*args.month)
        return ledger.expense_entries()
    if command == "holiday-add":
        return ledger.create_holiday(args.date, args.reason, args.recurring)
    if command == "holiday-delete":
        return ledger.delete_holiday(args.holiday_id)
    if command == "holidays":
        return ledger.list_holidays(args.year)
    if command == "business-day":
        if args.next:
            return ledger.next_business_day(args.date)
        return ledger.is_business_day(args.date)
    raise ValueError(f"Unknown command {command!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="backoffice-ledger",
        description="Back-office cash, expense and holiday ledger.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument("--config", type=str, help="YAML configuration file")
    parser.add_argument("--db-url", type=str, help="Database URL (overrides config)")
    parser.add_argument("--timezone", type=str, help="Business timezone (overrides config)")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("cash-set", help="Record the cash at hand for a date")
    p.add_argument("date")
    p.add_argument("amount")

    p = sub.add_parser("cash", help="List cash snapshots")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--date", help="One date (zero when unrecorded)")
    group.add_argument("--month", type=_year_month, help="YYYY-MM history")

    p = sub.add_parser("expense-add", help="Record an expense")
    p.add_argument("--amount", required=True)
    p.add_argument("--purpose", required=True)
    p.add_argument("--date", required=True)
    p.add_argument("--receipt", required=True, help="Receipt image reference")
    p.add_argument(
        "--spender-type", default="super_admin", choices=["super_admin", "admin", "cso"]
    )
    p.add_argument("--spender-id")

    p = sub.add_parser("expense-move", help="Move an expense to another business day")
    p.add_argument("expense_id")
    p.add_argument("target_date")

    p = sub.add_parser("expense-moves", help="Show an expense's move history")
    p.add_argument("expense_id")

    p = sub.add_parser("expenses", help="Expense views")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--date", help="One day's expenses")
    group.add_argument("--month", type=_year_month, help="YYYY-MM per-date summary")

    p = sub.add_parser("holiday-add", help="Add a holiday")
    p.add_argument("date")
    p.add_argument("--reason")
    p.add_argument("--recurring", action="store_true")

    p = sub.add_parser("holiday-delete", help="Delete a holiday")
    p.add_argument("holiday_id")

    p = sub.add_parser("holidays", help="List holidays")
    p.add_argument("--year", type=int)

    p = sub.add_parser("business-day", help="Check a date against the calendar")
    p.add_argument("date")
    p.add_argument("--next", action="store_true", help="Print the next business day")

    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    ledger: BackOfficeLedger | None = None,
    out: TextIO | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    out = out or sys.stdout

    if ledger is None:
        overrides: dict[str, Any] = {}
        if args.db_url:
            overrides["database_url"] = args.db_url
        if args.timezone:
            overrides["business_timezone"] = args.timezone
        try:
            ledger = build_ledger(get_active_config(args.config, overrides=overrides))
        except ConfigurationError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 2

    return emit(_dispatch(ledger, args), out)


if __name__ == "__main__":
    sys.exit(main())
