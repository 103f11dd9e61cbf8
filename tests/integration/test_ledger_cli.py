"""
Tests for the backoffice-ledger command line.

Subcommands run against the test ledger by passing ``ledger=`` to
``main``; output is parsed back from JSON.
"""

import json
from io import StringIO

import pytest

from ledger_services.cli import build_parser, main

from conftest import MONDAY, SATURDAY, TUESDAY


@pytest.fixture
def run(ledger):
    def _run(*argv):
        out = StringIO()
        code = main(list(argv), ledger=ledger, out=out)
        return code, json.loads(out.getvalue())

    return _run


def add_expense(run, amount="1000", date=MONDAY, *extra):
    return run(
        "expense-add",
        "--amount", amount,
        "--purpose", "fuel",
        "--date", date,
        "--receipt", "receipts/fuel.jpg",
        *extra,
    )


class TestCashCommands:

    def test_cash_set_and_list(self, run):
        code, payload = run("cash-set", "2024-03-01", "500")
        assert code == 0
        assert payload["status"] == "ok"
        assert payload["value"]["amount"] == "500"

        run("cash-set", "2024-03-01", "750")
        code, payload = run("cash")
        assert [(e["date"], e["amount"]) for e in payload["value"]] == [("2024-03-01", "750")]

    def test_cash_for_unrecorded_date(self, run):
        code, payload = run("cash", "--date", "2024-03-02")
        assert code == 0
        assert payload["value"]["amount"] == "0"
        assert payload["value"]["updated_at"] is None

    def test_cash_month(self, run):
        run("cash-set", "2024-03-01", "1")
        run("cash-set", "2024-04-01", "2")
        _, payload = run("cash", "--month", "2024-03")
        assert [e["date"] for e in payload["value"]] == ["2024-03-01"]

    def test_negative_cash_rejected(self, run):
        code, payload = run("cash-set", "2024-03-01", "-5")
        assert code == 1
        assert payload["status"] == "validation_failed"
        assert payload["details"]["field"] == "amount"


class TestExpenseCommands:

    def test_add_move_and_daily_view(self, run):
        code, payload = add_expense(run)
        assert code == 0
        expense = payload["value"]
        assert expense["spender_name"] == "Super Admin"
        assert expense["status"] == "logged"

        code, payload = run("expense-move", expense["id"], SATURDAY)
        assert code == 1
        assert payload["status"] == "invalid_target_date"

        code, payload = run("expense-move", expense["id"], TUESDAY)
        assert code == 0
        assert payload["value"]["date"] == TUESDAY
        assert payload["value"]["status"] == "moved"

        _, payload = run("expenses", "--date", MONDAY)
        assert payload["value"]["total_amount"] == "0"
        _, payload = run("expenses", "--date", TUESDAY)
        assert payload["value"]["total_amount"] == "1000"
        assert payload["value"]["count"] == 1

        _, payload = run("expense-moves", expense["id"])
        assert [(m["previous_date"], m["target_date"]) for m in payload["value"]] == [
            (MONDAY, TUESDAY)
        ]

    def test_cso_expense(self, run):
        code, payload = add_expense(run, "20", MONDAY, "--spender-type", "cso", "--spender-id", "cso-7")
        assert code == 0
        assert payload["value"]["spender_type"] == "cso"
        assert payload["value"]["spender_name"] == "Chidi Officer"

    def test_month_summary_and_ledger(self, run):
        add_expense(run, "10")
        add_expense(run, "5", TUESDAY)
        _, payload = run("expenses", "--month", "2024-03")
        assert [(s["date"], s["count"]) for s in payload["value"]] == [(TUESDAY, 1), (MONDAY, 1)]
        _, payload = run("expenses")
        assert payload["value"]["total_amount"] == "15"

    def test_unknown_expense(self, run):
        code, payload = run("expense-move", "00000000-0000-0000-0000-000000000000", TUESDAY)
        assert code == 1
        assert payload["status"] == "not_found"
        assert payload["error_code"] == "EXPENSE_NOT_FOUND"


class TestHolidayCommands:

    def test_add_list_delete(self, run):
        code, payload = run("holiday-add", "2024-12-25", "--reason", "Christmas", "--recurring")
        assert code == 0
        holiday_id = payload["value"]["id"]
        assert payload["value"]["is_recurring"] is True

        _, payload = run("holidays", "--year", "2030")
        assert [h["reason"] for h in payload["value"]] == ["Christmas"]

        code, payload = run("holiday-delete", holiday_id)
        assert code == 0
        _, payload = run("holidays")
        assert payload["value"] == []

    def test_business_day(self, run):
        run("holiday-add", "2024-03-11")
        _, payload = run("business-day", SATURDAY)
        assert payload["value"] is False
        _, payload = run("business-day", "2024-03-08", "--next")
        assert payload["value"] == "2024-03-12"


class TestParser:

    def test_bad_month_format(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["cash", "--month", "March"])

    def test_date_and_month_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["expenses", "--date", MONDAY, "--month", "2024-03"])

    def test_invalid_timezone_exits_with_config_error(self, capsys):
        assert main(["--timezone", "Mars/Olympus_Mons", "holidays"]) == 2
        assert "business_timezone" in capsys.readouterr().err
