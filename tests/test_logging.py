"""Tests for the ledger's structured JSON log output."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from ledger_config import LedgerConfig
from ledger_kernel.domain.dtos import HolidayInfo
from ledger_kernel.exceptions import InvalidTargetDateError, ValidationError
from ledger_kernel.logging_config import (
    LogContext,
    configure_logging,
    get_logger,
    log_value,
    reset_logging,
)
from ledger_services import BackOfficeLedger, CommandResult

from conftest import MONDAY, SATURDAY, TUESDAY


@pytest.fixture
def log_stream():
    """Install a fresh ledger handler writing to a StringIO."""
    reset_logging()
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)
    yield stream
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())


def read_records(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def add_fuel(ledger, **overrides):
    fields = {
        "amount": "1000.50",
        "purpose": "fuel",
        "date": MONDAY,
        "receipt_img": "receipts/fuel-0001.jpg",
    }
    fields.update(overrides)
    return ledger.create_expense(**fields)


class TestLogValue:

    def test_money_stays_exact(self):
        assert log_value(Decimal("1000.10")) == "1000.10"
        assert log_value({"total": Decimal("0.000000001")}) == {"total": "0.000000001"}

    def test_dto_becomes_dict(self):
        holiday_id = uuid4()
        info = HolidayInfo(id=holiday_id, holiday="2024-12-25", is_recurring=True, reason="Christmas")
        assert log_value(info) == {
            "id": str(holiday_id),
            "holiday": "2024-12-25",
            "is_recurring": True,
            "reason": "Christmas",
        }

    def test_failed_command_result(self):
        result = CommandResult.failure(ValidationError("amount", "must be greater than zero"))
        value = log_value(result)
        assert value["status"] == "validation_failed"
        assert value["error_code"] == "VALIDATION_ERROR"
        assert value["details"] == {"field": "amount", "reason": "must be greater than zero"}
        assert "error" not in value

    def test_config_is_masked(self):
        config = LedgerConfig(database_url="postgresql://ledger:secret@db/ledger")
        value = log_value(config)
        assert "secret" not in value["database"]
        assert value["weekend_days"] == [6, 7]


class TestLogContext:

    def test_bind_nests_and_restores(self):
        with LogContext.bind(command="move_expense", correlation_id="c-1"):
            with LogContext.bind(expense_id="e-1"):
                assert LogContext.get_all() == {
                    "command": "move_expense",
                    "correlation_id": "c-1",
                    "expense_id": "e-1",
                }
            assert "expense_id" not in LogContext.get_all()
        assert LogContext.get_all() == {}

    def test_values_are_stringified(self):
        expense_id = uuid4()
        with LogContext.bind(expense_id=expense_id, date_key=None):
            assert LogContext.get_all() == {"expense_id": str(expense_id)}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="amount"):
            LogContext.set(amount="10")


class TestStructuredFormatter:

    def test_context_and_extra_fields(self, log_stream):
        with LogContext.bind(command="set_cash_at_hand", date_key=MONDAY):
            get_logger("services.cash").info(
                "cash_snapshot_upserted", extra={"amount": Decimal("500.00"), "inserted": True}
            )
        (record,) = read_records(log_stream)
        assert record["logger"] == "ledger_kernel.services.cash"
        assert record["command"] == "set_cash_at_hand"
        assert record["date_key"] == MONDAY
        assert record["amount"] == "500.00"
        assert record["inserted"] is True

    def test_extra_overrides_context(self, log_stream):
        expense_id = uuid4()
        with LogContext.bind(expense_id=str(expense_id).upper()):
            get_logger("services.expense").info("expense_moved", extra={"expense_id": expense_id})
        (record,) = read_records(log_stream)
        assert record["expense_id"] == str(expense_id)

    def test_kernel_error_rendered(self, log_stream):
        try:
            raise InvalidTargetDateError("exp-1", SATURDAY)
        except InvalidTargetDateError:
            get_logger("test").error("move_failed", exc_info=True)
        (record,) = read_records(log_stream)
        assert record["error"]["type"] == "InvalidTargetDateError"
        assert record["error"]["code"] == "INVALID_TARGET_DATE"
        assert record["error"]["target_date"] == SATURDAY
        assert "Traceback" in record["traceback"]

    def test_qualified_name_not_prefixed_twice(self):
        assert get_logger("ledger_kernel.config").name == "ledger_kernel.config"
        assert get_logger("services.expense").name == "ledger_kernel.services.expense"

    def test_configure_is_idempotent(self, log_stream):
        root = configure_logging(stream=StringIO())
        assert len(root.handlers) == 1
        get_logger("test").debug("still_debug")
        assert read_records(log_stream)[0]["message"] == "still_debug"


class TestCommandLogContract:

    def test_move_records_share_correlation_id(self, ledger, captured_logs):
        expense = add_fuel(ledger).value
        ledger.move_expense(expense.id, TUESDAY)
        records = [r for r in captured_logs() if r.get("command") == "move_expense"]
        (moved,) = [r for r in records if r["message"] == "expense_moved"]
        assert moved["previous_date"] == MONDAY
        assert moved["target_date"] == TUESDAY
        assert len({r["correlation_id"] for r in records}) == 1

    def test_commands_get_distinct_correlation_ids(self, ledger, captured_logs):
        ledger.set_cash_at_hand(MONDAY, 10)
        ledger.set_cash_at_hand(TUESDAY, 20)
        upserts = [r for r in captured_logs() if r["message"] == "cash_snapshot_upserted"]
        assert len({r["correlation_id"] for r in upserts}) == 2

    def test_caller_correlation_id_reused(self, ledger, captured_logs):
        with LogContext.bind(correlation_id="req-42"):
            ledger.set_cash_at_hand(MONDAY, 10)
        upserted = [r for r in captured_logs() if r["message"] == "cash_snapshot_upserted"]
        assert upserted[0]["correlation_id"] == "req-42"

    def test_rejected_move(self, ledger, captured_logs):
        expense = add_fuel(ledger).value
        ledger.move_expense(expense.id, SATURDAY)
        (rejected,) = [r for r in captured_logs() if r["message"] == "command_rejected"]
        assert rejected["command"] == "move_expense"
        assert rejected["expense_id"] == str(expense.id)
        assert rejected["status"] == "invalid_target_date"
        assert rejected["error_code"] == "INVALID_TARGET_DATE"
        assert rejected["details"]["target_date"] == SATURDAY

    def test_unexpected_failure_logged(self, session_factory, canonicalizer, captured_logs):
        class OfflineDirectory:
            def exists(self, spender):
                raise RuntimeError("directory offline")

            def display_name(self, spender):
                return None

        ledger = BackOfficeLedger(
            session_factory, canonicalizer=canonicalizer, directory=OfflineDirectory()
        )
        with pytest.raises(RuntimeError):
            add_fuel(ledger, spender_type="cso", spender_id="cso-7")
        (failed,) = [r for r in captured_logs() if r["message"] == "command_failed"]
        assert failed["level"] == "ERROR"
        assert failed["command"] == "create_expense"
        assert failed["error"] == {"type": "RuntimeError", "message": "directory offline"}
