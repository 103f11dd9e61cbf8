"""Command/query boundary of the back-office ledger."""

from ledger_services.backoffice_ledger import BackOfficeLedger
from ledger_services.bootstrap import build_ledger
from ledger_services.directory import OpenSpenderDirectory, StaticSpenderDirectory
from ledger_services.result import CommandResult, ResultStatus

__all__ = [
    "BackOfficeLedger",
    "CommandResult",
    "OpenSpenderDirectory",
    "ResultStatus",
    "StaticSpenderDirectory",
    "build_ledger",
]
