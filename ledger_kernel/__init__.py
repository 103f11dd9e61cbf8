"""
Ledger Kernel - back-office operations ledger

A date-bucketed ledger and calendar-resolution engine with:
- Canonical date keys in a single business timezone
- Business-day gating (weekends, one-time and recurring holidays)
- Last-write-wins daily cash snapshots
- Dated expenses with a validated move transaction
- Read-side aggregation into day, month and year views
"""

__version__ = "0.1.0"
