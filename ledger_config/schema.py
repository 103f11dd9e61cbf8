"""
Ledger configuration schema (``ledger_config.schema``).

Responsibility
--------------
Frozen dataclass describing every runtime setting of the ledger.  Values
held here have already been validated by ``ledger_config.loader``.

Architecture position
---------------------
**Config layer** -- pure data, no I/O.  The kernel never imports this
module; the command boundary reads a ``LedgerConfig`` and passes plain
values (timezone name, weekend days) into kernel constructors.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.engine import make_url

DEFAULT_TIMEZONE = "Africa/Lagos"
DEFAULT_WEEKEND_DAYS: tuple[int, ...] = (6, 7)
DEFAULT_DATABASE_URL = "sqlite:///backoffice_ledger.db"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class LedgerConfig:
    """Resolved ledger settings."""

    business_timezone: str = DEFAULT_TIMEZONE
    weekend_days: tuple[int, ...] = DEFAULT_WEEKEND_DAYS
    database_url: str = DEFAULT_DATABASE_URL
    echo_sql: bool = False
    log_level: str = DEFAULT_LOG_LEVEL
    # Seconds to wait for a per-key write lock; None waits indefinitely
    lock_timeout: float | None = None
    source: str | None = None

    @property
    def masked_database_url(self) -> str:
        return make_url(self.database_url).render_as_string(hide_password=True)

    def as_log_fields(self) -> dict[str, object]:
        return {
            "business_timezone": self.business_timezone,
            "weekend_days": list(self.weekend_days),
            "database": self.masked_database_url,
            "echo_sql": self.echo_sql,
            "log_level": self.log_level,
            "lock_timeout": self.lock_timeout,
            "config_source": self.source,
        }
