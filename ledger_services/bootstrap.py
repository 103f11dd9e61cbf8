"""
Wiring from a ``LedgerConfig`` to a ready ``BackOfficeLedger``.

``build_ledger`` is what the CLI and any hosting process call once at
start-up.  It (re)initializes the process-wide engine in
``ledger_kernel.db.engine``; tests build ``BackOfficeLedger`` directly
around their own session factory.
"""

from __future__ import annotations

from ledger_config import LedgerConfig, get_active_config
from ledger_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dates import DateCanonicalizer
from ledger_kernel.domain.spender import SpenderDirectory
from ledger_kernel.logging_config import configure_logging, get_logger
from ledger_services.backoffice_ledger import BackOfficeLedger

logger = get_logger("services.bootstrap")


def build_ledger(
    config: LedgerConfig | None = None,
    *,
    directory: SpenderDirectory | None = None,
    clock: Clock | None = None,
    create_schema: bool = True,
) -> BackOfficeLedger:
    """
    Build a BackOfficeLedger from configuration.

    Args:
        config: Resolved configuration; ``get_active_config()`` when None.
        directory: Spender directory; every id is accepted when None.
        clock: Time source; the system clock when None.
        create_schema: Create missing tables before returning.

    Raises:
        ConfigurationError: the configuration (or its timezone) is invalid.
    """
    config = config or get_active_config()
    configure_logging(level=config.log_level)
    clock = clock or SystemClock()

    engine = init_engine_from_url(config.database_url, echo=config.echo_sql)
    if create_schema:
        create_tables(engine)

    ledger = BackOfficeLedger(
        get_session_factory(),
        canonicalizer=DateCanonicalizer(config.business_timezone, clock=clock),
        clock=clock,
        weekend_days=config.weekend_days,
        directory=directory,
        lock_timeout=config.lock_timeout,
    )
    logger.info(
        "ledger_ready",
        extra={
            "dialect": engine.dialect.name,
            "business_timezone": config.business_timezone,
        },
    )
    return ledger
