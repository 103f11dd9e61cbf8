"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Reads a YAML configuration file and parses it into a validated
``LedgerConfig``.  The single public entry point for runtime config is
``ledger_config.get_active_config()``; this module is its tooling.

Invariants enforced
-------------------
* Every invalid value raises ``ConfigurationError`` naming the setting;
  there are no silent fallbacks for values that are present but wrong.
* Missing keys take the schema defaults.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong types or out-of-range values  -> ``ConfigurationError``.

YAML layout
-----------
::

    ledger:
      business_timezone: Africa/Lagos
      weekend_days: [6, 7]
      lock_timeout: null
    database:
      url: sqlite:///backoffice_ledger.db
      echo_sql: false
    logging:
      level: INFO
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from ledger_config.schema import (
    DEFAULT_DATABASE_URL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TIMEZONE,
    DEFAULT_WEEKEND_DAYS,
    LedgerConfig,
)
from ledger_kernel.exceptions import ConfigurationError

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    return data


def parse_timezone(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError("business_timezone", "must be an IANA zone name")
    try:
        ZoneInfo(value.strip())
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(
            "business_timezone", f"unknown timezone {value!r}"
        ) from None
    return value.strip()


def parse_weekend_days(value: Any) -> tuple[int, ...]:
    """ISO weekday numbers (Monday=1 ... Sunday=7), de-duplicated and sorted."""
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError("weekend_days", "must be a list of ISO weekday numbers")
    days: set[int] = set()
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or not 1 <= item <= 7:
            raise ConfigurationError(
                "weekend_days", f"{item!r} is not an ISO weekday number (1-7)"
            )
        days.add(item)
    if len(days) == 7:
        raise ConfigurationError("weekend_days", "at least one weekday must be a business day")
    return tuple(sorted(days))


def parse_database_url(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError("database_url", "must be a non-empty URL")
    try:
        make_url(value.strip())
    except ArgumentError as exc:
        raise ConfigurationError("database_url", str(exc)) from exc
    return value.strip()


def parse_log_level(value: Any) -> str:
    level = str(value).strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigurationError("log_level", f"{value!r} is not a logging level")
    return level


def parse_lock_timeout(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigurationError("lock_timeout", "must be a positive number of seconds")
    return float(value)


def parse_bool(setting: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(setting, f"{value!r} is not a boolean")
    return value


def flatten(data: dict[str, Any]) -> dict[str, Any]:
    """Map the sectioned YAML layout onto ``LedgerConfig`` field names."""
    ledger = data.get("ledger") or {}
    database = data.get("database") or {}
    log = data.get("logging") or {}
    flat: dict[str, Any] = {}
    if "business_timezone" in ledger:
        flat["business_timezone"] = ledger["business_timezone"]
    if "weekend_days" in ledger:
        flat["weekend_days"] = ledger["weekend_days"]
    if "lock_timeout" in ledger:
        flat["lock_timeout"] = ledger["lock_timeout"]
    if "url" in database:
        flat["database_url"] = database["url"]
    if "echo_sql" in database:
        flat["echo_sql"] = database["echo_sql"]
    if "level" in log:
        flat["log_level"] = log["level"]
    return flat


def build_config(values: dict[str, Any], source: str | None = None) -> LedgerConfig:
    """
    Validate flat setting values into a ``LedgerConfig``.

    Raises:
        ConfigurationError: on the first invalid value, or an unknown key.
    """
    known = {
        "business_timezone",
        "weekend_days",
        "database_url",
        "echo_sql",
        "log_level",
        "lock_timeout",
    }
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(unknown[0], "unknown setting")

    return LedgerConfig(
        business_timezone=parse_timezone(values.get("business_timezone", DEFAULT_TIMEZONE)),
        weekend_days=parse_weekend_days(values.get("weekend_days", DEFAULT_WEEKEND_DAYS)),
        database_url=parse_database_url(values.get("database_url", DEFAULT_DATABASE_URL)),
        echo_sql=parse_bool("echo_sql", values.get("echo_sql", False)),
        log_level=parse_log_level(values.get("log_level", DEFAULT_LOG_LEVEL)),
        lock_timeout=parse_lock_timeout(values.get("lock_timeout")),
        source=source,
    )

