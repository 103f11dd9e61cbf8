"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration -- sits above ``ledger_kernel`` and below
    ``ledger_services``.  The kernel MUST NEVER import from
    ``ledger_config``; the boundary passes resolved values into kernel
    constructors.

Precedence (lowest to highest):
    1. ``LedgerConfig`` defaults
    2. the YAML file (``sets/default.yaml`` unless ``path`` is given)
    3. ``LEDGER_DATABASE_URL`` / ``LEDGER_TIMEZONE`` environment variables
    4. explicit ``overrides``

Audit relevance:
    Every successful call logs ``ledger_config_loaded`` with the resolved
    values and the database URL password masked.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ledger_config.loader import build_config, flatten, load_yaml_file
from ledger_config.schema import LedgerConfig

_logger = logging.getLogger("ledger_kernel.config")

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "default.yaml"

ENV_OVERRIDES = {
    "LEDGER_DATABASE_URL": "database_url",
    "LEDGER_TIMEZONE": "business_timezone",
}


def get_active_config(
    path: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> LedgerConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: YAML file to load.  Defaults to ledger_config/sets/default.yaml.
        overrides: Flat setting values (``LedgerConfig`` field names) that
            win over the file and the environment.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        A validated, frozen ``LedgerConfig``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ConfigurationError: If any value is invalid.
    """
    config_file = Path(path) if path is not None else _DEFAULT_CONFIG_FILE
    values = flatten(load_yaml_file(config_file))

    env = os.environ if environ is None else environ
    for variable, setting in ENV_OVERRIDES.items():
        if env.get(variable):
            values[setting] = env[variable]

    if overrides:
        values.update(overrides)

    config = build_config(values, source=str(config_file))

    _logger.info("ledger_config_loaded", extra=config.as_log_fields())
    return config


__all__ = ["LedgerConfig", "get_active_config"]
