#!/usr/bin/env python3
"""
Back-office ledger command line (source-checkout entry point).

Usage:
    python3 scripts/ledger_cli.py [--config PATH] [--db-url URL] <command> ...

Same commands as the installed ``backoffice-ledger`` script; run with
``--help`` for the list.
"""

import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from ledger_services.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
