from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rdl.application.container import build_container
from rdl.config import get_api_settings, get_app_paths
from rdl.domain.errors import AppError
from rdl.logging_config import setup_logging

log = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="rdl-export", description="Export a receipt debt ledger to Excel.")
    parser.add_argument("debt_id")
    parser.add_argument("-o", "--output", help="target .xlsx file")
    args = parser.parse_args(argv)

    paths = get_app_paths()
    setup_logging(paths.logs_dir, level=logging.INFO)

    try:
        container = build_container(get_api_settings())
        ledger = container.open_ledger(args.debt_id)
        target = Path(args.output) if args.output else paths.exports_dir / f"receipt_debt_{args.debt_id}.xlsx"
        written = container.export.export_ledger_excel(ledger, target)
    except AppError as e:
        log.error("export_failed debt_id=%s error=%s", args.debt_id, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(written)
    return 0


if __name__ == "__main__":
    sys.exit(main())
