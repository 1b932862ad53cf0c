"""Script to load a credit or payment spreadsheet into the database.

Usage:
    python -m scripts.import_file credits path/to/credits.xlsx
    python -m scripts.import_file payments path/to/payments.csv
    python -m scripts.import_file payments path/to/payments.csv --credit-id 12
"""

import argparse
import asyncio
from pathlib import Path

from components.core.config import get_settings
from components.core.init_db import db_manager
from components.core.logging import setup_logging
from components.imports.pipeline import CreditImporter, PaymentImporter
from components.imports.reader import read_rows


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import credits or payments from a spreadsheet")
    parser.add_argument("kind", choices=["credits", "payments"])
    parser.add_argument("path", type=Path)
    parser.add_argument("--credit-id", type=int, default=None,
                        help="Credit the payments belong to, for files without a contract column")
    return parser.parse_args(argv)


async def import_file(kind: str, path: Path, credit_id=None):
    """Import one file and print the rejected rows."""
    with path.open("rb") as f:
        rows = read_rows(f, path.name)

    await db_manager.create_all()
    async with db_manager.get_db() as db:
        if kind == "credits":
            result = await CreditImporter(db).import_rows(rows)
        elif credit_id is not None:
            result = await PaymentImporter(db).import_rows_for_credit(credit_id, rows)
        else:
            result = await PaymentImporter(db).import_rows(rows)

    print(f"Import completed: {result.success} succeeded, {result.failed} failed")
    for error in result.errors:
        print(f"  row {error.row}: {error.error}")
    return result


if __name__ == "__main__":
    args = parse_args()
    setup_logging(get_settings().LOG_LEVEL)
    asyncio.run(import_file(args.kind, args.path, args.credit_id))
