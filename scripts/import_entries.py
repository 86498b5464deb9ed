#!/usr/bin/env python3
"""Import entries for a business from a CSV file.

The CSV uses the entry export columns (date, category, username, page_name,
platform, referral_code, amount, points_load, ...). Rows that fail
validation are reported and skipped.

Usage:
    # Merge rows into the existing entries
    python scripts/import_entries.py --business owner@example.com entries.csv

    # Replace the business's entries with the file's rows
    python scripts/import_entries.py --business owner@example.com entries.csv --overwrite
"""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from agency_desk.common.config import load_config
from agency_desk.common.logging import get_logger, setup_logging
from agency_desk.desk import AgencyDesk
from agency_desk.domain.errors import DeskError
from agency_desk.domain.models import TenantContext
from agency_desk.storage.database import Database
from agency_desk.storage.interfaces import BackendError

logger = get_logger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Import entries from a CSV file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("csv_file", type=str, help="CSV file to import")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/dev.yaml",
        help="Path to config file (default: configs/dev.yaml)",
    )
    parser.add_argument(
        "--business",
        type=str,
        required=True,
        help="Email of the business the entries belong to",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Delete the business's existing entries first",
    )
    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    config = load_config(args.config)
    setup_logging(config.logging)

    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        print(f"Error: File not found: {csv_path}")
        return 1

    db = Database(config.database.path)
    db.connect()
    db.migrate()

    try:
        business = db.find_business_by_email(args.business)
        if business is None:
            print(f"Error: No business registered with {args.business}")
            return 1

        desk = AgencyDesk.from_backend(db)
        ctx = TenantContext(tenant_id=business.id, actor=business.owner_name)

        try:
            result = desk.import_entries_csv(ctx, csv_path, overwrite=args.overwrite)
        except (DeskError, BackendError) as e:
            logger.error("import_failed", path=str(csv_path), error=str(e))
            print(f"Error: {e}")
            return 1

        print(f"Imported {len(result.imported)} entries into {business.business_name}")
        if result.errors:
            print(f"Skipped {len(result.errors)} rows:")
            for error in result.errors:
                print(f"  row {error.row}: {error.message}")
        return 0

    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
