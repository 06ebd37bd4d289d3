import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError

from textile_pos.config import get_settings
from textile_pos.core.logging import setup_logging
from textile_pos.database import init_database
from textile_pos.services.import_service import import_workbook


def parse_args():
    parser = argparse.ArgumentParser(description="Import catalog products from an Excel workbook.")
    parser.add_argument("--path", required=True, help="Path to .xlsx workbook.")
    parser.add_argument("--sheet", default=None, help="Sheet to read. Default: the first sheet.")
    parser.add_argument("--dry-run", action="store_true", help="Validate without saving.")
    return parser.parse_args()


def main():
    settings = get_settings()
    setup_logging(settings)
    args = parse_args()

    database = init_database(settings.DATABASE_URL)
    try:
        counts = import_workbook(database, args.path, sheet=args.sheet, dry_run=args.dry_run)
    except (OSError, ValueError, SQLAlchemyError, InvalidFileException) as exc:
        raise SystemExit(f"Import failed: {exc}") from exc
    finally:
        database.dispose()

    print(f"products: {counts['inserted']} inserted, {counts['updated']} updated, {counts['skipped']} skipped")
    for error in counts["errors"]:
        print(f"  {error}")

    if args.dry_run:
        print("Dry run complete, no changes committed.")
    else:
        print("Import complete.")


if __name__ == "__main__":
    main()
