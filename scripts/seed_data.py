import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from sqlalchemy import delete

from textile_pos.config import get_settings
from textile_pos.core.logging import setup_logging
from textile_pos.database import init_database
from textile_pos.models.customer import Customer
from textile_pos.models.product import Product
from textile_pos.models.sales import InvoiceSequence, Sale, SaleItem
from textile_pos.models.shop_settings import ShopSettings
from textile_pos.services.seed import seed_database


def parse_args():
    parser = argparse.ArgumentParser(description="Seed the demo catalog, walk-in customer and shop details.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear products, customers, sales and shop settings before seeding.",
    )
    return parser.parse_args()


def main():
    settings = get_settings()
    setup_logging(settings)
    args = parse_args()

    database = init_database(settings.DATABASE_URL)
    try:
        with database.session_scope() as db:
            if args.reset:
                db.execute(delete(SaleItem))
                db.execute(delete(Sale))
                db.execute(delete(InvoiceSequence))
                db.execute(delete(Customer))
                db.execute(delete(Product))
                db.execute(delete(ShopSettings))
                db.flush()
            seeded = seed_database(db)
    finally:
        database.dispose()

    if seeded:
        print("Seed data created.")
    else:
        print("Seed skipped: products already exist.")


if __name__ == "__main__":
    main()
