import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from textile_pos.services.customer_service import add_customer
from textile_pos.services.product_service import bulk_add_products, count_products
from textile_pos.services.shop_settings_service import get_shop_settings, save_shop_settings

logger = logging.getLogger(__name__)

SEED_PRODUCTS = [
    {
        "name": "Royal Blue Silk",
        "type": "Fabric",
        "material": "Silk",
        "color": "Royal Blue",
        "variant": "Raw Silk",
        "unit": "Meters",
        "hsn_code": "5007",
        "tax_rate": 5,
        "price": 450.00,
        "stock": 120,
        "min_stock_level": 50,
        "sku": "SLK-BLU-001",
        "image_url": "https://picsum.photos/200/200?random=1",
    },
    {
        "name": "Cotton Floral Print",
        "type": "Fabric",
        "material": "Cotton",
        "color": "Multicolor",
        "variant": "60s Count",
        "unit": "Meters",
        "hsn_code": "5208",
        "tax_rate": 5,
        "price": 120.00,
        "stock": 500,
        "min_stock_level": 100,
        "sku": "CTN-FLR-002",
        "image_url": "https://picsum.photos/200/200?random=2",
    },
    {
        "name": "Gold Buttons",
        "type": "Accessory",
        "material": "Metal",
        "color": "Gold",
        "variant": "18mm",
        "unit": "Box",
        "hsn_code": "9606",
        "tax_rate": 12,
        "price": 250.00,
        "stock": 20,
        "min_stock_level": 5,
        "sku": "BTN-GLD-10",
        "image_url": "https://picsum.photos/200/200?random=4",
    },
]

WALK_IN_CUSTOMER = {
    "name": "Cash Customer",
    "phone": "0000000000",
    "email": "walkin@store.com",
    "loyalty_points": 0,
    "total_spend": 0,
    "tier": "Bronze",
}

DEFAULT_SHOP_SETTINGS = {
    "shop_name": "BusyTextile & Fabrics",
    "address_line1": "12, Market Road",
    "address_line2": "Textile Market Area",
    "city": "Mumbai",
    "pincode": "400002",
    "phone": "+91 98765 43210",
    "gstin": "27AAAAA0000A1Z5",
    "terms_and_conditions": "No returns on cut fabrics. Exchange within 7 days.",
}


def seed_database(db: Session) -> bool:
    """Populate an empty catalog with demo data. Returns False if products already exist."""
    if count_products(db) > 0:
        return False

    bulk_add_products(db, [dict(values) for values in SEED_PRODUCTS])
    add_customer(db, dict(WALK_IN_CUSTOMER, join_date=datetime.now(timezone.utc)))
    if get_shop_settings(db) is None:
        save_shop_settings(db, dict(DEFAULT_SHOP_SETTINGS))
    logger.info("Seeded %s products, walk-in customer and shop settings", len(SEED_PRODUCTS))
    return True


__all__ = ["seed_database"]
