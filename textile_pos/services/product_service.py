from typing import cast

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from textile_pos.core.errors import ProductNotFoundError
from textile_pos.models.product import Product


def list_products(db: Session, query: str | None = None, product_type: str | None = None) -> list[Product]:
    stmt = select(Product).order_by(Product.name, Product.id)
    if product_type and product_type != "All":
        stmt = stmt.where(Product.type == product_type)
    if query:
        pattern = "%{}%".format(query.strip().lower())
        stmt = stmt.where(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.sku).like(pattern),
                func.lower(Product.material).like(pattern),
            )
        )
    return cast(list[Product], list(db.execute(stmt).scalars().all()))


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def count_products(db: Session) -> int:
    return db.execute(select(func.count(Product.id))).scalar_one()


def add_product(db: Session, values: dict) -> Product:
    product = Product(**values)
    db.add(product)
    db.flush()
    return product


def bulk_add_products(db: Session, rows: list[dict]) -> list[Product]:
    products = [Product(**values) for values in rows]
    db.add_all(products)
    db.flush()
    return products


def update_product(db: Session, product_id: int, changes: dict) -> Product:
    product = get_product(db, product_id)
    for key, value in changes.items():
        setattr(product, key, value)
    db.flush()
    return product


def low_stock_products(db: Session) -> list[Product]:
    stmt = (
        select(Product)
        .where(Product.stock <= Product.min_stock_level)
        .order_by(Product.stock, Product.name)
    )
    return cast(list[Product], list(db.execute(stmt).scalars().all()))


__all__ = [
    "add_product",
    "bulk_add_products",
    "count_products",
    "get_product",
    "list_products",
    "low_stock_products",
    "update_product",
]
