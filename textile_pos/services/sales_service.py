from typing import cast

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from textile_pos.core.errors import SaleNotFoundError
from textile_pos.models.sales import Sale


def list_sales(db: Session, customer_id: int | None = None, limit: int = 100) -> list[Sale]:
    stmt = (
        select(Sale)
        .options(selectinload(Sale.items))
        .order_by(Sale.date.desc(), Sale.id.desc())
        .limit(limit)
    )
    if customer_id is not None:
        stmt = stmt.where(Sale.customer_id == customer_id)
    return cast(list[Sale], list(db.execute(stmt).scalars().all()))


def get_sale_by_invoice(db: Session, invoice_no: str) -> Sale:
    sale = (
        db.execute(
            select(Sale)
            .options(selectinload(Sale.items))
            .where(Sale.invoice_no == invoice_no)
        )
        .scalars()
        .first()
    )
    if sale is None:
        raise SaleNotFoundError(invoice_no)
    return sale


def count_sales(db: Session) -> int:
    return db.execute(select(func.count(Sale.id))).scalar_one()


__all__ = ["count_sales", "get_sale_by_invoice", "list_sales"]
