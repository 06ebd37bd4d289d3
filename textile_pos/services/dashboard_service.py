from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from textile_pos.core.money import quantize_money
from textile_pos.models.sales import Sale, SaleItem
from textile_pos.services.customer_service import count_customers
from textile_pos.services.product_service import count_products, low_stock_products


def _daily_sales(db: Session, today: date, days: int):
    start = datetime.combine(today - timedelta(days=days - 1), time.min, tzinfo=timezone.utc)
    rows = db.execute(select(Sale.date, Sale.total).where(Sale.date >= start)).all()
    totals = defaultdict(float)
    for sale_date, total in rows:
        totals[sale_date.date()] += total or 0.0
    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        series.append({"date": day.isoformat(), "sales": quantize_money(totals.get(day, 0.0))})
    return series


def _sales_by_type(db: Session):
    rows = db.execute(
        select(SaleItem.type, func.sum(SaleItem.item_total))
        .group_by(SaleItem.type)
        .order_by(func.sum(SaleItem.item_total).desc())
    ).all()
    return [{"type": product_type or "Unknown", "value": quantize_money(value)} for product_type, value in rows]


def shop_summary(db: Session, today: date | None = None, days: int = 7) -> dict:
    today = today or datetime.now(timezone.utc).date()
    revenue, orders = db.execute(
        select(func.coalesce(func.sum(Sale.total), 0.0), func.count(Sale.id))
    ).one()
    low_stock = low_stock_products(db)
    return {
        "total_revenue": quantize_money(revenue),
        "total_orders": orders,
        "total_customers": count_customers(db),
        "total_products": count_products(db),
        "low_stock_count": len(low_stock),
        "low_stock": [
            {"id": product.id, "name": product.name, "stock": product.stock, "unit": product.unit}
            for product in low_stock
        ],
        "daily_sales": _daily_sales(db, today, days),
        "sales_by_type": _sales_by_type(db),
    }


__all__ = ["shop_summary"]
