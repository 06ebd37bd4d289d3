from typing import cast

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from textile_pos.core.errors import CustomerNotFoundError
from textile_pos.models.customer import Customer


def list_customers(db: Session, query: str | None = None) -> list[Customer]:
    stmt = select(Customer).order_by(Customer.name, Customer.id)
    if query:
        query = query.strip()
        pattern = "%{}%".format(query.lower())
        stmt = stmt.where(
            or_(
                func.lower(Customer.name).like(pattern),
                Customer.phone.like("%{}%".format(query)),
                func.lower(Customer.email).like(pattern),
            )
        )
    return cast(list[Customer], list(db.execute(stmt).scalars().all()))


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if customer is None:
        raise CustomerNotFoundError(customer_id)
    return customer


def count_customers(db: Session) -> int:
    return db.execute(select(func.count(Customer.id))).scalar_one()


def add_customer(db: Session, values: dict) -> Customer:
    customer = Customer(**values)
    db.add(customer)
    db.flush()
    return customer


def update_customer(db: Session, customer_id: int, changes: dict) -> Customer:
    customer = get_customer(db, customer_id)
    for key, value in changes.items():
        setattr(customer, key, value)
    db.flush()
    return customer


__all__ = [
    "add_customer",
    "count_customers",
    "get_customer",
    "list_customers",
    "update_customer",
]
