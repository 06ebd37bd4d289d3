"""Checkout: turn a cart into a recorded sale.

The sale row, its line snapshot, every stock decrement and the customer's
loyalty update are written in a single transaction. If any step fails the
transaction is rolled back. The cart keeps its lines, redeem flag and the
customer balance it showed before checkout started.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from textile_pos.config import Settings, get_settings
from textile_pos.core.constants import PAYMENT_METHODS
from textile_pos.core.errors import (
    CustomerNotFoundError,
    InsufficientStockError,
    PosError,
    ProductNotFoundError,
)
from textile_pos.core.money import quantize_money, to_decimal
from textile_pos.models.customer import Customer
from textile_pos.models.product import Product
from textile_pos.models.sales import Sale, SaleItem
from textile_pos.services.cart import Cart
from textile_pos.services.invoice_service import next_invoice_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    name: str
    sku: str
    variant: str
    unit: str
    hsn_code: str
    price: Decimal
    tax_rate: Decimal
    quantity: int
    item_total: Decimal
    item_tax: Decimal


@dataclass(frozen=True)
class CompletedOrder:
    sale_id: int
    invoice_no: str
    date: datetime
    items: tuple[OrderLine, ...]
    subtotal: Decimal
    total_tax: Decimal
    discount: Decimal
    total: Decimal
    payment_method: str
    points_earned: int
    points_used: int
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_points_balance: Optional[Decimal] = None

    @classmethod
    def from_sale(cls, sale: Sale) -> "CompletedOrder":
        return cls(
            sale_id=sale.id,
            invoice_no=sale.invoice_no,
            date=sale.date,
            items=tuple(
                OrderLine(
                    product_id=item.product_id,
                    name=item.name,
                    sku=item.sku,
                    variant=item.variant,
                    unit=item.unit,
                    hsn_code=item.hsn_code,
                    price=to_decimal(item.price),
                    tax_rate=to_decimal(item.tax_rate),
                    quantity=item.quantity,
                    item_total=quantize_money(item.item_total),
                    item_tax=quantize_money(item.item_tax),
                )
                for item in sale.items
            ),
            subtotal=quantize_money(sale.subtotal),
            total_tax=quantize_money(sale.total_tax),
            discount=quantize_money(sale.discount),
            total=quantize_money(sale.total),
            payment_method=sale.payment_method,
            points_earned=sale.points_earned or 0,
            points_used=sale.points_used or 0,
            customer_id=sale.customer_id,
            customer_name=sale.customer_name,
            customer_phone=sale.customer_phone,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutOrchestrator:
    def __init__(
        self,
        db: Session,
        *,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        settings = settings or get_settings()
        self.db = db
        self.allow_oversell = settings.ALLOW_OVERSELL
        self.invoice_prefix = settings.INVOICE_PREFIX
        self._clock = clock

    def checkout(self, cart: Cart, payment_method: str) -> Optional[CompletedOrder]:
        """Record the cart as a sale paid with ``payment_method``.

        Returns ``None`` without touching storage when the cart is empty.
        Raises ``CheckoutInProgressError`` if another checkout holds the cart.
        """
        if payment_method not in PAYMENT_METHODS:
            raise ValueError(
                "payment_method must be one of: {}".format(", ".join(PAYMENT_METHODS))
            )
        if cart.is_empty:
            logger.debug("Checkout skipped for empty cart %s", cart.id)
            return None

        cart.begin_checkout()
        customer_snapshot = cart.customer
        try:
            try:
                order = self._commit_sale(cart, payment_method)
            except (PosError, SQLAlchemyError):
                self.db.rollback()
                cart.restore_customer(customer_snapshot)
                logger.warning(
                    "Checkout rolled back for cart %s", cart.id, exc_info=True, extra={"cart_id": cart.id}
                )
                raise
            cart.clear()
            logger.info(
                "Sale %s recorded: %s items, total %s (%s)",
                order.invoice_no,
                len(order.items),
                order.total,
                order.payment_method,
                extra={"cart_id": cart.id, "invoice_no": order.invoice_no},
            )
            return order
        finally:
            cart.end_checkout()

    def _commit_sale(self, cart: Cart, payment_method: str) -> CompletedOrder:
        db = self.db

        customer = None
        if cart.customer is not None:
            customer = db.get(Customer, cart.customer.id, with_for_update=True)
            if customer is None:
                raise CustomerNotFoundError(cart.customer.id)
            cart.refresh_customer(customer)

        items = cart.items
        totals = cart.totals
        now = self._clock()

        invoice_no = next_invoice_number(db, prefix=self.invoice_prefix, now=now)
        sale = Sale(
            invoice_no=invoice_no,
            date=now,
            customer_id=customer.id if customer else None,
            customer_name=customer.name if customer else None,
            customer_phone=customer.phone if customer else None,
            subtotal=float(totals.subtotal),
            total_tax=float(totals.total_tax),
            discount=float(totals.redemption_value),
            total=float(totals.final_total),
            payment_method=payment_method,
            points_earned=totals.points_to_earn,
            points_used=totals.points_used,
        )
        for line_no, item in enumerate(items, start=1):
            sale.items.append(
                SaleItem(
                    line_no=line_no,
                    product_id=item.product_id,
                    name=item.name,
                    sku=item.sku,
                    type=item.type,
                    variant=item.variant,
                    unit=item.unit,
                    hsn_code=item.hsn_code,
                    price=float(item.price),
                    tax_rate=float(item.tax_rate),
                    quantity=item.quantity,
                    item_total=float(item.item_total),
                    item_tax=float(item.item_tax),
                )
            )
        db.add(sale)

        for item in items:
            product = db.get(Product, item.product_id, with_for_update=True)
            if product is None:
                raise ProductNotFoundError(item.product_id)
            available = to_decimal(product.stock)
            remaining = available - item.quantity
            if remaining < 0 and not self.allow_oversell:
                raise InsufficientStockError(product.id, product.name, available, item.quantity)
            product.stock = float(remaining)

        balance = None
        if customer is not None:
            balance = (
                to_decimal(customer.loyalty_points)
                - totals.points_used
                + totals.points_to_earn
            )
            customer.loyalty_points = float(balance)
            customer.total_spend = float(to_decimal(customer.total_spend) + totals.final_total)

        db.commit()

        order = CompletedOrder.from_sale(sale)
        if balance is not None:
            order = replace(order, customer_points_balance=balance)
        return order


__all__ = ["CheckoutOrchestrator", "CompletedOrder", "OrderLine"]
