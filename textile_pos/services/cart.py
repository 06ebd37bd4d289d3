"""In-memory cart engine.

A cart holds priced lines built from catalog products, an optional selected
customer and the redeem-points flag. Every figure shown to the cashier is
derived from the lines on read; line totals themselves are produced by
:func:`price_line` whenever a line is created or its quantity changes.

Money is handled as ``Decimal``. Each line's total and tax are rounded to
cents (half-up) and the aggregates are exact sums of the rounded lines.
Loyalty points are spent in whole points only.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Callable, Optional

from textile_pos.core.constants import POINTS_PER_DOLLAR, REDEMPTION_RATE
from textile_pos.core.errors import CartNotFoundError, CheckoutInProgressError, UnpersistedProductError
from textile_pos.core.money import ZERO, floor_points, quantize_money, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartItem:
    product_id: int
    name: str
    sku: str
    type: str
    material: str
    color: str
    variant: str
    unit: str
    hsn_code: str
    price: Decimal
    tax_rate: Decimal
    quantity: int
    item_total: Decimal = ZERO
    item_tax: Decimal = ZERO
    image_url: Optional[str] = None

    @classmethod
    def from_product(cls, product, quantity: int = 1) -> "CartItem":
        if getattr(product, "id", None) is None:
            raise UnpersistedProductError(getattr(product, "name", None))
        return price_line(
            cls(
                product_id=product.id,
                name=product.name,
                sku=product.sku or "",
                type=product.type or "",
                material=product.material or "",
                color=product.color or "",
                variant=product.variant or "",
                unit=product.unit or "",
                hsn_code=product.hsn_code or "",
                price=to_decimal(product.price),
                tax_rate=to_decimal(product.tax_rate),
                quantity=quantity,
                image_url=getattr(product, "image_url", None),
            )
        )


def price_line(item: CartItem, quantity: int | None = None) -> CartItem:
    """Return ``item`` with its quantity (optionally replaced) and both derived totals recomputed."""
    if quantity is None:
        quantity = item.quantity
    item_total = quantize_money(item.price * quantity)
    item_tax = quantize_money(item_total * item.tax_rate / 100)
    return replace(item, quantity=quantity, item_total=item_total, item_tax=item_tax)


@dataclass(frozen=True)
class CartCustomer:
    id: int
    name: str
    phone: str
    loyalty_points: Decimal

    @classmethod
    def from_customer(cls, customer) -> "CartCustomer":
        return cls(
            id=customer.id,
            name=customer.name,
            phone=customer.phone or "",
            loyalty_points=to_decimal(customer.loyalty_points),
        )


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    total_tax: Decimal
    gross_total: Decimal
    max_redeemable_value: Decimal
    redemption_value: Decimal
    points_used: int
    final_total: Decimal
    points_to_earn: int
    item_count: int


def compute_totals(
    items,
    customer: Optional[CartCustomer] = None,
    redeem_points: bool = False,
) -> CartTotals:
    subtotal = sum((item.item_total for item in items), ZERO)
    total_tax = sum((item.item_tax for item in items), ZERO)
    gross_total = subtotal + total_tax

    max_redeemable_value = ZERO
    if customer is not None:
        max_redeemable_value = floor_points(customer.loyalty_points) * REDEMPTION_RATE

    points_used = 0
    redemption_value = ZERO
    if redeem_points and customer is not None:
        cap = min(max_redeemable_value, gross_total)
        # Whole points only: a cap that is not a multiple of the rate rounds the points down.
        points_used = floor_points(cap / REDEMPTION_RATE)
        redemption_value = points_used * REDEMPTION_RATE

    final_total = gross_total - redemption_value
    points_to_earn = floor_points(final_total * POINTS_PER_DOLLAR)

    return CartTotals(
        subtotal=subtotal,
        total_tax=total_tax,
        gross_total=gross_total,
        max_redeemable_value=max_redeemable_value,
        redemption_value=redemption_value,
        points_used=points_used,
        final_total=final_total,
        points_to_earn=points_to_earn,
        item_count=sum(item.quantity for item in items),
    )


class Cart:
    def __init__(self, cart_id: str | None = None):
        self.id = cart_id or uuid.uuid4().hex
        self._items: list[CartItem] = []
        self._customer: Optional[CartCustomer] = None
        self._redeem_points = False
        self._lock = threading.RLock()
        self._checkout_lock = threading.Lock()

    @property
    def items(self) -> tuple[CartItem, ...]:
        with self._lock:
            return tuple(self._items)

    @property
    def customer(self) -> Optional[CartCustomer]:
        return self._customer

    @property
    def redeem_points(self) -> bool:
        return self._redeem_points

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def totals(self) -> CartTotals:
        with self._lock:
            return compute_totals(self._items, self._customer, self._redeem_points)

    @property
    def checkout_in_progress(self) -> bool:
        return self._checkout_lock.locked()

    def _ensure_editable(self) -> None:
        if self._checkout_lock.locked():
            raise CheckoutInProgressError()

    def _index_of(self, product_id) -> Optional[int]:
        for idx, item in enumerate(self._items):
            if item.product_id == product_id:
                return idx
        return None

    def get_item(self, product_id) -> Optional[CartItem]:
        with self._lock:
            idx = self._index_of(product_id)
            return self._items[idx] if idx is not None else None

    def add_item(self, product) -> CartItem:
        with self._lock:
            self._ensure_editable()
            if getattr(product, "id", None) is None:
                raise UnpersistedProductError(getattr(product, "name", None))
            idx = self._index_of(product.id)
            if idx is not None:
                line = self._items[idx]
                self._items[idx] = price_line(line, line.quantity + 1)
            else:
                self._items.append(CartItem.from_product(product))
                idx = len(self._items) - 1
            return self._items[idx]

    def change_quantity(self, product_id, delta: int) -> Optional[CartItem]:
        """Adjust a line's quantity by ``delta``.

        A change that would take the quantity to zero or below is ignored and
        the line is left as it was; use :meth:`remove_item` to drop a line.
        Returns the resulting line, or ``None`` when no line matches.
        """
        with self._lock:
            self._ensure_editable()
            idx = self._index_of(product_id)
            if idx is None:
                return None
            line = self._items[idx]
            new_quantity = line.quantity + int(delta)
            if new_quantity <= 0:
                return line
            self._items[idx] = price_line(line, new_quantity)
            return self._items[idx]

    def remove_item(self, product_id) -> bool:
        with self._lock:
            self._ensure_editable()
            idx = self._index_of(product_id)
            if idx is None:
                return False
            del self._items[idx]
            return True

    def select_customer(self, customer) -> None:
        with self._lock:
            self._ensure_editable()
            if customer is None:
                self._customer = None
                self._redeem_points = False
                return
            self._customer = CartCustomer.from_customer(customer)

    def refresh_customer(self, customer) -> Optional[CartCustomer]:
        """Pick up the stored balance right before committing a sale.

        Keeps the redeem flag and returns the customer snapshot it replaced.
        """
        with self._lock:
            previous = self._customer
            self._customer = CartCustomer.from_customer(customer)
            return previous

    def restore_customer(self, snapshot: Optional[CartCustomer]) -> None:
        with self._lock:
            self._customer = snapshot

    def set_redeem_points(self, redeem: bool) -> bool:
        with self._lock:
            self._ensure_editable()
            if not redeem:
                self._redeem_points = False
            elif self._customer is not None and self._items:
                self._redeem_points = True
            return self._redeem_points

    def clear(self) -> None:
        with self._lock:
            self._items = []
            self._customer = None
            self._redeem_points = False

    def begin_checkout(self) -> None:
        # Taken under the edit lock so an edit is either fully in the snapshot or rejected.
        with self._lock:
            if not self._checkout_lock.acquire(blocking=False):
                raise CheckoutInProgressError()

    def end_checkout(self) -> None:
        self._checkout_lock.release()


@dataclass
class CartRegistry:
    """Live carts of this process, keyed by cart id.

    A cart not read or touched for ``idle_seconds`` is dropped the next time a
    cart is opened, unless it is in the middle of a checkout.
    """

    idle_seconds: Optional[float] = None
    clock: Callable[[], float] = time.monotonic
    _carts: dict[str, Cart] = field(default_factory=dict)
    _last_seen: dict[str, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def create(self) -> Cart:
        cart = Cart()
        with self._lock:
            self._drop_idle()
            self._carts[cart.id] = cart
            self._last_seen[cart.id] = self.clock()
        logger.debug("Opened cart %s", cart.id)
        return cart

    def get(self, cart_id: str) -> Cart:
        with self._lock:
            cart = self._carts.get(cart_id)
            if cart is not None:
                self._last_seen[cart_id] = self.clock()
        if cart is None:
            raise CartNotFoundError(cart_id)
        return cart

    def discard(self, cart_id: str, missing_ok: bool = False) -> None:
        with self._lock:
            cart = self._carts.pop(cart_id, None)
            self._last_seen.pop(cart_id, None)
        if cart is None and not missing_ok:
            raise CartNotFoundError(cart_id)

    def _drop_idle(self) -> None:
        if not self.idle_seconds:
            return
        cutoff = self.clock() - self.idle_seconds
        stale = [
            cart_id
            for cart_id, seen in self._last_seen.items()
            if seen < cutoff and not self._carts[cart_id].checkout_in_progress
        ]
        for cart_id in stale:
            del self._carts[cart_id]
            del self._last_seen[cart_id]
        if stale:
            logger.info("Dropped %s idle carts", len(stale))

    def __len__(self) -> int:
        with self._lock:
            return len(self._carts)


__all__ = [
    "Cart",
    "CartCustomer",
    "CartItem",
    "CartRegistry",
    "CartTotals",
    "compute_totals",
    "price_line",
]
