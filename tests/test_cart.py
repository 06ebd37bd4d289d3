from decimal import Decimal
from types import SimpleNamespace
import threading
import unittest

from textile_pos.core.errors import CartNotFoundError, CheckoutInProgressError, UnpersistedProductError
from textile_pos.services.cart import Cart, CartItem, CartRegistry, compute_totals, price_line


def make_product(product_id=1, price=100.0, tax_rate=5.0, **overrides):
    values = {
        "id": product_id,
        "name": "Royal Blue Silk",
        "sku": "SLK-001",
        "type": "Fabric",
        "material": "Silk",
        "color": "Royal Blue",
        "variant": "Raw Silk",
        "unit": "Meters",
        "hsn_code": "5007",
        "price": price,
        "tax_rate": tax_rate,
        "image_url": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def make_customer(points=0.0, customer_id=7):
    return SimpleNamespace(id=customer_id, name="Asha", phone="9876543210", loyalty_points=points)


class CartTotalsTest(unittest.TestCase):
    def test_line_totals_and_aggregates(self):
        cart = Cart()
        cart.add_item(make_product())
        cart.add_item(make_product())

        line = cart.get_item(1)
        self.assertEqual(line.quantity, 2)
        self.assertEqual(line.item_total, Decimal("200.00"))
        self.assertEqual(line.item_tax, Decimal("10.00"))

        totals = cart.totals
        self.assertEqual(totals.subtotal, Decimal("200.00"))
        self.assertEqual(totals.total_tax, Decimal("10.00"))
        self.assertEqual(totals.gross_total, Decimal("210.00"))
        self.assertEqual(totals.final_total, Decimal("210.00"))
        self.assertEqual(totals.points_to_earn, 21)
        self.assertEqual(totals.item_count, 2)

    def test_redemption_is_capped_by_points_balance(self):
        cart = Cart()
        cart.add_item(make_product())
        cart.add_item(make_product())
        cart.select_customer(make_customer(points=1000))

        self.assertEqual(cart.totals.max_redeemable_value, Decimal("100.00"))
        self.assertTrue(cart.set_redeem_points(True))

        totals = cart.totals
        self.assertEqual(totals.redemption_value, Decimal("100.00"))
        self.assertEqual(totals.points_used, 1000)
        self.assertEqual(totals.final_total, Decimal("110.00"))
        self.assertEqual(totals.points_to_earn, 11)

    def test_small_balance_redeems_everything(self):
        cart = Cart()
        cart.add_item(make_product())
        cart.add_item(make_product())
        cart.select_customer(make_customer(points=50))
        cart.set_redeem_points(True)

        totals = cart.totals
        self.assertEqual(totals.redemption_value, Decimal("5.00"))
        self.assertEqual(totals.points_used, 50)
        self.assertEqual(totals.final_total, Decimal("205.00"))
        self.assertEqual(totals.points_to_earn, 20)

    def test_redemption_never_exceeds_gross_total(self):
        cart = Cart()
        cart.add_item(make_product(price=10.0, tax_rate=0))
        cart.select_customer(make_customer(points=5000))
        cart.set_redeem_points(True)

        totals = cart.totals
        self.assertEqual(totals.redemption_value, Decimal("10.00"))
        self.assertEqual(totals.points_used, 100)
        self.assertEqual(totals.final_total, Decimal("0.00"))
        self.assertEqual(totals.points_to_earn, 0)

    def test_fractional_points_are_not_spent(self):
        totals = compute_totals(
            [price_line(CartItem.from_product(make_product(price=100.0, tax_rate=5.0)))],
            SimpleNamespace(loyalty_points=Decimal("12.7")),
            redeem_points=True,
        )
        self.assertEqual(totals.max_redeemable_value, Decimal("1.20"))
        self.assertEqual(totals.points_used, 12)

    def test_line_rounding_is_half_up_to_cents(self):
        line = CartItem.from_product(make_product(price=10.05, tax_rate=5.0))
        self.assertEqual(line.item_total, Decimal("10.05"))
        self.assertEqual(line.item_tax, Decimal("0.50"))

    def test_empty_cart_totals_are_zero(self):
        totals = Cart().totals
        self.assertEqual(totals.gross_total, Decimal("0"))
        self.assertEqual(totals.points_to_earn, 0)
        self.assertEqual(totals.item_count, 0)


class CartEditingTest(unittest.TestCase):
    def test_decrement_below_one_is_ignored(self):
        cart = Cart()
        cart.add_item(make_product())

        line = cart.change_quantity(1, -1)
        self.assertEqual(line.quantity, 1)
        self.assertEqual(cart.get_item(1).item_total, Decimal("100.00"))

    def test_change_quantity_reprices_line(self):
        cart = Cart()
        cart.add_item(make_product())
        line = cart.change_quantity(1, 2)
        self.assertEqual(line.quantity, 3)
        self.assertEqual(line.item_total, Decimal("300.00"))
        self.assertEqual(line.item_tax, Decimal("15.00"))

    def test_change_quantity_of_missing_line(self):
        self.assertIsNone(Cart().change_quantity(99, 1))

    def test_remove_item(self):
        cart = Cart()
        cart.add_item(make_product(product_id=1))
        cart.add_item(make_product(product_id=2, sku="SLK-002"))
        self.assertTrue(cart.remove_item(1))
        self.assertFalse(cart.remove_item(1))
        self.assertEqual([item.product_id for item in cart.items], [2])

    def test_lines_keep_insertion_order(self):
        cart = Cart()
        cart.add_item(make_product(product_id=3, sku="C"))
        cart.add_item(make_product(product_id=1, sku="A"))
        cart.add_item(make_product(product_id=3, sku="C"))
        self.assertEqual([item.product_id for item in cart.items], [3, 1])

    def test_unpersisted_product_is_rejected(self):
        with self.assertRaises(UnpersistedProductError):
            Cart().add_item(make_product(product_id=None))

    def test_clearing_customer_clears_redeem_flag(self):
        cart = Cart()
        cart.add_item(make_product())
        cart.select_customer(make_customer(points=100))
        cart.set_redeem_points(True)

        cart.select_customer(None)
        self.assertIsNone(cart.customer)
        self.assertFalse(cart.redeem_points)
        self.assertEqual(cart.totals.redemption_value, Decimal("0"))

    def test_redeem_requires_customer_and_items(self):
        cart = Cart()
        cart.select_customer(make_customer(points=100))
        self.assertFalse(cart.set_redeem_points(True))

        cart.select_customer(None)
        cart.add_item(make_product())
        self.assertFalse(cart.set_redeem_points(True))

    def test_edits_rejected_during_checkout(self):
        cart = Cart()
        cart.add_item(make_product())
        cart.begin_checkout()
        try:
            self.assertTrue(cart.checkout_in_progress)
            with self.assertRaises(CheckoutInProgressError):
                cart.add_item(make_product())
            with self.assertRaises(CheckoutInProgressError):
                cart.begin_checkout()
        finally:
            cart.end_checkout()
        self.assertFalse(cart.checkout_in_progress)
        cart.add_item(make_product())
        self.assertEqual(cart.get_item(1).quantity, 2)

    def test_clear(self):
        cart = Cart()
        cart.add_item(make_product())
        cart.select_customer(make_customer(points=10))
        cart.clear()
        self.assertTrue(cart.is_empty)
        self.assertIsNone(cart.customer)


class CartRegistryTest(unittest.TestCase):
    def test_create_get_discard(self):
        registry = CartRegistry()
        first = registry.create()
        second = registry.create()
        self.assertNotEqual(first.id, second.id)
        self.assertIs(registry.get(first.id), first)
        self.assertEqual(len(registry), 2)

        registry.discard(first.id)
        with self.assertRaises(CartNotFoundError):
            registry.get(first.id)
        with self.assertRaises(CartNotFoundError):
            registry.discard(first.id)

    def test_idle_carts_are_dropped_when_a_cart_opens(self):
        now = [0.0]
        registry = CartRegistry(idle_seconds=60, clock=lambda: now[0])
        idle = registry.create()
        busy = registry.create()
        busy.add_item(make_product())
        busy.begin_checkout()

        now[0] = 30.0
        active = registry.create()
        self.assertEqual(len(registry), 3)

        now[0] = 75.0
        registry.get(active.id)
        registry.create()
        try:
            self.assertEqual(len(registry), 3)
            with self.assertRaises(CartNotFoundError):
                registry.get(idle.id)
            self.assertIs(registry.get(busy.id), busy)
        finally:
            busy.end_checkout()

    def test_discard_missing_ok(self):
        registry = CartRegistry()
        registry.discard("nope", missing_ok=True)
        self.assertEqual(len(registry), 0)


class CartCheckoutLockTest(unittest.TestCase):
    def test_checkout_waits_for_edit_in_flight(self):
        cart = Cart()
        cart.add_item(make_product())
        acquired = threading.Event()

        def start_checkout():
            cart.begin_checkout()
            acquired.set()

        with cart._lock:
            worker = threading.Thread(target=start_checkout)
            worker.start()
            self.assertFalse(acquired.wait(0.2))
            cart.add_item(make_product())
        worker.join(5)

        try:
            self.assertTrue(acquired.is_set())
            self.assertEqual(cart.get_item(1).quantity, 2)
            with self.assertRaises(CheckoutInProgressError):
                cart.change_quantity(1, 1)
        finally:
            cart.end_checkout()

    def test_restore_customer_after_refresh(self):
        cart = Cart()
        cart.select_customer(make_customer(points=1000))
        previous = cart.refresh_customer(make_customer(points=10))
        self.assertEqual(cart.customer.loyalty_points, Decimal("10"))

        cart.restore_customer(previous)
        self.assertEqual(cart.customer.loyalty_points, Decimal("1000"))


if __name__ == "__main__":
    unittest.main()
