from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
import unittest

from textile_pos.core.money import floor_points, format_money, quantize_money
from textile_pos.services.checkout import CompletedOrder, OrderLine
from textile_pos.services.invoice_service import format_invoice_number
from textile_pos.services.receipt_service import build_receipt, build_share_message


def make_order(points_earned=21, **overrides):
    line = OrderLine(
        product_id=1,
        name="Royal Blue Silk",
        sku="SLK-001",
        variant="Raw Silk",
        unit="Meters",
        hsn_code="5007",
        price=Decimal("100.00"),
        tax_rate=Decimal("5"),
        quantity=2,
        item_total=Decimal("200.00"),
        item_tax=Decimal("10.00"),
    )
    values = dict(
        sale_id=1,
        invoice_no="INV-2026-00001",
        date=datetime(2026, 3, 14, 10, 30, tzinfo=timezone.utc),
        items=(line,),
        subtotal=Decimal("200.00"),
        total_tax=Decimal("10.00"),
        discount=Decimal("0.00"),
        total=Decimal("210.00"),
        payment_method="Cash",
        points_earned=points_earned,
        points_used=0,
        customer_name="Asha",
        customer_phone="9876543210",
    )
    values.update(overrides)
    return CompletedOrder(**values)


class ReceiptTest(unittest.TestCase):
    def test_gst_split_in_halves(self):
        receipt = build_receipt(make_order(total_tax=Decimal("10.01")))
        self.assertEqual(receipt["cgst"], Decimal("5.005"))
        self.assertEqual(receipt["sgst"], Decimal("5.005"))
        self.assertEqual(receipt["taxable_amount"], Decimal("200.00"))

    def test_default_shop_block(self):
        receipt = build_receipt(make_order())
        self.assertEqual(receipt["shop"]["shop_name"], "BusyTextile")
        self.assertEqual(receipt["shop"]["gstin"], "")

    def test_shop_settings_used(self):
        shop = SimpleNamespace(
            shop_name="Busy Textiles",
            address_line1="12 Market Road",
            address_line2=None,
            city="Surat",
            pincode="395003",
            phone="0261 123456",
            gstin="24AAAAA0000A1Z5",
            terms_and_conditions="No returns on cut fabrics.",
        )
        receipt = build_receipt(make_order(), shop)
        self.assertEqual(receipt["shop"]["shop_name"], "Busy Textiles")
        self.assertEqual(receipt["shop"]["address_line2"], "")
        self.assertEqual(receipt["lines"][0]["item_total"], Decimal("200.00"))

    def test_share_message(self):
        message = build_share_message(make_order(), "Busy Textiles")
        self.assertEqual(
            message,
            "*INVOICE: Busy Textiles*\n"
            "Inv No: INV-2026-00001\n"
            "Date: 14/03/2026\n"
            "------------------------\n"
            "Royal Blue Silk x 2 : 200.00\n"
            "------------------------\n"
            "*Grand Total: $210.00*\n"
            "Loyalty Points Earned: 21\n"
            "\n"
            "Thank you for shopping with us!",
        )

    def test_share_message_omits_zero_points(self):
        message = build_share_message(make_order(points_earned=0))
        self.assertNotIn("Loyalty Points", message)
        self.assertTrue(message.startswith("*INVOICE: BusyTextile*"))


class MoneyTest(unittest.TestCase):
    def test_quantize_half_up(self):
        self.assertEqual(quantize_money(2.675), Decimal("2.68"))
        self.assertEqual(quantize_money("0.005"), Decimal("0.01"))

    def test_floor_points(self):
        self.assertEqual(floor_points(Decimal("20.9")), 20)
        self.assertEqual(floor_points(-3), 0)
        self.assertEqual(floor_points(None), 0)

    def test_format_money(self):
        self.assertEqual(format_money(Decimal("1234.5")), "$1234.50")
        self.assertEqual(format_money(3, "Rs "), "Rs 3.00")

    def test_invoice_number_format(self):
        self.assertEqual(format_invoice_number("INV", 2026, 42), "INV-2026-00042")


if __name__ == "__main__":
    unittest.main()
