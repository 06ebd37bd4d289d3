from decimal import Decimal

from textile_pos.core.money import format_money
from textile_pos.services.checkout import CompletedOrder

_DEFAULT_SHOP_NAME = "BusyTextile"
_RULE = "------------------------"


def _shop_block(shop_settings):
    if shop_settings is None:
        return {
            "shop_name": _DEFAULT_SHOP_NAME,
            "address_line1": "",
            "address_line2": "",
            "city": "",
            "pincode": "",
            "phone": "",
            "gstin": "",
            "terms_and_conditions": "",
        }
    return {
        "shop_name": shop_settings.shop_name or _DEFAULT_SHOP_NAME,
        "address_line1": shop_settings.address_line1 or "",
        "address_line2": shop_settings.address_line2 or "",
        "city": shop_settings.city or "",
        "pincode": shop_settings.pincode or "",
        "phone": shop_settings.phone or "",
        "gstin": shop_settings.gstin or "",
        "terms_and_conditions": shop_settings.terms_and_conditions or "",
    }


def build_receipt(order: CompletedOrder, shop_settings=None) -> dict:
    """Receipt figures for a completed order.

    GST is split into two equal halves, CGST and SGST, each ``total_tax / 2``.
    Nothing here is stored; the receipt is always rebuilt from the order.
    """
    half_tax = order.total_tax / Decimal(2)
    return {
        "shop": _shop_block(shop_settings),
        "invoice_no": order.invoice_no,
        "date": order.date,
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone,
        "payment_method": order.payment_method,
        "lines": [
            {
                "product_id": line.product_id,
                "name": line.name,
                "variant": line.variant,
                "hsn_code": line.hsn_code,
                "unit": line.unit,
                "quantity": line.quantity,
                "price": line.price,
                "tax_rate": line.tax_rate,
                "item_total": line.item_total,
            }
            for line in order.items
        ],
        "taxable_amount": order.subtotal,
        "subtotal": order.subtotal,
        "cgst": half_tax,
        "sgst": half_tax,
        "total_tax": order.total_tax,
        "discount": order.discount,
        "total": order.total,
        "points_earned": order.points_earned,
        "points_used": order.points_used,
    }


def build_share_message(order: CompletedOrder, shop_name: str | None = None, currency: str = "$") -> str:
    lines = [
        "*INVOICE: {}*".format(shop_name or _DEFAULT_SHOP_NAME),
        "Inv No: {}".format(order.invoice_no),
        "Date: {}".format(order.date.strftime("%d/%m/%Y")),
        _RULE,
    ]
    for item in order.items:
        lines.append("{} x {} : {:.2f}".format(item.name, item.quantity, item.item_total))
    lines.append(_RULE)
    lines.append("*Grand Total: {}*".format(format_money(order.total, currency)))
    if order.points_earned > 0:
        lines.append("Loyalty Points Earned: {}".format(order.points_earned))
    lines.append("")
    lines.append("Thank you for shopping with us!")
    return "\n".join(lines)


__all__ = ["build_receipt", "build_share_message"]
