import importlib

from textile_pos.models.customer import Customer
from textile_pos.models.product import Product
from textile_pos.models.sales import InvoiceSequence, Sale, SaleItem
from textile_pos.models.shop_settings import ShopSettings


def import_all_models() -> None:
    for module_name in (
        "textile_pos.models.customer",
        "textile_pos.models.product",
        "textile_pos.models.sales",
        "textile_pos.models.shop_settings",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Customer",
    "InvoiceSequence",
    "Product",
    "Sale",
    "SaleItem",
    "ShopSettings",
    "import_all_models",
]
