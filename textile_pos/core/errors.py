class PosError(Exception):
    """Base class for point-of-sale domain errors."""


class ProductNotFoundError(PosError):
    def __init__(self, product_id):
        super().__init__("Product {} not found.".format(product_id))
        self.product_id = product_id


class CustomerNotFoundError(PosError):
    def __init__(self, customer_id):
        super().__init__("Customer {} not found.".format(customer_id))
        self.customer_id = customer_id


class CartNotFoundError(PosError):
    def __init__(self, cart_id):
        super().__init__("Cart {} not found.".format(cart_id))
        self.cart_id = cart_id


class SaleNotFoundError(PosError):
    def __init__(self, invoice_no):
        super().__init__("Sale {} not found.".format(invoice_no))
        self.invoice_no = invoice_no


class UnpersistedProductError(PosError):
    def __init__(self, name=None):
        super().__init__("Product {!r} has no id and cannot be sold.".format(name))


class InsufficientStockError(PosError):
    def __init__(self, product_id, name, available, requested):
        super().__init__(
            "Insufficient stock for {} (id {}): {} available, {} requested.".format(
                name, product_id, available, requested
            )
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class CheckoutInProgressError(PosError):
    def __init__(self):
        super().__init__("A checkout is already in progress for this cart.")


class AssistantError(PosError):
    pass


class AssistantBusyError(AssistantError):
    def __init__(self):
        super().__init__("A message is already being processed for this chat.")
