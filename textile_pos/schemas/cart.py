from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

PaymentMethod = Literal["Cash", "Card", "UPI"]


class CartItemRead(BaseModel):
    product_id: int
    name: str
    sku: str
    type: str
    variant: str
    unit: str
    hsn_code: str
    price: float
    tax_rate: float
    quantity: int
    item_total: float
    item_tax: float
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CartCustomerRead(BaseModel):
    id: int
    name: str
    phone: str
    loyalty_points: float

    model_config = ConfigDict(from_attributes=True)


class CartTotalsRead(BaseModel):
    subtotal: float
    total_tax: float
    gross_total: float
    max_redeemable_value: float
    redemption_value: float
    points_used: int
    final_total: float
    points_to_earn: int
    item_count: int

    model_config = ConfigDict(from_attributes=True)


class CartRead(BaseModel):
    id: str
    items: List[CartItemRead]
    customer: Optional[CartCustomerRead] = None
    redeem_points: bool
    totals: CartTotalsRead

    model_config = ConfigDict(from_attributes=True)


class CartItemAdd(BaseModel):
    product_id: int


class CartQuantityChange(BaseModel):
    delta: int


class CartCustomerSelect(BaseModel):
    customer_id: Optional[int] = None


class CartRedeemToggle(BaseModel):
    redeem: bool


class CheckoutRequest(BaseModel):
    payment_method: PaymentMethod = "Cash"
