from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class SaleItemRead(BaseModel):
    product_id: int
    name: str
    sku: str
    variant: str
    unit: str
    hsn_code: str
    price: float
    tax_rate: float
    quantity: int
    item_total: float
    item_tax: float

    model_config = ConfigDict(from_attributes=True)


class SaleRead(BaseModel):
    invoice_no: str
    date: datetime
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    items: List[SaleItemRead]
    subtotal: float
    total_tax: float
    discount: float
    total: float
    payment_method: str
    points_earned: int
    points_used: int

    model_config = ConfigDict(from_attributes=True)


class CompletedOrderRead(SaleRead):
    sale_id: int
    customer_points_balance: Optional[float] = None


class SaleShareRead(BaseModel):
    invoice_no: str
    phone: str
    message: str
    link: str


class SaleWhatsAppRequest(BaseModel):
    phone: Optional[str] = None
