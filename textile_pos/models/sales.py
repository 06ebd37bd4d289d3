from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from textile_pos.database.base import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    invoice_no = Column(String(40), nullable=False)
    date = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    customer_id = Column(Integer, ForeignKey("customers.id"))
    customer_name = Column(String)
    customer_phone = Column(String)

    subtotal = Column(Float, nullable=False)
    total_tax = Column(Float, nullable=False)
    discount = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False)
    payment_method = Column(String(10), nullable=False)

    points_earned = Column(Integer, nullable=False, default=0)
    points_used = Column(Integer, nullable=False, default=0)

    items = relationship(
        "SaleItem",
        back_populates="sale",
        order_by="SaleItem.line_no",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("invoice_no", name="uq_sales_invoice_no"),
        Index("idx_sales_date", "date"),
        Index("idx_sales_customer", "customer_id"),
    )


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    line_no = Column(Integer, nullable=False)

    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    name = Column(String, nullable=False)
    sku = Column(String, nullable=False, default="")
    type = Column(String, nullable=False, default="")
    variant = Column(String, nullable=False, default="")
    unit = Column(String, nullable=False, default="")
    hsn_code = Column(String, nullable=False, default="")

    price = Column(Float, nullable=False)
    tax_rate = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)
    item_total = Column(Float, nullable=False)
    item_tax = Column(Float, nullable=False)

    sale = relationship("Sale", back_populates="items")

    __table_args__ = (
        Index("idx_sale_items_sale", "sale_id"),
        Index("idx_sale_items_product", "product_id"),
    )


class InvoiceSequence(Base):
    __tablename__ = "invoice_sequences"

    year = Column(Integer, primary_key=True, autoincrement=False)
    last_value = Column(Integer, nullable=False, default=0)


__all__ = ["InvoiceSequence", "Sale", "SaleItem"]
