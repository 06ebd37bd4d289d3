from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Index, Integer, String

from textile_pos.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)

    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    material = Column(String, nullable=False, default="")
    color = Column(String, nullable=False, default="")
    variant = Column(String, nullable=False, default="")
    unit = Column(String, nullable=False, default="Meters")

    hsn_code = Column(String, nullable=False, default="")
    tax_rate = Column(Float, nullable=False, default=5)
    price = Column(Float, nullable=False, default=0)
    cost_price = Column(Float)

    stock = Column(Float, nullable=False, default=0)
    min_stock_level = Column(Float, nullable=False, default=0)
    sku = Column(String, nullable=False, default="")

    supplier = Column(String)
    description = Column(String)
    image_url = Column(String)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("tax_rate >= 0", name="ck_products_tax_rate_non_negative"),
        Index("idx_products_sku", "sku"),
        Index("idx_products_name", "name"),
        Index("idx_products_type", "type"),
    )

    @property
    def is_low_stock(self) -> bool:
        return (self.stock or 0) <= (self.min_stock_level or 0)


__all__ = ["Product"]
