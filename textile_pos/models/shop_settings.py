from sqlalchemy import Column, Integer, String

from textile_pos.database.base import Base


class ShopSettings(Base):
    __tablename__ = "shop_settings"

    id = Column(Integer, primary_key=True)
    shop_name = Column(String, nullable=False, default="")
    address_line1 = Column(String, nullable=False, default="")
    address_line2 = Column(String, nullable=False, default="")
    city = Column(String, nullable=False, default="")
    pincode = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")
    gstin = Column(String, nullable=False, default="")
    terms_and_conditions = Column(String, nullable=False, default="")


__all__ = ["ShopSettings"]
