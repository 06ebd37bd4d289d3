from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from textile_pos.database.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)

    name = Column(String, nullable=False)
    phone = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    address = Column(String)
    gstin = Column(String)

    loyalty_points = Column(Float, nullable=False, default=0)
    total_spend = Column(Float, nullable=False, default=0)
    tier = Column(String, nullable=False, default="Bronze")

    join_date = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_customers_name", "name"),
        Index("idx_customers_phone", "phone"),
        Index("idx_customers_email", "email"),
    )


__all__ = ["Customer"]
