from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

CustomerTier = Literal["Bronze", "Silver", "Gold"]


class CustomerBase(BaseModel):
    name: str = Field(min_length=1)
    phone: str = ""
    email: str = ""
    address: Optional[str] = None
    gstin: Optional[str] = None


class CustomerCreate(CustomerBase):
    loyalty_points: float = Field(0, ge=0)
    total_spend: float = Field(0, ge=0)
    tier: CustomerTier = "Bronze"


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    tier: Optional[CustomerTier] = None


class CustomerRead(CustomerBase):
    id: int
    loyalty_points: float
    total_spend: float
    tier: str
    join_date: datetime

    model_config = ConfigDict(from_attributes=True)
