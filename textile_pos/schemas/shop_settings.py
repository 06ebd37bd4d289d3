from pydantic import BaseModel, ConfigDict, Field


class ShopSettingsBase(BaseModel):
    shop_name: str = Field(min_length=1)
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    pincode: str = ""
    phone: str = ""
    gstin: str = ""
    terms_and_conditions: str = ""


class ShopSettingsRead(ShopSettingsBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
