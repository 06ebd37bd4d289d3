from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ProductType = Literal["Fabric", "Yarn", "Accessory", "Ready Made"]
UnitOfMeasure = Literal["Meters", "Kg", "Pcs", "Box", "Roll"]


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    type: ProductType
    material: str = ""
    color: str = ""
    variant: str = ""
    unit: UnitOfMeasure = "Meters"
    hsn_code: str = ""
    tax_rate: float = Field(5, ge=0)
    price: float = Field(ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock: float = Field(0, ge=0)
    min_stock_level: float = Field(10, ge=0)
    sku: str = Field(min_length=1)
    supplier: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class ProductCreate(ProductBase):
    pass


class ProductBulkCreate(BaseModel):
    products: List[ProductCreate] = Field(min_length=1)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[ProductType] = None
    material: Optional[str] = None
    color: Optional[str] = None
    variant: Optional[str] = None
    unit: Optional[UnitOfMeasure] = None
    hsn_code: Optional[str] = None
    tax_rate: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock: Optional[float] = Field(None, ge=0)
    min_stock_level: Optional[float] = Field(None, ge=0)
    sku: Optional[str] = Field(None, min_length=1)
    supplier: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class ProductRead(ProductBase):
    id: int
    name: str
    type: str
    unit: str
    sku: str
    stock: float
    created_at: datetime
    is_low_stock: bool

    model_config = ConfigDict(from_attributes=True)


class ProductImportRequest(BaseModel):
    path: str
    sheet: Optional[str] = None
    dry_run: bool = False
