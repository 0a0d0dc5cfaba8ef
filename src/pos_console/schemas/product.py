from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ProductType = Literal["for sale", "internal"]


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    selling_price: Decimal = Field(..., ge=0)
    cost: Decimal = Field(Decimal("0"), ge=0)
    type: ProductType = "for sale"
    unit: Optional[str] = None
    reorder_point: int = Field(5, ge=0)
    branch_id: Optional[int] = None
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    selling_price: Optional[Decimal] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    type: Optional[ProductType] = None
    unit: Optional[str] = None
    reorder_point: Optional[int] = Field(None, ge=0)
    branch_id: Optional[int] = None
    is_active: Optional[bool] = None


class ProductRead(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    created_at: datetime


class ProductWithStock(ProductRead):
    stock_qty: int = 0
    expired_lots: int = 0
    stock_status: str
