from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    branch_id: Optional[int] = None
    customer_id: Optional[int] = None
    transaction_number: str
    reference_number: Optional[str] = None
    payment_type: str
    total_amount: Decimal
    status: str
    created_at: datetime


class TransactionItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_type: str
    product_id: Optional[int] = None
    service_id: Optional[int] = None
    name: Optional[str] = None
    quantity: int
    price: Decimal
    total: Decimal
    unit: Optional[str] = None


class TransactionDetail(TransactionRead):
    customer_name: Optional[str] = None
    items: List[TransactionItemRead] = Field(default_factory=list)


class TransactionUpdate(BaseModel):
    reference_number: Optional[str] = Field(None, max_length=64)


class ItemQuantityUpdate(BaseModel):
    """Post-sale correction for returns; zero means the line was fully returned."""

    quantity: int = Field(..., ge=0)
