from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class StockInCreate(BaseModel):
    """Receipt of goods; sales write their own ``out`` rows at checkout."""

    product_id: int
    quantity: int = Field(..., gt=0)
    transaction_date: Optional[datetime] = None
    expiration_date: Optional[date] = None
    remarks: Optional[str] = None
    branch_id: Optional[int] = None


class StockMovementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: Optional[str] = None
    branch_id: Optional[int] = None
    transaction_id: Optional[int] = None
    type: Literal["in", "out"]
    quantity: int
    remarks: Optional[str] = None
    transaction_date: datetime
    expiration_date: Optional[date] = None
    created_at: datetime


class StockLevel(BaseModel):
    product_id: int
    on_hand: int
    expired_lots: int
    total_in: int
    total_out: int
    stock_status: str
