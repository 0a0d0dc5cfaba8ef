from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class CartOpen(BaseModel):
    branch_id: Optional[int] = None


class CartLineAdd(BaseModel):
    item_type: Literal["product", "service"]
    item_id: int
    quantity: int = 1


class CartLineUpdate(BaseModel):
    quantity: int


class CartLineRead(BaseModel):
    index: int
    item_type: str
    item_id: int
    name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    unit: Optional[str] = None


class CartRead(BaseModel):
    id: str
    branch_id: Optional[int] = None
    status: str
    lines: List[CartLineRead] = Field(default_factory=list)
    total: Decimal


class CheckoutRequest(BaseModel):
    customer_id: Optional[int] = None
    payment_type: Optional[str] = None


class CheckoutResponse(BaseModel):
    transaction_id: int
    transaction_number: str
    total_amount: Decimal
    status: str
