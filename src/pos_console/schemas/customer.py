from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    birthday: Optional[date] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    branch_id: Optional[int] = None


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    birthday: Optional[date] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    branch_id: Optional[int] = None


class CustomerRead(CustomerBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    created_at: datetime
