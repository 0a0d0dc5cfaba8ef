from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

StaffType = Literal["admin", "user"]


class StaffBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    position: Optional[str] = Field(None, max_length=128)
    type: StaffType = "user"
    branch_id: Optional[int] = None
    rate: Optional[Decimal] = Field(None, ge=0)
    is_active: bool = True


class StaffCreate(StaffBase):
    password: Optional[str] = Field(None, min_length=6, max_length=128)


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    email: Optional[EmailStr] = None
    position: Optional[str] = Field(None, max_length=128)
    type: Optional[StaffType] = None
    branch_id: Optional[int] = None
    rate: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)


class StaffRead(StaffBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    created_at: datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
