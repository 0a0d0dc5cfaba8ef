from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BranchBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    address: Optional[str] = None
    contact_number: Optional[str] = None


class BranchCreate(BranchBase):
    pass


class BranchUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    address: Optional[str] = None
    contact_number: Optional[str] = None


class BranchRead(BranchBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    created_at: datetime
