from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ServiceCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    parent_id: Optional[int] = None


class ServiceCategoryRead(ServiceCategoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ServiceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category_id: Optional[int] = None
    description: Optional[str] = None
    base_price: Decimal = Field(..., ge=0)
    duration_minutes: Optional[int] = Field(None, ge=0)
    branch_id: Optional[int] = None
    is_active: bool = True


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category_id: Optional[int] = None
    description: Optional[str] = None
    base_price: Optional[Decimal] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, ge=0)
    branch_id: Optional[int] = None
    is_active: Optional[bool] = None


class ServiceRead(ServiceBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    created_at: datetime


class CategoryNode(BaseModel):
    """A category with its sub-categories and the services filed under it."""

    id: int
    name: str
    parent_id: Optional[int] = None
    children: List[CategoryNode] = Field(default_factory=list)
    services: List[ServiceRead] = Field(default_factory=list)


CategoryNode.model_rebuild()
