from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FamilyMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fullname: str
    relation: Optional[str] = None
    is_registered: bool


class FamilyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    husband_name: Optional[str] = None
    wife_name: Optional[str] = None
    members: List[FamilyMemberRead] = Field(default_factory=list)


class HouseholdRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    purok: Optional[str] = None
    sitio: Optional[str] = None
    barangay: Optional[str] = None
    address: Optional[str] = None
    score: float = 0.0
    families: List[FamilyRead] = Field(default_factory=list)
