from datetime import date, datetime, time
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

BookingStatus = Literal["pending", "scheduled", "re-scheduled", "done", "completed", "canceled"]


class BookingCreate(BaseModel):
    customer_id: int
    branch_id: int
    doctor_id: Optional[int] = None
    schedule_date: date
    time_start: time
    service_ids: List[int] = Field(default_factory=list)
    attendants: List[int] = Field(..., min_length=1, description="User ids attending the booking")
    remarks: str = ""


class BookingUpdate(BaseModel):
    customer_id: Optional[int] = None
    doctor_id: Optional[int] = None
    schedule_date: Optional[date] = None
    time_start: Optional[time] = None
    service_ids: Optional[List[int]] = None
    attendants: Optional[List[int]] = Field(None, min_length=1)
    remarks: Optional[str] = None
    status: Optional[BookingStatus] = None


class BookingRead(BaseModel):
    id: int
    org_id: int
    branch_id: int
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    doctor_id: Optional[int] = None
    schedule_date: date
    time_start: time
    status: str
    remarks: str
    created_by: Optional[str] = None
    created_at: datetime
    attendants: List[int] = Field(default_factory=list)
    service_ids: List[int] = Field(default_factory=list)
