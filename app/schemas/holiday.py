from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Optional
from app.models.holiday import HolidayType

class HolidayCreate(BaseModel):
    name: str = Field(min_length=1)
    holiday_date: date
    holiday_type: HolidayType = HolidayType.PUBLIC
    description: Optional[str] = None

class HolidayUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    holiday_date: Optional[date] = None
    holiday_type: Optional[HolidayType] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

class HolidayResponse(BaseModel):
    id: int
    name: str
    holiday_date: date
    holiday_type: str
    description: Optional[str] = None
    year: int
    is_active: bool
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class HolidayTypeCount(BaseModel):
    holiday_type: str
    count: int

class HolidayMonthCount(BaseModel):
    month: int
    count: int

class HolidayStats(BaseModel):
    year: int
    total_holidays: int
    by_type: List[HolidayTypeCount]
    by_month: List[HolidayMonthCount]
    upcoming_holidays: List[HolidayResponse]

class HolidayDeleteResult(BaseModel):
    message: str
    deleted_count: int

class HolidayReminderRun(BaseModel):
    found: int
    recipients: int
    sent: int
    failed: int
