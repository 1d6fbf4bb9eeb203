from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, datetime
from typing import List, Optional
from app.models.leave_request import HalfDaySlot, LeaveDuration, LeaveType

class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    leave_duration: LeaveDuration = LeaveDuration.FULL_DAY
    half_day_slot: Optional[HalfDaySlot] = None
    start_date: date
    end_date: date
    reason: str = Field(min_length=1)

    @model_validator(mode="after")
    def check_dates_and_slot(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        if self.leave_duration == LeaveDuration.HALF_DAY and self.half_day_slot is None:
            raise ValueError("half_day_slot is required for Half Day leave")
        return self

class LeaveResubmitRequest(LeaveRequestCreate):
    pass

class LeaveApproveRequest(BaseModel):
    admin_remarks: Optional[str] = None

class LeaveRejectRequest(BaseModel):
    reason: str = Field(min_length=1)
    admin_remarks: Optional[str] = None

class LeaveRequestResponse(BaseModel):
    id: int
    employee_id: int
    leave_type: str
    leave_duration: str
    half_day_slot: Optional[str] = None
    start_date: date
    end_date: date
    reason: str
    status: str
    submission_count: int
    original_request_id: Optional[int] = None
    is_paid: Optional[bool] = None
    deducted_from: Optional[str] = None
    balance_deducted: float = 0.0
    admin_remarks: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ResubmissionResponse(BaseModel):
    request: LeaveRequestResponse
    attempts_left: int

class RejectionHistoryResponse(BaseModel):
    id: int
    leave_request_id: int
    attempt_number: int
    rejected_by: Optional[int] = None
    rejection_reason: str
    admin_remarks: Optional[str] = None
    rejected_at: Optional[datetime] = None
    leave_type: str
    leave_duration: str
    half_day_slot: Optional[str] = None
    start_date: date
    end_date: date
    reason: str

    model_config = ConfigDict(from_attributes=True)

class QuotaPair(BaseModel):
    full: int
    half: int

class BalanceSnapshot(BaseModel):
    employee_id: int
    cl_balance: float
    sl_balance: float
    current_month: str
    current_month_paid_full: int
    current_month_paid_half: int
    current_month_unpaid_leaves: float
    total_unpaid_leaves: float
    carry_forward: QuotaPair
    remaining_quota: QuotaPair

class ApprovalResponse(BaseModel):
    request: LeaveRequestResponse
    balance: BalanceSnapshot
    notification_sent: bool

class RejectionResponse(BaseModel):
    request: LeaveRequestResponse
    notification_sent: bool

class SummaryStats(BaseModel):
    pending: int
    approved: int
    rejected: int

class CalendarLeave(BaseModel):
    request_id: int
    employee_id: int
    employee_name: str
    leave_type: str
    type: str
    leave_duration: str
    start_date: date
    end_date: date

class CalendarMonth(BaseModel):
    year: int
    month: int
    leaves: List[CalendarLeave]

class LeaveReminderRun(BaseModel):
    found: int
    sent: int
    failed: int

class FeedbackRequest(BaseModel):
    to_email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)

class FeedbackResponse(BaseModel):
    message: str
    sent: bool

# Resolve forward references for Pydantic V2
ResubmissionResponse.model_rebuild()
ApprovalResponse.model_rebuild()
RejectionResponse.model_rebuild()
