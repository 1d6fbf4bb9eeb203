from sqlalchemy import Column, Integer, String, Date, Float, Boolean, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum

class LeaveStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

class LeaveType(str, enum.Enum):
    SICK = "Sick Leave"
    CASUAL = "Casual Leave"
    EMERGENCY = "Emergency Leave"

class LeaveDuration(str, enum.Enum):
    FULL_DAY = "Full Day"
    HALF_DAY = "Half Day"

class HalfDaySlot(str, enum.Enum):
    FIRST_HALF = "First Half"
    SECOND_HALF = "Second Half"

class DeductionSource(str, enum.Enum):
    CL = "CL"
    SL = "SL"
    UNPAID = "UNPAID"

CANCELLED_BY_EMPLOYEE_REMARK = "Cancelled by employee"

class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = Column(String, nullable=False, index=True)
    leave_duration = Column(String, nullable=False, default=LeaveDuration.FULL_DAY.value)
    half_day_slot = Column(String, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)
    # Enum values stored as plain strings for SQLite compatibility
    status = Column(String, nullable=False, default=LeaveStatus.PENDING.value, index=True)

    # Resubmission tracking
    submission_count = Column(Integer, nullable=False, default=1)
    original_request_id = Column(Integer, nullable=True)

    # Populated on approval
    is_paid = Column(Boolean, nullable=True)
    deducted_from = Column(String, nullable=True)
    balance_deducted = Column(Float, nullable=False, default=0.0)

    # Review
    admin_remarks = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Optimistic lock: a stale writer fails at flush instead of double-applying
    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    employee = relationship("User", foreign_keys=[employee_id], back_populates="leave_requests")
    reviewer = relationship("User", foreign_keys=[reviewed_by])
    rejection_history = relationship(
        "RejectionHistoryEntry",
        back_populates="leave_request",
        order_by="RejectionHistoryEntry.attempt_number",
        passive_deletes=True,
    )

    @property
    def requested_days(self) -> float:
        return 0.5 if self.leave_duration == LeaveDuration.HALF_DAY.value else 1.0

    @property
    def is_resubmission(self) -> bool:
        return self.submission_count > 1

    def __repr__(self):
        return f"<LeaveRequest {self.id} {self.leave_type} {self.status} (attempt {self.submission_count})>"
