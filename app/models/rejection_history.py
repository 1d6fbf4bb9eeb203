from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Text, event
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

class RejectionHistoryEntry(Base):
    """
    Snapshot of a leave request taken at the moment it was rejected.

    The parent request's fields are overwritten on resubmission, so the leave
    details are copied here rather than read back from the parent.
    """
    __tablename__ = "rejection_history_entries"

    id = Column(Integer, primary_key=True, index=True)
    leave_request_id = Column(Integer, ForeignKey("leave_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    attempt_number = Column(Integer, nullable=False)

    rejected_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    rejection_reason = Column(Text, nullable=False)
    admin_remarks = Column(Text, nullable=True)
    rejected_at = Column(DateTime(timezone=True), server_default=func.now())

    # Leave details at time of rejection
    leave_type = Column(String, nullable=False)
    leave_duration = Column(String, nullable=False)
    half_day_slot = Column(String, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)

    leave_request = relationship("LeaveRequest", back_populates="rejection_history")
    reviewer = relationship("User", foreign_keys=[rejected_by])


@event.listens_for(RejectionHistoryEntry, "before_update")
def _rejection_history_is_immutable(mapper, connection, target):
    raise RuntimeError("rejection history entries cannot be modified")


@event.listens_for(RejectionHistoryEntry, "before_delete")
def _rejection_history_is_permanent(mapper, connection, target):
    raise RuntimeError("rejection history entries cannot be deleted")
