from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, event
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

class EmployeeLeaveLedger(Base):
    """
    Per-employee leave balance state.

    Counters are only mutated through app.services.leave_ledger; routers and
    other services read them via snapshots.
    """
    __tablename__ = "employee_leave_ledgers"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)

    cl_balance = Column(Float, nullable=False, default=0.0)  # Casual / Emergency pool
    sl_balance = Column(Float, nullable=False, default=0.0)  # Sick pool

    current_month = Column(String(7), nullable=False)  # YYYY-MM
    current_month_paid_full = Column(Integer, nullable=False, default=0)  # 0/1
    current_month_paid_half = Column(Integer, nullable=False, default=0)  # 0/1
    current_month_unpaid_leaves = Column(Float, nullable=False, default=0.0)

    previous_month_balance_full = Column(Integer, nullable=False, default=0)  # carry forward
    previous_month_balance_half = Column(Integer, nullable=False, default=0)  # carry forward

    total_unpaid_leaves = Column(Float, nullable=False, default=0.0)
    last_monthly_reset = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    employee = relationship("User", back_populates="leave_ledger")
    leave_history = relationship(
        "LeaveHistoryEntry",
        back_populates="ledger",
        order_by="LeaveHistoryEntry.id",
        passive_deletes=True,
    )


class LeaveHistoryEntry(Base):
    """One row per approved leave describing how it was charged."""
    __tablename__ = "leave_history_entries"

    id = Column(Integer, primary_key=True, index=True)
    ledger_id = Column(Integer, ForeignKey("employee_leave_ledgers.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_request_id = Column(Integer, ForeignKey("leave_requests.id", ondelete="SET NULL"), nullable=True, index=True)
    month = Column(String(7), nullable=False)
    days = Column(Float, nullable=False)
    leave_type = Column(String, nullable=False)
    is_paid = Column(Boolean, nullable=False)
    deducted_from = Column(String, nullable=False)  # CL / SL / UNPAID
    quota_slot = Column(String, nullable=True)  # current_full, carried_half, ...
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    ledger = relationship("EmployeeLeaveLedger", back_populates="leave_history")


@event.listens_for(LeaveHistoryEntry, "before_update")
def _history_is_append_only(mapper, connection, target):
    raise RuntimeError("leave history entries are append-only")


@event.listens_for(LeaveHistoryEntry, "before_delete")
def _history_is_permanent(mapper, connection, target):
    raise RuntimeError("leave history entries cannot be deleted")
