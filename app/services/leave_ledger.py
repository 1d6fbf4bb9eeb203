"""
Leave Balance Ledger

Monthly quota reset and the deduction algorithm. This is the only module that
changes balance numbers on an EmployeeLeaveLedger.

Policy:
- Every month an employee gets one paid full day and one paid half day.
- Unused quota from the previous month is carried forward once, at rollover.
- A paid day is charged strictly to the pool of its leave type: Sick Leave to
  the SL pool, Casual and Emergency Leave to the CL pool.
- Anything without a quota slot or without pool balance is recorded as unpaid.

Nothing here commits; the caller owns the transaction.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.leave_balance import EmployeeLeaveLedger, LeaveHistoryEntry
from app.models.leave_request import DeductionSource, LeaveRequest, LeaveType
from app.models.user import User

logger = logging.getLogger(__name__)

FULL_DAY = 1.0
HALF_DAY = 0.5

SLOT_CURRENT_FULL = "current_full"
SLOT_CURRENT_HALF = "current_half"
SLOT_CARRIED_FULL = "carried_full"
SLOT_CARRIED_HALF = "carried_half"


@dataclass
class DeductionOutcome:
    is_paid: bool
    deducted_from: DeductionSource
    balance_deducted: float
    quota_slot: Optional[str]
    month: str


def month_key(on_date: date) -> str:
    return on_date.strftime("%Y-%m")


def pool_for(leave_type: str) -> DeductionSource:
    """Sick Leave is charged to SL; Casual and Emergency Leave to CL."""
    return DeductionSource.SL if leave_type == LeaveType.SICK.value else DeductionSource.CL


def get_or_create_ledger(db: Session, employee_id: int, on_date: Optional[date] = None) -> EmployeeLeaveLedger:
    """
    Load the employee's ledger, provisioning one with the policy defaults on
    first use. Unknown employees raise NotFoundError.
    """
    ledger = db.query(EmployeeLeaveLedger).filter(EmployeeLeaveLedger.employee_id == employee_id).first()
    if ledger:
        return ledger

    employee = db.get(User, employee_id)
    if not employee:
        raise NotFoundError(f"Employee {employee_id} not found")

    on_date = on_date or date.today()
    ledger = EmployeeLeaveLedger(
        employee_id=employee_id,
        cl_balance=settings.leave.default_cl_balance,
        sl_balance=settings.leave.default_sl_balance,
        current_month=month_key(on_date),
        current_month_paid_full=0,
        current_month_paid_half=0,
        current_month_unpaid_leaves=0.0,
        previous_month_balance_full=0,
        previous_month_balance_half=0,
        total_unpaid_leaves=0.0,
        last_monthly_reset=datetime.now(timezone.utc),
    )
    db.add(ledger)
    logger.info(f"Provisioned leave ledger for employee {employee_id}")
    return ledger


def apply_monthly_reset(ledger: EmployeeLeaveLedger, on_date: date) -> bool:
    """
    Roll the ledger forward to the month of `on_date`.

    Carry-forward is recomputed from the last active month only; it overwrites
    rather than accumulates when months were skipped. A date in an earlier
    month than the ledger's never moves it backward. Returns True if a reset
    happened.
    """
    key = month_key(on_date)
    if key <= ledger.current_month:
        return False

    full_quota = settings.leave.monthly_full_day_quota
    half_quota = settings.leave.monthly_half_day_quota

    ledger.previous_month_balance_full = max(0, full_quota - (ledger.current_month_paid_full or 0))
    ledger.previous_month_balance_half = max(0, half_quota - (ledger.current_month_paid_half or 0))
    ledger.current_month_paid_full = 0
    ledger.current_month_paid_half = 0
    ledger.current_month_unpaid_leaves = 0.0

    logger.info(
        f"Monthly reset for employee {ledger.employee_id}: {ledger.current_month} -> {key}",
        extra={
            "carry_full": ledger.previous_month_balance_full,
            "carry_half": ledger.previous_month_balance_half,
        },
    )
    ledger.current_month = key
    ledger.last_monthly_reset = datetime.now(timezone.utc)
    return True


def _claim_quota_slot(ledger: EmployeeLeaveLedger, requested_days: float) -> Optional[str]:
    """Consume the highest-priority free slot for the duration, if any."""
    if requested_days == HALF_DAY:
        if ledger.current_month_paid_half < settings.leave.monthly_half_day_quota:
            ledger.current_month_paid_half += 1
            return SLOT_CURRENT_HALF
        if ledger.previous_month_balance_half > 0:
            ledger.previous_month_balance_half -= 1
            return SLOT_CARRIED_HALF
        return None

    if ledger.current_month_paid_full < settings.leave.monthly_full_day_quota:
        ledger.current_month_paid_full += 1
        return SLOT_CURRENT_FULL
    if ledger.previous_month_balance_full > 0:
        ledger.previous_month_balance_full -= 1
        return SLOT_CARRIED_FULL
    return None


def deduct(
    db: Session,
    ledger: EmployeeLeaveLedger,
    leave_request: LeaveRequest,
    on_date: Optional[date] = None,
) -> DeductionOutcome:
    """
    Charge an approved leave request against the ledger and append a history
    entry. Must be invoked at most once per request; the ledger holds no
    idempotency key of its own.
    """
    on_date = on_date or date.today()
    apply_monthly_reset(ledger, on_date)

    requested_days = leave_request.requested_days
    quota_slot = _claim_quota_slot(ledger, requested_days)
    is_paid = quota_slot is not None
    pool = pool_for(leave_request.leave_type)

    balance_deducted = 0.0
    if is_paid:
        if pool == DeductionSource.SL and ledger.sl_balance >= requested_days:
            ledger.sl_balance -= requested_days
            balance_deducted = requested_days
        elif pool == DeductionSource.CL and ledger.cl_balance >= requested_days:
            ledger.cl_balance -= requested_days
            balance_deducted = requested_days
        else:
            # The claimed quota slot stays consumed.
            logger.info(
                f"Insufficient {pool.value} balance for request {leave_request.id}; charging as unpaid",
                extra={"quota_slot": quota_slot},
            )
            is_paid = False

    if not is_paid:
        ledger.current_month_unpaid_leaves += requested_days
        ledger.total_unpaid_leaves += requested_days

    outcome = DeductionOutcome(
        is_paid=is_paid,
        deducted_from=pool if is_paid else DeductionSource.UNPAID,
        balance_deducted=balance_deducted,
        quota_slot=quota_slot,
        month=ledger.current_month,
    )

    db.add(LeaveHistoryEntry(
        ledger=ledger,
        leave_request_id=leave_request.id,
        month=outcome.month,
        days=requested_days,
        leave_type=leave_request.leave_type,
        is_paid=outcome.is_paid,
        deducted_from=outcome.deducted_from.value,
        quota_slot=quota_slot,
        created_at=datetime.now(timezone.utc),
    ))
    return outcome


def snapshot(ledger: EmployeeLeaveLedger) -> Dict[str, Any]:
    return {
        "employee_id": ledger.employee_id,
        "cl_balance": ledger.cl_balance,
        "sl_balance": ledger.sl_balance,
        "current_month": ledger.current_month,
        "current_month_paid_full": ledger.current_month_paid_full,
        "current_month_paid_half": ledger.current_month_paid_half,
        "current_month_unpaid_leaves": ledger.current_month_unpaid_leaves,
        "total_unpaid_leaves": ledger.total_unpaid_leaves,
        "carry_forward": {
            "full": ledger.previous_month_balance_full,
            "half": ledger.previous_month_balance_half,
        },
        "remaining_quota": {
            "full": max(0, settings.leave.monthly_full_day_quota - ledger.current_month_paid_full)
                    + ledger.previous_month_balance_full,
            "half": max(0, settings.leave.monthly_half_day_quota - ledger.current_month_paid_half)
                    + ledger.previous_month_balance_half,
        },
    }
