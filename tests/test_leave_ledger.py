import pytest
from datetime import date

from app.core.exceptions import NotFoundError
from app.models.leave_balance import LeaveHistoryEntry
from app.models.leave_request import DeductionSource
from app.services import leave_ledger

FEB_1 = date(2024, 2, 1)
JAN_15 = date(2024, 1, 15)


def _deduct(db_session, ledger, leave, on_date):
    outcome = leave_ledger.deduct(db_session, ledger, leave, on_date)
    db_session.commit()
    return outcome


def test_month_rollover_runs_before_half_day_deduction(db_session, employee, make_ledger, make_leave):
    """A half day in a new month uses the fresh current-month slot and leaves the carry intact."""
    ledger = make_ledger(employee, cl_balance=20, sl_balance=5, current_month="2024-01")
    leave = make_leave(employee, leave_duration="Half Day", half_day_slot="First Half", start_date=FEB_1)

    outcome = _deduct(db_session, ledger, leave, FEB_1)

    assert ledger.current_month == "2024-02"
    assert ledger.previous_month_balance_half == 1
    assert ledger.previous_month_balance_full == 1
    assert ledger.current_month_paid_half == 1
    assert ledger.cl_balance == 19.5
    assert outcome.is_paid is True
    assert outcome.quota_slot == leave_ledger.SLOT_CURRENT_HALF
    assert outcome.balance_deducted == 0.5


def test_casual_full_day_is_paid_from_cl(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(employee, cl_balance=3, current_month="2024-01")
    leave = make_leave(employee, leave_type="Casual Leave", start_date=JAN_15)

    outcome = _deduct(db_session, ledger, leave, JAN_15)

    assert outcome.is_paid is True
    assert outcome.deducted_from == DeductionSource.CL
    assert ledger.cl_balance == 2
    assert ledger.sl_balance == 5
    assert ledger.current_month_paid_full == 1


def test_emergency_leave_draws_from_cl_pool(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(employee, cl_balance=2, sl_balance=2, current_month="2024-01")
    leave = make_leave(employee, leave_type="Emergency Leave", start_date=JAN_15)

    outcome = _deduct(db_session, ledger, leave, JAN_15)

    assert outcome.deducted_from == DeductionSource.CL
    assert ledger.cl_balance == 1
    assert ledger.sl_balance == 2


def test_sick_leave_without_balance_or_quota_is_unpaid(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(
        employee, cl_balance=10, sl_balance=0, current_month="2024-01",
        current_month_paid_full=1, previous_month_balance_full=0,
    )
    leave = make_leave(employee, leave_type="Sick Leave", start_date=JAN_15)

    outcome = _deduct(db_session, ledger, leave, JAN_15)

    assert outcome.is_paid is False
    assert outcome.balance_deducted == 0
    assert outcome.deducted_from == DeductionSource.UNPAID
    assert outcome.quota_slot is None
    assert ledger.cl_balance == 10
    assert ledger.sl_balance == 0
    assert ledger.current_month_unpaid_leaves == 1
    assert ledger.total_unpaid_leaves == 1


def test_quota_slot_stays_consumed_when_pool_is_short(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(employee, cl_balance=10, sl_balance=0, current_month="2024-01")
    leave = make_leave(employee, leave_type="Sick Leave", start_date=JAN_15)

    outcome = _deduct(db_session, ledger, leave, JAN_15)

    assert outcome.is_paid is False
    assert outcome.quota_slot == leave_ledger.SLOT_CURRENT_FULL
    assert ledger.current_month_paid_full == 1
    assert ledger.total_unpaid_leaves == 1


def test_carried_slot_used_after_current_slot(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(
        employee, current_month="2024-01",
        current_month_paid_full=1, previous_month_balance_full=1,
    )
    leave = make_leave(employee, start_date=JAN_15)

    outcome = _deduct(db_session, ledger, leave, JAN_15)

    assert outcome.is_paid is True
    assert outcome.quota_slot == leave_ledger.SLOT_CARRIED_FULL
    assert ledger.previous_month_balance_full == 0
    assert ledger.current_month_paid_full == 1
    assert ledger.cl_balance == 19


def test_half_day_beyond_quota_is_unpaid(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(employee, current_month="2024-01", current_month_paid_half=1)
    leave = make_leave(employee, leave_duration="Half Day", half_day_slot="Second Half", start_date=JAN_15)

    outcome = _deduct(db_session, ledger, leave, JAN_15)

    assert outcome.is_paid is False
    assert ledger.current_month_unpaid_leaves == 0.5
    assert ledger.cl_balance == 20


def test_counters_never_exceed_one(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(employee, cl_balance=20, current_month="2024-01")
    for _ in range(4):
        leave = make_leave(employee, start_date=JAN_15)
        _deduct(db_session, ledger, leave, JAN_15)
        leave = make_leave(employee, leave_duration="Half Day", half_day_slot="First Half", start_date=JAN_15)
        _deduct(db_session, ledger, leave, JAN_15)

    assert 0 <= ledger.current_month_paid_full <= 1
    assert 0 <= ledger.current_month_paid_half <= 1
    assert ledger.cl_balance == 18.5
    assert ledger.total_unpaid_leaves == 4.5


def test_history_entry_appended(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(employee, current_month="2024-01")
    leave = make_leave(employee, start_date=JAN_15)

    _deduct(db_session, ledger, leave, JAN_15)

    entries = db_session.query(LeaveHistoryEntry).filter(LeaveHistoryEntry.ledger_id == ledger.id).all()
    assert len(entries) == 1
    assert entries[0].leave_request_id == leave.id
    assert entries[0].month == "2024-01"
    assert entries[0].days == 1
    assert entries[0].is_paid is True
    assert entries[0].deducted_from == "CL"


def test_history_entries_cannot_be_deleted(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(employee, current_month="2024-01")
    _deduct(db_session, ledger, make_leave(employee, start_date=JAN_15), JAN_15)

    db_session.delete(db_session.query(LeaveHistoryEntry).one())
    with pytest.raises(RuntimeError):
        db_session.commit()
    db_session.rollback()
    assert db_session.query(LeaveHistoryEntry).count() == 1


def test_history_entries_cannot_be_modified(db_session, employee, make_ledger, make_leave):
    ledger = make_ledger(employee, current_month="2024-01")
    _deduct(db_session, ledger, make_leave(employee, start_date=JAN_15), JAN_15)

    db_session.query(LeaveHistoryEntry).one().days = 0.5
    with pytest.raises(RuntimeError):
        db_session.commit()
    db_session.rollback()


def test_reset_carries_only_unused_quota(employee, make_ledger):
    ledger = make_ledger(employee, current_month="2024-01", current_month_paid_full=1, current_month_paid_half=0)

    assert leave_ledger.apply_monthly_reset(ledger, FEB_1) is True
    assert ledger.previous_month_balance_full == 0
    assert ledger.previous_month_balance_half == 1
    assert ledger.current_month_paid_full == 0
    assert ledger.current_month_unpaid_leaves == 0


def test_reset_overwrites_carry_across_skipped_months(employee, make_ledger):
    ledger = make_ledger(employee, current_month="2024-01", previous_month_balance_full=1, previous_month_balance_half=1)

    leave_ledger.apply_monthly_reset(ledger, date(2024, 5, 3))

    assert ledger.current_month == "2024-05"
    assert ledger.previous_month_balance_full == 1
    assert ledger.previous_month_balance_half == 1


def test_reset_never_moves_backward(employee, make_ledger):
    ledger = make_ledger(employee, current_month="2024-03", current_month_paid_full=1)

    assert leave_ledger.apply_monthly_reset(ledger, FEB_1) is False
    assert leave_ledger.apply_monthly_reset(ledger, date(2024, 3, 31)) is False
    assert ledger.current_month == "2024-03"
    assert ledger.current_month_paid_full == 1


def test_get_or_create_ledger_provisions_defaults(db_session, employee):
    ledger = leave_ledger.get_or_create_ledger(db_session, employee.id, FEB_1)
    db_session.commit()

    assert ledger.cl_balance == 20
    assert ledger.sl_balance == 5
    assert ledger.current_month == "2024-02"
    assert leave_ledger.get_or_create_ledger(db_session, employee.id).id == ledger.id


def test_get_or_create_ledger_unknown_employee(db_session):
    with pytest.raises(NotFoundError):
        leave_ledger.get_or_create_ledger(db_session, 9999)


def test_snapshot_reports_remaining_quota(employee, make_ledger):
    ledger = make_ledger(employee, current_month_paid_full=1, previous_month_balance_half=1)

    snap = leave_ledger.snapshot(ledger)

    assert snap["carry_forward"] == {"full": 0, "half": 1}
    assert snap["remaining_quota"] == {"full": 0, "half": 2}
    assert snap["cl_balance"] == 20
