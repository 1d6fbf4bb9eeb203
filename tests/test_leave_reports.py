import pytest
from datetime import date

from app.core.exceptions import ValidationError
from app.services import leave_reports

TODAY = date(2024, 5, 10)


@pytest.fixture
def seeded(employee, make_user, make_leave):
    other = make_user(full_name="Rohan Deshmukh")
    return {
        "ongoing": make_leave(employee, status="Approved", leave_type="Sick Leave",
                              start_date=date(2024, 5, 9), end_date=date(2024, 5, 11)),
        "tomorrow": make_leave(other, status="Approved", start_date=date(2024, 5, 11)),
        "late_may": make_leave(employee, status="Approved", leave_type="Emergency Leave",
                               start_date=date(2024, 5, 30), end_date=date(2024, 6, 2)),
        "far": make_leave(other, status="Approved", start_date=date(2024, 7, 1)),
        "pending": make_leave(employee, start_date=date(2024, 5, 10)),
        "rejected": make_leave(other, status="Rejected", start_date=date(2024, 5, 10)),
    }


def test_summary_stats(db_session, seeded):
    assert leave_reports.summary_stats(db_session) == {"pending": 1, "approved": 4, "rejected": 1}


def test_summary_stats_empty(db_session):
    assert leave_reports.summary_stats(db_session) == {"pending": 0, "approved": 0, "rejected": 0}


def test_employees_on_leave_only_counts_approved(db_session, seeded, employee):
    entries = leave_reports.employees_on_leave(db_session, TODAY)
    assert [e["request_id"] for e in entries] == [seeded["ongoing"].id]
    assert entries[0]["type"] == "SL"
    assert entries[0]["employee_name"] == "Asha Patil"


def test_upcoming_leaves_window_and_order(db_session, seeded):
    entries = leave_reports.upcoming_leaves(db_session, TODAY, window_days=30)
    assert [e["request_id"] for e in entries] == [seeded["tomorrow"].id, seeded["late_may"].id]
    assert entries[1]["type"] == "EL"


def test_upcoming_leaves_limit(db_session, seeded):
    entries = leave_reports.upcoming_leaves(db_session, TODAY, window_days=90, limit=1)
    assert len(entries) == 1


def test_calendar_month_includes_overlapping_leave(db_session, seeded):
    june = leave_reports.calendar_month(db_session, 2024, 6)
    assert [e["request_id"] for e in june] == [seeded["late_may"].id]

    may = leave_reports.calendar_month(db_session, 2024, 5)
    assert {e["request_id"] for e in may} == {seeded["ongoing"].id, seeded["tomorrow"].id, seeded["late_may"].id}


def test_calendar_month_validates_month(db_session):
    with pytest.raises(ValidationError):
        leave_reports.calendar_month(db_session, 2024, 13)
