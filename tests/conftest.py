import pytest
import os
from datetime import date, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from app.database import Base, get_db
from app.main import app
from app.models.leave_balance import EmployeeLeaveLedger
from app.models.leave_request import LeaveRequest, LeaveStatus
from app.models.user import User, UserRole
from app.services.leave_workflow import LeaveWorkflowService
from app.services.notification import get_notifier
from fastapi.testclient import TestClient


class FakeNotifier:
    """Records notify() calls instead of sending mail."""

    def __init__(self, result=True, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def notify(self, template_kind, recipient, context):
        self.calls.append((template_kind, recipient, dict(context)))
        if self.error:
            raise self.error
        return self.result


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()

@pytest.fixture(scope="function")
def fake_notifier():
    """The FakeNotifier class, for tests that need a failing notifier."""
    return FakeNotifier

@pytest.fixture(scope="function")
def notifier():
    return FakeNotifier()

@pytest.fixture(scope="function")
def service(db_session, notifier):
    return LeaveWorkflowService(db_session, notifier)

@pytest.fixture(scope="function")
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(role=UserRole.EMPLOYEE, email=None, full_name=None, is_active=True):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            full_name=full_name or f"Test User {counter['n']}",
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user

@pytest.fixture(scope="function")
def employee(make_user):
    return make_user(UserRole.EMPLOYEE, email="employee@example.com", full_name="Asha Patil")

@pytest.fixture(scope="function")
def admin_user(make_user):
    return make_user(UserRole.ADMIN, email="admin@example.com", full_name="System Admin")

@pytest.fixture(scope="function")
def make_ledger(db_session):
    """Create a ledger with explicit counters (defaults mirror a fresh employee)."""
    def _make_ledger(user, **overrides):
        values = dict(
            cl_balance=20.0,
            sl_balance=5.0,
            current_month="2024-01",
            current_month_paid_full=0,
            current_month_paid_half=0,
            current_month_unpaid_leaves=0.0,
            previous_month_balance_full=0,
            previous_month_balance_half=0,
            total_unpaid_leaves=0.0,
        )
        values.update(overrides)
        ledger = EmployeeLeaveLedger(employee_id=user.id, **values)
        db_session.add(ledger)
        db_session.commit()
        return ledger
    return _make_ledger

@pytest.fixture(scope="function")
def make_leave(db_session):
    """Insert a leave request row directly, bypassing the workflow."""
    def _make_leave(user, **overrides):
        start = overrides.pop("start_date", date(2024, 2, 1))
        values = dict(
            leave_type="Casual Leave",
            leave_duration="Full Day",
            half_day_slot=None,
            start_date=start,
            end_date=overrides.pop("end_date", start),
            reason="Family function",
            status=LeaveStatus.PENDING.value,
            submission_count=1,
            balance_deducted=0.0,
        )
        values.update(overrides)
        leave = LeaveRequest(employee_id=user.id, **values)
        db_session.add(leave)
        db_session.commit()
        return leave
    return _make_leave

@pytest.fixture(scope="function")
def auth_headers():
    def _auth_headers(user):
        return {"X-User-ID": str(user.id)}
    return _auth_headers

@pytest.fixture(scope="function")
def client(db_session, notifier):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture(scope="function")
def future_dates():
    start = date.today() + timedelta(days=10)
    return start, start + timedelta(days=1)
