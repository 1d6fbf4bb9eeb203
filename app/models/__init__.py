# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, leave_balance, leave_request, rejection_history, holiday

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .leave_balance import EmployeeLeaveLedger, LeaveHistoryEntry
from .leave_request import LeaveRequest, LeaveStatus, LeaveType, LeaveDuration, HalfDaySlot, DeductionSource
from .rejection_history import RejectionHistoryEntry
from .holiday import Holiday, HolidayType

__all__ = [
    "User",
    "UserRole",
    "EmployeeLeaveLedger",
    "LeaveHistoryEntry",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "LeaveDuration",
    "HalfDaySlot",
    "DeductionSource",
    "RejectionHistoryEntry",
    "Holiday",
    "HolidayType",
]
