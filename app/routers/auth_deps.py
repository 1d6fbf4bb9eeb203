"""
Caller identity and role dependencies.

Authentication itself happens upstream: the gateway verifies the session and
forwards the authenticated user's id in the X-User-ID header.
"""
import logging
from typing import Callable, List, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, ForbiddenError
from app.database import get_db
from app.models.user import User, UserRole
from app.services.holiday_calendar import HolidayService
from app.services.leave_workflow import LeaveWorkflowService
from app.services.notification import NotificationService, get_notifier

logger = logging.getLogger(__name__)


def get_current_user(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-ID"),
    db: Session = Depends(get_db),
) -> User:
    if not x_user_id:
        raise AuthenticationError("Missing X-User-ID header")
    try:
        user_id = int(x_user_id)
    except ValueError:
        logger.warning(f"Authentication failed: malformed user id {x_user_id!r}")
        raise AuthenticationError("Malformed X-User-ID header")

    user = db.get(User, user_id)
    if user is None:
        logger.warning(f"Authentication failed: user {user_id} not found")
        raise AuthenticationError("User not found")
    if not user.is_active:
        logger.warning(f"Authentication failed: user {user_id} is inactive")
        raise ForbiddenError("User is inactive")
    return user


def require_role(allowed_roles: List[UserRole]) -> Callable:
    """
    Dependency factory that checks if the user has one of the allowed roles.

    Usage:
        @router.get("/admin-only")
        def admin_endpoint(user: User = Depends(require_role([UserRole.ADMIN]))):
            ...
    """
    def role_checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            raise ForbiddenError(f"Access denied. Required roles: {[r.value for r in allowed_roles]}")
        return current_user
    return role_checker


def require_admin():
    """Shorthand for requiring the admin role."""
    return require_role([UserRole.ADMIN])


def get_leave_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> LeaveWorkflowService:
    return LeaveWorkflowService(db, notifier)


def get_holiday_service(db: Session = Depends(get_db)) -> HolidayService:
    return HolidayService(db)
