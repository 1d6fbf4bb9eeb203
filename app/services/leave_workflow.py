"""
Leave Workflow Service

Entry point for every leave operation exposed to request handlers and to
external producers such as the inbound-mail parser.

Architecture:
- Router -> LeaveWorkflowService (this module) -> lifecycle / ledger / history
- Each operation is one load-mutate-commit; the request row and the ledger
  are written in the same transaction
- Notifications are sent only after a successful commit and never undo it
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.models.leave_request import LeaveRequest, LeaveStatus
from app.models.user import User
from app.services import email_templates, leave_ledger, leave_lifecycle
from app.services.base import BaseService
from app.services.notification import NotificationService
from app.services.rejection_history import append_rejection, list_rejection_history

logger = logging.getLogger(__name__)


@dataclass
class ApprovalResult:
    record: LeaveRequest
    balance_snapshot: Dict[str, Any]
    notification_sent: bool


@dataclass
class RejectionResult:
    record: LeaveRequest
    notification_sent: bool


class LeaveWorkflowService(BaseService):

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        super().__init__(db)
        self.notifier = notifier or NotificationService()

    # ------------------------------------------------------------------ lookups

    def _get_user(self, user_id: int, label: str = "Employee") -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError(f"{label} {user_id} not found")
        return user

    def _get_reviewer(self, reviewer_id: int) -> User:
        reviewer = self._get_user(reviewer_id, label="Reviewer")
        if not reviewer.is_admin or not reviewer.is_active:
            raise ForbiddenError("Only active admins can review leave requests")
        return reviewer

    def get_leave_request(self, request_id: int, employee_id: Optional[int] = None) -> LeaveRequest:
        """Fetch a request; when employee_id is given, only its owner may read it."""
        leave = self.db.get(LeaveRequest, request_id)
        if not leave:
            raise NotFoundError(f"Leave request {request_id} not found")
        if employee_id is not None and leave.employee_id != employee_id:
            raise ForbiddenError("You can only view your own leave requests")
        return leave

    def list_leave_requests(
        self,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[LeaveRequest]:
        query = self.db.query(LeaveRequest)
        if employee_id is not None:
            query = query.filter(LeaveRequest.employee_id == employee_id)
        if status:
            if status not in {s.value for s in LeaveStatus}:
                raise ValidationError(f"Unknown status filter: {status}")
            query = query.filter(LeaveRequest.status == status)
        return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()

    def get_rejection_history(self, request_id: int):
        self.get_leave_request(request_id)
        return list_rejection_history(self.db, request_id)

    # -------------------------------------------------------------- employee side

    def submit_leave_request(
        self,
        employee_id: int,
        leave_type: Any,
        leave_duration: Any,
        half_day_slot: Any,
        start_date: Any,
        end_date: Any,
        reason: Optional[str],
    ) -> LeaveRequest:
        employee = self._get_user(employee_id)
        if not employee.is_active:
            raise ForbiddenError("Inactive employees cannot submit leave requests")

        details = leave_lifecycle.validate_leave_details(
            leave_type, leave_duration, half_day_slot, start_date, end_date, reason
        )
        leave = leave_lifecycle.new_request(employee_id, details)
        self.db.add(leave)
        self.commit()
        self.db.refresh(leave)

        logger.info(
            f"Leave request {leave.id} submitted by employee {employee_id}",
            extra={"leave_type": leave.leave_type, "duration": leave.leave_duration},
        )
        return leave

    def cancel_leave_request(self, request_id: int, employee_id: int) -> LeaveRequest:
        leave = self.get_leave_request(request_id)
        leave_lifecycle.cancel(leave, employee_id)
        self.commit()
        self.db.refresh(leave)
        logger.info(f"Leave request {request_id} cancelled by employee {employee_id}")
        return leave

    def resubmit_leave_request(
        self,
        request_id: int,
        employee_id: int,
        updated_fields: Mapping[str, Any],
    ) -> LeaveRequest:
        leave = self.get_leave_request(request_id)
        leave_lifecycle.resubmit(leave, employee_id, updated_fields)
        self.commit()
        self.db.refresh(leave)
        logger.info(
            f"Leave request {request_id} resubmitted (attempt {leave.submission_count})",
            extra={"attempts_left": leave_lifecycle.attempts_left(leave)},
        )
        return leave

    def get_employee_balance_snapshot(self, employee_id: int, on_date: Optional[date] = None) -> Dict[str, Any]:
        on_date = on_date or date.today()
        ledger = leave_ledger.get_or_create_ledger(self.db, employee_id, on_date)
        is_new = ledger in self.db.new
        if leave_ledger.apply_monthly_reset(ledger, on_date) or is_new:
            self.commit()
        return leave_ledger.snapshot(ledger)

    # ----------------------------------------------------------------- admin side

    def approve_leave_request(
        self,
        request_id: int,
        approver_id: int,
        admin_remarks: Optional[str] = None,
        on_date: Optional[date] = None,
    ) -> ApprovalResult:
        leave = self.get_leave_request(request_id)
        self._get_reviewer(approver_id)
        leave_lifecycle.require_reviewable(leave, approver_id, "approve")

        on_date = on_date or date.today()
        try:
            ledger = leave_ledger.get_or_create_ledger(self.db, leave.employee_id, on_date)
            outcome = leave_ledger.deduct(self.db, ledger, leave, on_date)
            leave_lifecycle.mark_approved(leave, approver_id, outcome, admin_remarks)
        except Exception:
            self.db.rollback()
            raise
        self.commit()
        self.db.refresh(leave)

        balance = leave_ledger.snapshot(ledger)
        logger.info(
            f"Leave request {request_id} approved by {approver_id}",
            extra={
                "is_paid": outcome.is_paid,
                "deducted_from": outcome.deducted_from.value,
                "quota_slot": outcome.quota_slot,
            },
        )

        sent = self._dispatch(email_templates.LEAVE_APPROVED, leave, {
            "is_paid": leave.is_paid,
            "admin_remarks": leave.admin_remarks,
        })
        return ApprovalResult(record=leave, balance_snapshot=balance, notification_sent=sent)

    def reject_leave_request(
        self,
        request_id: int,
        approver_id: int,
        reason: Optional[str],
        admin_remarks: Optional[str] = None,
    ) -> RejectionResult:
        leave = self.get_leave_request(request_id)
        self._get_reviewer(approver_id)
        leave_lifecycle.require_reviewable(leave, approver_id, "reject")
        if not reason or not reason.strip():
            raise ValidationError("A rejection reason is required", details={"missing": ["reason"]})
        reason = reason.strip()

        # History first: the snapshot must capture the request before it changes
        append_rejection(self.db, leave, approver_id, reason, admin_remarks)
        leave_lifecycle.mark_rejected(leave, approver_id, reason, admin_remarks)
        self.commit()
        self.db.refresh(leave)
        logger.info(f"Leave request {request_id} rejected by {approver_id} (attempt {leave.submission_count})")

        sent = self._dispatch(email_templates.LEAVE_REJECTED, leave, {
            "rejection_reason": leave.rejection_reason,
            "attempts_left": leave_lifecycle.attempts_left(leave),
        })
        return RejectionResult(record=leave, notification_sent=sent)

    # --------------------------------------------------------------- notification

    def _dispatch(self, template_kind: str, leave: LeaveRequest, extra: Dict[str, Any]) -> bool:
        """Best-effort notification; state is already committed when this runs."""
        try:
            employee = leave.employee
            context = {
                "employee_name": employee.display_name if employee else None,
                "leave_type": leave.leave_type,
                "leave_duration": leave.leave_duration,
                "half_day_slot": leave.half_day_slot,
                "start_date": leave.start_date,
                "end_date": leave.end_date,
                "reason": leave.reason,
                **extra,
            }
            sent = self.notifier.notify(template_kind, employee.email if employee else None, context)
        except Exception as e:
            logger.warning(f"Notification failed for leave request {leave.id}: {e}", exc_info=True)
            return False
        if not sent:
            logger.warning(f"Leave request {leave.id}: '{template_kind}' notification was not delivered")
        return bool(sent)
