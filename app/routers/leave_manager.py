from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.exceptions import DeliveryError
from app.database import get_db
from app.models.user import User
from app.routers.auth_deps import get_leave_service, require_admin
from app.schemas.leave import (
    ApprovalResponse,
    BalanceSnapshot,
    CalendarLeave,
    CalendarMonth,
    FeedbackRequest,
    FeedbackResponse,
    LeaveApproveRequest,
    LeaveRejectRequest,
    LeaveReminderRun,
    LeaveRequestResponse,
    RejectionHistoryResponse,
    RejectionResponse,
    SummaryStats,
)
from app.services import email_templates, leave_reports
from app.services.leave_reminders import send_leave_reminders
from app.services.leave_workflow import LeaveWorkflowService
from app.services.notification import NotificationService, get_notifier

router = APIRouter(prefix="/admin/leave", tags=["leave-manager"])


@router.get("/requests", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    status: Optional[str] = None,
    employee_id: Optional[int] = None,
    current_user: User = Depends(require_admin()),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    return service.list_leave_requests(employee_id=employee_id, status=status)


@router.get("/requests/{request_id}", response_model=LeaveRequestResponse)
def get_leave_request(
    request_id: int,
    current_user: User = Depends(require_admin()),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    return service.get_leave_request(request_id)


@router.post("/requests/{request_id}/approve", response_model=ApprovalResponse)
def approve_leave(
    request_id: int,
    payload: Optional[LeaveApproveRequest] = None,
    current_user: User = Depends(require_admin()),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    remarks = payload.admin_remarks if payload else None
    result = service.approve_leave_request(request_id, current_user.id, admin_remarks=remarks)
    return {
        "request": LeaveRequestResponse.model_validate(result.record),
        "balance": result.balance_snapshot,
        "notification_sent": result.notification_sent,
    }


@router.post("/requests/{request_id}/reject", response_model=RejectionResponse)
def reject_leave(
    request_id: int,
    payload: LeaveRejectRequest,
    current_user: User = Depends(require_admin()),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    result = service.reject_leave_request(
        request_id, current_user.id, payload.reason, admin_remarks=payload.admin_remarks
    )
    return {
        "request": LeaveRequestResponse.model_validate(result.record),
        "notification_sent": result.notification_sent,
    }


@router.get("/requests/{request_id}/rejection-history", response_model=List[RejectionHistoryResponse])
def rejection_history(
    request_id: int,
    current_user: User = Depends(require_admin()),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    return service.get_rejection_history(request_id)


@router.get("/employees/{employee_id}/balance", response_model=BalanceSnapshot)
def employee_balance(
    employee_id: int,
    current_user: User = Depends(require_admin()),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    return service.get_employee_balance_snapshot(employee_id)


# Dashboard
@router.get("/summary", response_model=SummaryStats)
def summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
):
    return leave_reports.summary_stats(db)


@router.get("/on-leave-today", response_model=List[CalendarLeave])
def on_leave_today(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
):
    return leave_reports.employees_on_leave(db, date.today())


@router.get("/upcoming", response_model=List[CalendarLeave])
def upcoming(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
):
    return leave_reports.upcoming_leaves(db, date.today())


@router.get("/calendar", response_model=CalendarMonth)
def leave_calendar(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
):
    return {"year": year, "month": month, "leaves": leave_reports.calendar_month(db, year, month)}


# Outbound mail
@router.post("/reminders/trigger", response_model=LeaveReminderRun)
def trigger_leave_reminders(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    current_user: User = Depends(require_admin()),
):
    """Run the day-before leave reminder job now instead of waiting for cron."""
    return send_leave_reminders(db, notifier, date.today())


@router.post("/feedback", response_model=FeedbackResponse)
def send_feedback(
    payload: FeedbackRequest,
    notifier: NotificationService = Depends(get_notifier),
    current_user: User = Depends(require_admin()),
):
    sent = notifier.notify(email_templates.ADMIN_FEEDBACK, payload.to_email, {
        "subject": payload.subject,
        "message": payload.message,
    })
    if not sent:
        raise DeliveryError(f"Feedback email to {payload.to_email} could not be delivered")
    return {"message": "Feedback email sent", "sent": True}
