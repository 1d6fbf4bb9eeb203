from typing import List, Optional

from fastapi import APIRouter, Depends

from app.models.user import User
from app.routers.auth_deps import get_current_user, get_leave_service
from app.schemas.leave import (
    BalanceSnapshot,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveResubmitRequest,
    ResubmissionResponse,
)
from app.services import leave_lifecycle
from app.services.leave_workflow import LeaveWorkflowService

router = APIRouter(prefix="/leave", tags=["leave"])


@router.post("/requests", response_model=LeaveRequestResponse, status_code=201)
def submit_leave_request(
    payload: LeaveRequestCreate,
    current_user: User = Depends(get_current_user),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    return service.submit_leave_request(
        employee_id=current_user.id,
        leave_type=payload.leave_type,
        leave_duration=payload.leave_duration,
        half_day_slot=payload.half_day_slot,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
    )


@router.get("/requests", response_model=List[LeaveRequestResponse])
def list_my_leave_requests(
    status: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    return service.list_leave_requests(employee_id=current_user.id, status=status)


@router.get("/requests/{request_id}", response_model=LeaveRequestResponse)
def get_my_leave_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    return service.get_leave_request(request_id, employee_id=current_user.id)


@router.post("/requests/{request_id}/cancel", response_model=LeaveRequestResponse)
def cancel_my_leave_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    return service.cancel_leave_request(request_id, current_user.id)


@router.put("/requests/{request_id}/resubmit", response_model=ResubmissionResponse)
def resubmit_my_leave_request(
    request_id: int,
    payload: LeaveResubmitRequest,
    current_user: User = Depends(get_current_user),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    leave = service.resubmit_leave_request(request_id, current_user.id, payload.model_dump())
    return {
        "request": LeaveRequestResponse.model_validate(leave),
        "attempts_left": leave_lifecycle.attempts_left(leave),
    }


@router.get("/balance", response_model=BalanceSnapshot)
def get_my_balance(
    current_user: User = Depends(get_current_user),
    service: LeaveWorkflowService = Depends(get_leave_service),
):
    return service.get_employee_balance_snapshot(current_user.id)
