from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.routers.auth_deps import get_current_user, get_holiday_service, require_admin
from app.schemas.holiday import (
    HolidayCreate,
    HolidayDeleteResult,
    HolidayReminderRun,
    HolidayResponse,
    HolidayStats,
    HolidayUpdate,
)
from app.services.holiday_calendar import HolidayService
from app.services.holiday_reminders import send_holiday_reminders
from app.services.notification import NotificationService, get_notifier

router = APIRouter(prefix="/holidays", tags=["holidays"])


# Read access: any authenticated user
@router.get("", response_model=List[HolidayResponse])
def list_holidays(
    year: Optional[int] = None,
    month: Optional[int] = Query(default=None, ge=1, le=12),
    holiday_type: Optional[str] = None,
    is_active: Optional[bool] = None,
    current_user: User = Depends(get_current_user),
    service: HolidayService = Depends(get_holiday_service),
):
    return service.list_holidays(year=year, month=month, holiday_type=holiday_type, is_active=is_active)


@router.get("/stats", response_model=HolidayStats)
def holiday_stats(
    current_user: User = Depends(get_current_user),
    service: HolidayService = Depends(get_holiday_service),
):
    return service.holiday_stats(date.today())


@router.get("/{holiday_id}", response_model=HolidayResponse)
def get_holiday(
    holiday_id: int,
    current_user: User = Depends(get_current_user),
    service: HolidayService = Depends(get_holiday_service),
):
    return service.get_holiday(holiday_id)


# Admin maintenance
@router.post("", response_model=HolidayResponse, status_code=201)
def create_holiday(
    payload: HolidayCreate,
    current_user: User = Depends(require_admin()),
    service: HolidayService = Depends(get_holiday_service),
):
    return service.create_holiday(
        created_by=current_user.id,
        name=payload.name,
        holiday_date=payload.holiday_date,
        holiday_type=payload.holiday_type,
        description=payload.description,
    )


@router.put("/{holiday_id}", response_model=HolidayResponse)
def update_holiday(
    holiday_id: int,
    payload: HolidayUpdate,
    current_user: User = Depends(require_admin()),
    service: HolidayService = Depends(get_holiday_service),
):
    return service.update_holiday(holiday_id, current_user.id, payload.model_dump(exclude_unset=True))


@router.delete("/{holiday_id}", response_model=HolidayDeleteResult)
def delete_holiday(
    holiday_id: int,
    current_user: User = Depends(require_admin()),
    service: HolidayService = Depends(get_holiday_service),
):
    service.delete_holiday(holiday_id)
    return {"message": "Holiday deleted successfully", "deleted_count": 1}


@router.delete("/year/{year}", response_model=HolidayDeleteResult)
def delete_holidays_by_year(
    year: int,
    current_user: User = Depends(require_admin()),
    service: HolidayService = Depends(get_holiday_service),
):
    deleted = service.delete_holidays_by_year(year)
    return {"message": f"Deleted {deleted} holidays for year {year}", "deleted_count": deleted}


@router.post("/reminders/trigger", response_model=HolidayReminderRun)
def trigger_holiday_reminders(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    current_user: User = Depends(require_admin()),
):
    """Send tomorrow's office-closed notice now instead of waiting for cron."""
    return send_holiday_reminders(db, notifier, date.today())
