"""
Holiday Calendar Service

Admin-maintained list of company holidays. Holidays are informational: they
drive the day-before office-closed notice and the dashboard, and never change
leave balances.
"""
import calendar
import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import extract, func

from app.core.exceptions import NotFoundError, ValidationError
from app.models.holiday import Holiday, HolidayType
from app.services.base import BaseService

logger = logging.getLogger(__name__)

UPCOMING_HOLIDAY_LIMIT = 5
_EDITABLE = ("name", "holiday_date", "holiday_type", "description", "is_active")


def _holiday_type(value: Any) -> str:
    if value is None:
        return HolidayType.PUBLIC.value
    try:
        return HolidayType(value).value
    except ValueError:
        allowed = ", ".join(t.value for t in HolidayType)
        raise ValidationError(f"holiday_type must be one of: {allowed}", details={"value": value})


class HolidayService(BaseService):

    def _ensure_unique(self, name: str, holiday_date: date, exclude_id: Optional[int] = None):
        query = self.db.query(Holiday).filter(Holiday.name == name, Holiday.holiday_date == holiday_date)
        if exclude_id is not None:
            query = query.filter(Holiday.id != exclude_id)
        if query.first():
            raise ValidationError("Holiday with this name and date already exists")

    def get_holiday(self, holiday_id: int) -> Holiday:
        holiday = self.db.get(Holiday, holiday_id)
        if not holiday:
            raise NotFoundError(f"Holiday {holiday_id} not found")
        return holiday

    def list_holidays(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        holiday_type: Optional[str] = None,
        is_active: Optional[bool] = None,
        today: Optional[date] = None,
    ) -> List[Holiday]:
        """A month filter without a year applies to the current year."""
        query = self.db.query(Holiday)
        if year is not None:
            query = query.filter(Holiday.year == year)
        if month is not None:
            if not 1 <= month <= 12:
                raise ValidationError("month must be between 1 and 12")
            month_year = year if year is not None else (today or date.today()).year
            first = date(month_year, month, 1)
            last = date(month_year, month, calendar.monthrange(month_year, month)[1])
            query = query.filter(Holiday.holiday_date >= first, Holiday.holiday_date <= last)
        if holiday_type:
            query = query.filter(Holiday.holiday_type == _holiday_type(holiday_type))
        if is_active is not None:
            query = query.filter(Holiday.is_active == is_active)
        return query.order_by(Holiday.holiday_date, Holiday.id).all()

    def create_holiday(
        self,
        created_by: int,
        name: str,
        holiday_date: date,
        holiday_type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Holiday:
        name = (name or "").strip()
        if not name or holiday_date is None:
            raise ValidationError("name and holiday_date are required")
        self._ensure_unique(name, holiday_date)

        holiday = Holiday(
            name=name,
            holiday_date=holiday_date,
            holiday_type=_holiday_type(holiday_type),
            description=description,
            year=holiday_date.year,
            is_active=True,
            created_by=created_by,
        )
        self.db.add(holiday)
        self.commit()
        self.db.refresh(holiday)
        logger.info(f"Holiday '{holiday.name}' on {holiday.holiday_date} created by {created_by}")
        return holiday

    def update_holiday(self, holiday_id: int, updated_by: int, changes: Mapping[str, Any]) -> Holiday:
        """Apply the given fields only; absent keys are left as they are."""
        holiday = self.get_holiday(holiday_id)
        changes = {k: v for k, v in changes.items() if k in _EDITABLE}

        name = holiday.name
        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationError("name cannot be empty")
        holiday_date = changes.get("holiday_date") or holiday.holiday_date
        if name != holiday.name or holiday_date != holiday.holiday_date:
            self._ensure_unique(name, holiday_date, exclude_id=holiday.id)

        holiday.name = name
        holiday.holiday_date = holiday_date
        holiday.year = holiday_date.year
        if changes.get("holiday_type"):
            holiday.holiday_type = _holiday_type(changes["holiday_type"])
        if "description" in changes:
            holiday.description = changes["description"]
        if changes.get("is_active") is not None:
            holiday.is_active = changes["is_active"]
        holiday.updated_by = updated_by

        self.commit()
        self.db.refresh(holiday)
        logger.info(f"Holiday {holiday_id} updated by {updated_by}")
        return holiday

    def delete_holiday(self, holiday_id: int) -> None:
        holiday = self.get_holiday(holiday_id)
        self.db.delete(holiday)
        self.commit()
        logger.info(f"Holiday {holiday_id} deleted")

    def delete_holidays_by_year(self, year: int) -> int:
        deleted = self.db.query(Holiday).filter(Holiday.year == year).delete(synchronize_session=False)
        self.commit()
        logger.info(f"Deleted {deleted} holiday(s) for {year}")
        return deleted

    def holiday_stats(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Active holidays in the current year by type and month, plus the next few."""
        today = today or date.today()
        active_this_year = self.db.query(Holiday).filter(Holiday.year == today.year, Holiday.is_active.is_(True))

        by_type = (
            active_this_year.with_entities(Holiday.holiday_type, func.count(Holiday.id))
            .group_by(Holiday.holiday_type)
            .order_by(Holiday.holiday_type)
            .all()
        )
        month_col = extract("month", Holiday.holiday_date)
        by_month = (
            active_this_year.with_entities(month_col, func.count(Holiday.id))
            .group_by(month_col)
            .order_by(month_col)
            .all()
        )
        upcoming = (
            self.db.query(Holiday)
            .filter(Holiday.holiday_date >= today, Holiday.is_active.is_(True))
            .order_by(Holiday.holiday_date, Holiday.id)
            .limit(UPCOMING_HOLIDAY_LIMIT)
            .all()
        )
        return {
            "year": today.year,
            "total_holidays": active_this_year.count(),
            "by_type": [{"holiday_type": t, "count": c} for t, c in by_type],
            "by_month": [{"month": int(m), "count": c} for m, c in by_month],
            "upcoming_holidays": upcoming,
        }
