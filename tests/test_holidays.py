import pytest
from datetime import date

from app.core.exceptions import NotFoundError, ValidationError
from app.models.holiday import Holiday
from app.services import email_templates
from app.services.holiday_calendar import HolidayService
from app.services.holiday_reminders import send_holiday_reminders

TODAY = date(2024, 8, 14)


@pytest.fixture
def holidays(db_session, admin_user):
    return HolidayService(db_session)


@pytest.fixture
def calendar(holidays, admin_user):
    return {
        "republic": holidays.create_holiday(admin_user.id, "Republic Day", date(2024, 1, 26), "National Holiday"),
        "independence": holidays.create_holiday(admin_user.id, "Independence Day", date(2024, 8, 15), "National Holiday"),
        "raksha": holidays.create_holiday(admin_user.id, "Raksha Bandhan", date(2024, 8, 19), "Festival"),
        "next_year": holidays.create_holiday(admin_user.id, "Republic Day", date(2025, 1, 26), "National Holiday"),
    }


def test_create_holiday_defaults(holidays, admin_user):
    holiday = holidays.create_holiday(admin_user.id, "  Diwali ", date(2024, 11, 1))

    assert holiday.name == "Diwali"
    assert holiday.holiday_type == "Public Holiday"
    assert holiday.year == 2024
    assert holiday.is_active is True
    assert holiday.created_by == admin_user.id


def test_create_duplicate_holiday(holidays, admin_user):
    holidays.create_holiday(admin_user.id, "Diwali", date(2024, 11, 1))
    with pytest.raises(ValidationError):
        holidays.create_holiday(admin_user.id, "Diwali", date(2024, 11, 1))


def test_create_holiday_rejects_unknown_type(holidays, admin_user):
    with pytest.raises(ValidationError):
        holidays.create_holiday(admin_user.id, "Team Offsite", date(2024, 11, 1), "Company Picnic")


def test_list_filters(holidays, calendar):
    assert [h.id for h in holidays.list_holidays(year=2024)] == [
        calendar["republic"].id, calendar["independence"].id, calendar["raksha"].id,
    ]
    assert [h.name for h in holidays.list_holidays(year=2024, month=8, holiday_type="Festival")] == ["Raksha Bandhan"]
    assert [h.id for h in holidays.list_holidays(month=1, today=date(2025, 3, 1))] == [calendar["next_year"].id]


def test_update_moves_year_and_checks_duplicates(holidays, calendar, admin_user):
    updated = holidays.update_holiday(calendar["raksha"].id, admin_user.id, {
        "holiday_date": date(2025, 8, 9),
        "description": "Moved",
    })
    assert updated.year == 2025
    assert updated.description == "Moved"
    assert updated.holiday_type == "Festival"
    assert updated.updated_by == admin_user.id

    with pytest.raises(ValidationError):
        holidays.update_holiday(calendar["next_year"].id, admin_user.id, {"holiday_date": date(2024, 1, 26)})


def test_delete_and_delete_by_year(holidays, calendar, db_session):
    holidays.delete_holiday(calendar["raksha"].id)
    with pytest.raises(NotFoundError):
        holidays.get_holiday(calendar["raksha"].id)

    assert holidays.delete_holidays_by_year(2024) == 2
    assert [h.year for h in db_session.query(Holiday).all()] == [2025]


def test_holiday_stats(holidays, calendar, admin_user):
    holidays.update_holiday(calendar["republic"].id, admin_user.id, {"is_active": False})

    stats = holidays.holiday_stats(TODAY)

    assert stats["year"] == 2024
    assert stats["total_holidays"] == 2
    assert stats["by_type"] == [
        {"holiday_type": "Festival", "count": 1},
        {"holiday_type": "National Holiday", "count": 1},
    ]
    assert stats["by_month"] == [{"month": 8, "count": 2}]
    assert [h.name for h in stats["upcoming_holidays"]] == ["Independence Day", "Raksha Bandhan", "Republic Day"]


def test_holiday_reminder_goes_to_every_active_user(db_session, calendar, employee, admin_user, make_user, notifier):
    make_user(is_active=False)

    result = send_holiday_reminders(db_session, notifier, today=TODAY)

    assert result == {"found": 1, "recipients": 2, "sent": 2, "failed": 0}
    assert {call[1] for call in notifier.calls} == {"employee@example.com", "admin@example.com"}
    kind, _, context = notifier.calls[0]
    assert kind == email_templates.HOLIDAY_REMINDER
    assert context["holiday_names"] == "Independence Day"
    assert context["holiday_date"] == date(2024, 8, 15)


def test_holiday_reminder_skips_inactive_holidays(db_session, holidays, calendar, admin_user, notifier):
    holidays.update_holiday(calendar["independence"].id, admin_user.id, {"is_active": False})

    result = send_holiday_reminders(db_session, notifier, today=TODAY)

    assert result["found"] == 0
    assert notifier.calls == []


def test_holiday_reminder_counts_failures(db_session, calendar, employee, fake_notifier):
    result = send_holiday_reminders(db_session, fake_notifier(result=False), today=TODAY)
    assert result["sent"] == 0
    assert result["failed"] == result["recipients"]


# --- HTTP ---

def test_admin_manages_holidays_over_http(client, admin_user, employee, auth_headers):
    admin = auth_headers(admin_user)
    created = client.post("/api/holidays", headers=admin, json={
        "name": "Gandhi Jayanti",
        "holiday_date": "2024-10-02",
        "holiday_type": "National Holiday",
    })
    assert created.status_code == 201
    holiday_id = created.json()["id"]

    duplicate = client.post("/api/holidays", headers=admin, json={"name": "Gandhi Jayanti", "holiday_date": "2024-10-02"})
    assert duplicate.status_code == 400

    listed = client.get("/api/holidays", params={"year": 2024}, headers=auth_headers(employee))
    assert [h["name"] for h in listed.json()] == ["Gandhi Jayanti"]

    updated = client.put(f"/api/holidays/{holiday_id}", headers=admin, json={"description": "Bank holiday"})
    assert updated.json()["description"] == "Bank holiday"
    assert updated.json()["holiday_type"] == "National Holiday"

    assert client.delete("/api/holidays/year/2024", headers=admin).json()["deleted_count"] == 1
    assert client.get(f"/api/holidays/{holiday_id}", headers=admin).status_code == 404


def test_employee_cannot_modify_holidays(client, employee, auth_headers):
    response = client.post("/api/holidays", headers=auth_headers(employee), json={
        "name": "Diwali", "holiday_date": "2024-11-01",
    })
    assert response.status_code == 403


def test_holiday_stats_over_http(client, employee, auth_headers):
    response = client.get("/api/holidays/stats", headers=auth_headers(employee))
    assert response.status_code == 200
    assert response.json()["total_holidays"] == 0


def test_trigger_holiday_reminders_requires_admin(client, employee, admin_user, auth_headers):
    assert client.post("/api/holidays/reminders/trigger", headers=auth_headers(employee)).status_code == 403

    response = client.post("/api/holidays/reminders/trigger", headers=auth_headers(admin_user))
    assert response.status_code == 200
    assert response.json() == {"found": 0, "recipients": 0, "sent": 0, "failed": 0}
