"""
Send the office-closed notice for tomorrow's holidays to every active user.

Meant to be run once a day by an external scheduler, e.g. cron at 18:00 IST:
    0 18 * * * cd /srv/leave-api && python scripts/send_holiday_reminders.py
"""
import sys
import os
import logging

sys.path.append(os.getcwd())

from app.core.config import settings
from app.core.logging import setup_logging
from app.database import SessionLocal, init_db
from app.services.holiday_reminders import send_holiday_reminders
from app.services.notification import NotificationService

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

def main():
    init_db()
    db = SessionLocal()
    try:
        result = send_holiday_reminders(db, NotificationService())
        logger.info("Holiday reminder run complete", extra=result)
    finally:
        db.close()

if __name__ == "__main__":
    main()
