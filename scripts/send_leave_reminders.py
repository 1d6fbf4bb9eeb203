"""
Send day-before reminders for approved leave.

Meant to be run once a day by an external scheduler, e.g. cron:
    0 9 * * * cd /srv/leave-api && python scripts/send_leave_reminders.py
"""
import sys
import os
import logging

sys.path.append(os.getcwd())

from app.core.config import settings
from app.core.logging import setup_logging
from app.database import SessionLocal
from app.services.leave_reminders import send_leave_reminders
from app.services.notification import NotificationService

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

def main():
    db = SessionLocal()
    try:
        result = send_leave_reminders(db, NotificationService())
        logger.info("Leave reminder run complete", extra=result)
    finally:
        db.close()

if __name__ == "__main__":
    main()
