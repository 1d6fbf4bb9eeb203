"""
Reset every employee's leave ledger to the policy defaults.

Sets the CL/SL pools, clears the monthly counters, carry-forward and unpaid
totals, and stamps the current month. Leave history rows are kept.
"""
import sys
import os
import logging
from datetime import date, datetime, timezone
from sqlalchemy.orm import Session

# Ensure we can import app modules
sys.path.append(os.getcwd())

from app.core.config import settings
from app.database import SessionLocal, init_db
from app.models.user import User, UserRole
from app.services.leave_ledger import get_or_create_ledger, month_key, snapshot

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

def reset_balances():
    init_db()
    db: Session = SessionLocal()
    current_month = month_key(date.today())
    try:
        employees = db.query(User).filter(User.role == UserRole.EMPLOYEE).all()
        for employee in employees:
            ledger = get_or_create_ledger(db, employee.id)
            ledger.cl_balance = settings.leave.default_cl_balance
            ledger.sl_balance = settings.leave.default_sl_balance
            ledger.current_month = current_month
            ledger.current_month_paid_full = 0
            ledger.current_month_paid_half = 0
            ledger.current_month_unpaid_leaves = 0.0
            ledger.previous_month_balance_full = 0
            ledger.previous_month_balance_half = 0
            ledger.total_unpaid_leaves = 0.0
            ledger.last_monthly_reset = datetime.now(timezone.utc)
        db.commit()
        logger.info(f"Reset {len(employees)} employee ledger(s) for {current_month}")

        if employees:
            sample = get_or_create_ledger(db, employees[0].id)
            logger.info(f"Sample ledger ({employees[0].email}): {snapshot(sample)}")
    except Exception as e:
        db.rollback()
        logger.error(f"Balance reset failed: {e}")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    reset_balances()
