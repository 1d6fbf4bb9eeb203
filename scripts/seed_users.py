import sys
import os

sys.path.append(os.getcwd())

from app.database import SessionLocal, init_db
from app.models.user import User, UserRole
from app.services.leave_ledger import get_or_create_ledger

init_db()
db = SessionLocal()

def create_user(email, full_name, role, department=None):
    # Check if user already exists to avoid unique constraint errors
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        print(f"User {email} already exists. Skipping.")
        return existing_user

    user = User(
        email=email,
        full_name=full_name,
        department=department,
        role=role,
        is_active=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    if role == UserRole.EMPLOYEE:
        get_or_create_ledger(db, user.id)
        db.commit()
    print(f"Created {role.value} -> {email} (id={user.id})")
    return user

try:
    create_user("admin@example.com", "HR Admin", UserRole.ADMIN, "HR")
    create_user("employee@example.com", "Asha Patil", UserRole.EMPLOYEE, "Engineering")
    create_user("employee2@example.com", "Rohan Deshmukh", UserRole.EMPLOYEE, "Engineering")
finally:
    db.close()
