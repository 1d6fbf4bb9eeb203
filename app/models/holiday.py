from sqlalchemy import Column, Integer, String, Date, Boolean, ForeignKey, DateTime, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum

class HolidayType(str, enum.Enum):
    PUBLIC = "Public Holiday"
    OPTIONAL = "Optional Holiday"
    RESTRICTED = "Restricted Holiday"
    FESTIVAL = "Festival"
    NATIONAL = "National Holiday"

class Holiday(Base):
    """Company holiday calendar entry. A name may appear once per date."""
    __tablename__ = "holidays"
    __table_args__ = (
        UniqueConstraint("name", "holiday_date", name="uq_holiday_name_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    holiday_date = Column(Date, nullable=False, index=True)
    holiday_type = Column(String, nullable=False, default=HolidayType.PUBLIC.value)
    description = Column(Text, nullable=True)
    # Denormalized from holiday_date for per-year listing and bulk delete
    year = Column(Integer, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship("User", foreign_keys=[created_by])

    def __repr__(self):
        return f"<Holiday {self.name} {self.holiday_date}>"
