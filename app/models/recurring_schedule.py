from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    ForeignKey,
    Enum,
    Boolean,
    Time,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime

from app.database import Base
from app.enums.booking import BookingPurpose


class RecurringSchedule(Base):
    __tablename__ = "recurring_schedules"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    court_id = Column(Integer, nullable=False, index=True)
    team_id = Column(Integer, nullable=True)
    created_by = Column(Integer, nullable=True)
    purpose = Column(Enum(BookingPurpose), default=BookingPurpose.TRAINING)
    days_of_week = Column(JSON, nullable=False)  # ["monday", "thursday"]
    start_time_of_day = Column(Time, nullable=False)
    end_time_of_day = Column(Time, nullable=False)
    effective_from = Column(Date, nullable=False)
    effective_until = Column(Date, nullable=True)
    horizon_weeks = Column(Integer, nullable=False)
    notes = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    exceptions = relationship(
        "RecurringScheduleException",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="RecurringScheduleException.date",
    )
    bookings = relationship(
        "app.models.booking.Booking", back_populates="recurring_schedule"
    )


class RecurringScheduleException(Base):
    __tablename__ = "recurring_schedule_exceptions"
    __table_args__ = (
        UniqueConstraint("schedule_id", "date", name="uq_schedule_exception_date"),
        {"extend_existing": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    schedule_id = Column(
        Integer, ForeignKey("recurring_schedules.id"), nullable=False, index=True
    )
    date = Column(Date, nullable=False)
    reason = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    schedule = relationship("RecurringSchedule", back_populates="exceptions")
