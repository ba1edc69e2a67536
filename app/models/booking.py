from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Enum,
    Boolean,
    Numeric,
    Index,
    text,
)
from sqlalchemy.orm import relationship
from datetime import datetime

from app.database import Base
from app.enums.booking import BookingPurpose, BookingStatus, PaymentStatus


_ACTIVE_BOOKING = text("status IN ('PENDING', 'CONFIRMED')")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_court_window", "court_id", "start_time", "end_time"),
        # Two active bookings can never share a start on the same court.
        # PostgreSQL additionally gets a full overlap exclusion constraint
        # (see alembic revision 7b1e4c2a9f30).
        Index(
            "uq_active_booking_court_start",
            "court_id",
            "start_time",
            unique=True,
            postgresql_where=_ACTIVE_BOOKING,
            sqlite_where=_ACTIVE_BOOKING,
        ),
        {"extend_existing": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    # No foreign key: a deleted court leaves a dangling reference
    court_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, nullable=True, index=True)
    team_id = Column(Integer, nullable=True)
    recurring_schedule_id = Column(
        Integer, ForeignKey("recurring_schedules.id"), nullable=True
    )
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    purpose = Column(Enum(BookingPurpose), default=BookingPurpose.RENTAL)
    status = Column(Enum(BookingStatus), default=BookingStatus.PENDING)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.UNPAID)
    total_price = Column(Numeric(10, 2), nullable=False, default=0)

    # Guest bookings
    is_guest_booking = Column(Boolean, default=False)
    guest_name = Column(String, nullable=True)
    guest_email = Column(String, nullable=True)
    guest_phone = Column(String, nullable=True)
    booking_reference = Column(String, unique=True, nullable=True, index=True)

    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    recurring_schedule = relationship(
        "app.models.recurring_schedule.RecurringSchedule", back_populates="bookings"
    )

    @property
    def duration_hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600
