from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Enum,
    Boolean,
    Numeric,
    Time,
)
from sqlalchemy.orm import relationship
from app.database import Base
from app.enums.weekday import Weekday
from app.enums.slot_type import SlotType
from datetime import datetime


class Court(Base):
    __tablename__ = "courts"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    location = Column(String, nullable=True)
    sport_type = Column(String, nullable=True)  # e.g., Basketball, Football
    hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    # Bookings are intentionally not related here: deleting a court must
    # leave its historical bookings untouched.
    availability_slots = relationship(
        "CourtAvailabilitySlot",
        back_populates="court",
        cascade="all, delete-orphan",
        order_by="CourtAvailabilitySlot.start_time",
    )


class CourtAvailabilitySlot(Base):
    __tablename__ = "court_availability_slots"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    court_id = Column(Integer, ForeignKey("courts.id"), nullable=False, index=True)
    weekday = Column(Enum(Weekday), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    slot_type = Column(Enum(SlotType), nullable=True)  # None = any purpose

    court = relationship("Court", back_populates="availability_slots")
