from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from datetime import date, datetime, time
from decimal import Decimal

from app.enums.slot_type import SlotType
from app.enums.weekday import Weekday
from app.utils.availability import validate_day_slots


class AvailabilitySlot(BaseModel):
    start: time  # Hora de inicio "HH:MM"
    end: time  # Hora de fin "HH:MM"
    slot_type: Optional[SlotType] = None

    @field_validator("start", "end")
    @classmethod
    def validate_minute_granularity(cls, v):
        if v.second or v.microsecond:
            raise ValueError("Slot times must have minute granularity (HH:MM)")
        return v


def _validate_availability(availability):
    if availability is None:
        return availability
    for weekday, slots in availability.items():
        try:
            validate_day_slots(slots)
        except ValueError as exc:
            raise ValueError(f"{Weekday(weekday).value}: {exc}") from exc
    return availability


class CourtBase(BaseModel):
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    sport_type: Optional[str] = None
    hourly_rate: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True


class CourtCreate(CourtBase):
    availability: Dict[Weekday, List[AvailabilitySlot]] = Field(default_factory=dict)

    @field_validator("availability")
    @classmethod
    def validate_availability(cls, v):
        return _validate_availability(v)


class CourtUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    sport_type: Optional[str] = None
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    # Replaces the whole weekly template when present
    availability: Optional[Dict[Weekday, List[AvailabilitySlot]]] = None

    @field_validator("availability")
    @classmethod
    def validate_availability(cls, v):
        return _validate_availability(v)


class AvailabilitySlotResponse(BaseModel):
    id: int
    weekday: Weekday
    start_time: time
    end_time: time
    slot_type: Optional[SlotType] = None

    class Config:
        from_attributes = True


class CourtInDB(CourtBase):
    id: int
    created_at: datetime
    availability_slots: List[AvailabilitySlotResponse] = []

    class Config:
        from_attributes = True


class CourtResponse(CourtInDB):
    pass


class AvailableCourtsResponse(BaseModel):
    date: date
    courts: List[CourtResponse]
