from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime, time
from typing import List, Optional

from app.enums.booking import BookingPurpose
from app.enums.weekday import Weekday
from app.schemas.booking import Booking


class RecurringScheduleBase(BaseModel):
    court_id: int
    team_id: Optional[int] = None
    purpose: BookingPurpose = BookingPurpose.TRAINING
    days_of_week: List[Weekday]
    start_time_of_day: time  # "HH:MM"
    end_time_of_day: time  # "HH:MM"
    effective_from: date
    effective_until: Optional[date] = None
    notes: Optional[str] = None


class RecurringScheduleCreate(RecurringScheduleBase):
    # Weeks to materialize; capped by RECURRING_HORIZON_WEEKS
    horizon_weeks: Optional[int] = Field(default=None, ge=1)

    @field_validator("days_of_week")
    @classmethod
    def validate_days_of_week(cls, v):
        if not v:
            raise ValueError("days_of_week must contain at least one weekday")
        # Conservar el orden sin duplicados
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def validate_times(self):
        if self.start_time_of_day >= self.end_time_of_day:
            raise ValueError("start_time_of_day must be before end_time_of_day")
        if self.effective_until and self.effective_until < self.effective_from:
            raise ValueError("effective_until cannot be before effective_from")
        return self


class ScheduleExceptionCreate(BaseModel):
    date: date
    reason: Optional[str] = None


class ScheduleExceptionResponse(ScheduleExceptionCreate):
    id: int

    class Config:
        from_attributes = True


class RecurringScheduleInDB(RecurringScheduleBase):
    id: int
    created_by: Optional[int] = None
    horizon_weeks: int
    is_active: bool
    created_at: datetime
    exceptions: List[ScheduleExceptionResponse] = []

    class Config:
        from_attributes = True


class RecurringScheduleResponse(RecurringScheduleInDB):
    pass


class RejectedOccurrenceResponse(BaseModel):
    date: date
    reason: str  # court_unavailable | time_slot_conflict | invalid_window
    detail: str


class RecurringBookingResponse(BaseModel):
    schedule: RecurringScheduleResponse
    accepted: List[Booking]
    rejected: List[RejectedOccurrenceResponse]


class ScheduleCancellationResult(BaseModel):
    """Schedule after an exception or deletion, with the bookings it cancelled."""

    schedule: RecurringScheduleResponse
    cancelled_bookings: List[Booking]


class GenerateBookingsRequest(BaseModel):
    weeks: int = Field(default=4, ge=1)
