from pydantic import BaseModel, EmailStr
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from app.enums.booking import BookingPurpose, BookingStatus, PaymentStatus
from app.enums.slot_type import SlotType
from app.enums.weekday import Weekday


class GuestInfo(BaseModel):
    name: str
    email: EmailStr
    phone: str


class BookingBase(BaseModel):
    court_id: int
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None


class BookingCreate(BookingBase):
    purpose: BookingPurpose = BookingPurpose.RENTAL
    team_id: Optional[int] = None


class GuestBookingCreate(BookingBase):
    guest_name: str
    guest_email: EmailStr
    guest_phone: str


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus


class GuestCancelRequest(BaseModel):
    email: EmailStr


class BookingInDB(BaseModel):
    id: int
    court_id: int
    user_id: Optional[int] = None
    team_id: Optional[int] = None
    recurring_schedule_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    purpose: BookingPurpose
    status: BookingStatus
    payment_status: PaymentStatus
    total_price: Decimal
    is_guest_booking: bool = False
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    booking_reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class Booking(BookingInDB):
    pass


class CompletedBookingsResponse(BaseModel):
    completed: int


class SlotWindow(BaseModel):
    start: datetime
    end: datetime
    slot_type: Optional[SlotType] = None


class BookedWindow(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    purpose: BookingPurpose

    class Config:
        from_attributes = True


class CourtAvailabilityResponse(BaseModel):
    court_id: int
    date: date
    weekday: Weekday
    is_open: bool
    weekday_slots: List[SlotWindow]
    existing_bookings: List[BookedWindow]
    free_windows: List[SlotWindow]
