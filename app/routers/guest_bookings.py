from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import date

from app.core.exceptions import BookingError
from app.database import get_db
from app.enums.booking import BookingPurpose
from app.schemas.booking import (
    Booking,
    GuestBookingCreate,
    GuestCancelRequest,
    GuestInfo,
)
from app.schemas.court import AvailableCourtsResponse, CourtResponse
from app.services.booking_service import BookingService

router = APIRouter()


@router.post("/", response_model=Booking, status_code=201)
def create_guest_booking(booking: GuestBookingCreate, db: Session = Depends(get_db)):
    """Public rental booking; the returned booking_reference identifies the guest."""
    try:
        return BookingService(db).request_booking(
            court_id=booking.court_id,
            start=booking.start_time,
            end=booking.end_time,
            purpose=BookingPurpose.RENTAL,
            guest_info=GuestInfo(
                name=booking.guest_name,
                email=booking.guest_email,
                phone=booking.guest_phone,
            ),
            notes=booking.notes,
        )
    except BookingError as exc:
        raise exc.to_http_exception()


@router.get("/available-courts/{target_date}", response_model=AvailableCourtsResponse)
def read_available_courts(
    target_date: date,
    purpose: BookingPurpose = BookingPurpose.RENTAL,
    db: Session = Depends(get_db),
):
    """Active courts with open hours for the purpose on that date."""
    courts = BookingService(db).find_available_courts(target_date, purpose)
    return AvailableCourtsResponse(
        date=target_date,
        courts=[CourtResponse.model_validate(court) for court in courts],
    )


@router.get("/{reference}", response_model=Booking)
def read_guest_booking(reference: str, db: Session = Depends(get_db)):
    try:
        return BookingService(db).get_booking_by_reference(reference)
    except BookingError as exc:
        raise exc.to_http_exception()


@router.put("/{reference}/cancel", response_model=Booking)
def cancel_guest_booking(
    reference: str, request: GuestCancelRequest, db: Session = Depends(get_db)
):
    try:
        return BookingService(db).cancel_guest_booking(reference, request.email)
    except BookingError as exc:
        raise exc.to_http_exception()
