from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.exceptions import BookingError
from app.database import get_db
from app.crud import booking as crud
from app.enums.booking import BookingStatus
from app.schemas.actor import Actor
from app.schemas.booking import (
    Booking,
    BookingCreate,
    BookingStatusUpdate,
    CompletedBookingsResponse,
    PaymentStatusUpdate,
)
from app.services.auth import get_current_actor
from app.services.booking_service import BookingService

router = APIRouter()


@router.post("/", response_model=Booking, status_code=201)
def create_booking(
    booking: BookingCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    try:
        return BookingService(db).request_booking(
            court_id=booking.court_id,
            start=booking.start_time,
            end=booking.end_time,
            purpose=booking.purpose,
            team_id=booking.team_id,
            actor=actor,
            notes=booking.notes,
        )
    except BookingError as exc:
        raise exc.to_http_exception()


@router.get("/", response_model=List[Booking])
def read_bookings(
    skip: int = 0,
    limit: int = 100,
    court_id: Optional[int] = None,
    team_id: Optional[int] = None,
    status: Optional[BookingStatus] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    # Sin capacidad de gestión solo se ven las reservas propias
    user_id = None if actor.can_manage else actor.user_id
    bookings = crud.get_bookings(
        db=db,
        skip=skip,
        limit=limit,
        user_id=user_id,
        court_id=court_id,
        team_id=team_id,
        status=status,
    )
    return bookings


@router.post("/complete-elapsed", response_model=CompletedBookingsResponse)
def complete_elapsed_bookings(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    try:
        completed = BookingService(db).complete_elapsed_bookings(actor)
    except BookingError as exc:
        raise exc.to_http_exception()
    return {"completed": completed}


@router.get("/{booking_id}", response_model=Booking)
def read_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    db_booking = crud.get_booking(db=db, booking_id=booking_id)
    if db_booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    if not actor.can_manage and db_booking.user_id != actor.user_id:
        raise HTTPException(status_code=403, detail="Not authorized to view this booking")
    return db_booking


@router.put("/{booking_id}/status", response_model=Booking)
def update_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    try:
        return BookingService(db).transition_status(booking_id, update.status, actor)
    except BookingError as exc:
        raise exc.to_http_exception()


@router.put("/{booking_id}/payment", response_model=Booking)
def update_payment_status(
    booking_id: int,
    update: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    if not actor.can_manage:
        raise HTTPException(status_code=403, detail="Only managers can record payments")
    try:
        return BookingService(db).set_payment_status(booking_id, update.payment_status)
    except BookingError as exc:
        raise exc.to_http_exception()


@router.put("/{booking_id}/cancel", response_model=Booking)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    try:
        return BookingService(db).cancel(booking_id, actor)
    except BookingError as exc:
        raise exc.to_http_exception()
