from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.exceptions import BookingError
from app.database import get_db
from app.crud import recurring_schedule as crud
from app.schemas.actor import Actor
from app.schemas.booking import Booking
from app.schemas.recurring_schedule import (
    GenerateBookingsRequest,
    RecurringBookingResponse,
    RecurringScheduleCreate,
    RecurringScheduleResponse,
    RejectedOccurrenceResponse,
    ScheduleCancellationResult,
    ScheduleExceptionCreate,
)
from app.services.auth import get_current_actor
from app.services.booking_service import BookingService

router = APIRouter()


def _recurring_response(result) -> RecurringBookingResponse:
    return RecurringBookingResponse(
        schedule=RecurringScheduleResponse.model_validate(result.schedule),
        accepted=[Booking.model_validate(booking) for booking in result.accepted],
        rejected=[
            RejectedOccurrenceResponse(
                date=occurrence.date,
                reason=occurrence.reason,
                detail=occurrence.detail,
            )
            for occurrence in result.rejected
        ],
    )


def _cancellation_response(schedule, cancelled) -> ScheduleCancellationResult:
    return ScheduleCancellationResult(
        schedule=RecurringScheduleResponse.model_validate(schedule),
        cancelled_bookings=[Booking.model_validate(booking) for booking in cancelled],
    )


@router.post("/", response_model=RecurringBookingResponse, status_code=201)
def create_recurring_schedule(
    schedule: RecurringScheduleCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Creates the schedule and books its occurrences. Partial success is normal:
    occurrences that collide or fall outside open hours come back in `rejected`.
    """
    try:
        result = BookingService(db).request_recurring_booking(schedule, actor)
    except BookingError as exc:
        raise exc.to_http_exception()

    return _recurring_response(result)


@router.get("/", response_model=List[RecurringScheduleResponse])
def read_recurring_schedules(
    skip: int = 0,
    limit: int = 100,
    court_id: Optional[int] = None,
    team_id: Optional[int] = None,
    active: Optional[bool] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return crud.get_schedules(
        db=db,
        skip=skip,
        limit=limit,
        court_id=court_id,
        team_id=team_id,
        is_active=active,
    )


@router.get("/{schedule_id}", response_model=RecurringScheduleResponse)
def read_recurring_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    db_schedule = crud.get_schedule(db, schedule_id)
    if db_schedule is None:
        raise HTTPException(status_code=404, detail="Recurring schedule not found")
    return db_schedule


@router.delete("/{schedule_id}", response_model=ScheduleCancellationResult)
def delete_recurring_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Deactivates the schedule and cancels its future bookings; nothing is deleted."""
    try:
        schedule, cancelled = BookingService(db).delete_recurring_schedule(
            schedule_id, actor
        )
    except BookingError as exc:
        raise exc.to_http_exception()

    return _cancellation_response(schedule, cancelled)


@router.post("/{schedule_id}/generate", response_model=RecurringBookingResponse)
def generate_recurring_bookings(
    schedule_id: int,
    request: GenerateBookingsRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    try:
        result = BookingService(db).extend_recurring_booking(
            schedule_id, request.weeks, actor
        )
    except BookingError as exc:
        raise exc.to_http_exception()

    return _recurring_response(result)


@router.post("/{schedule_id}/exceptions", response_model=ScheduleCancellationResult)
def add_schedule_exception(
    schedule_id: int,
    exception: ScheduleExceptionCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    try:
        schedule, cancelled = BookingService(db).add_schedule_exception(
            schedule_id, exception.date, exception.reason, actor
        )
    except BookingError as exc:
        raise exc.to_http_exception()

    return _cancellation_response(schedule, cancelled)


@router.delete(
    "/{schedule_id}/exceptions/{exception_id}",
    response_model=RecurringScheduleResponse,
)
def remove_schedule_exception(
    schedule_id: int,
    exception_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    try:
        return BookingService(db).remove_schedule_exception(
            schedule_id, exception_id, actor
        )
    except BookingError as exc:
        raise exc.to_http_exception()
