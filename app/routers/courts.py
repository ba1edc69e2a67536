from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import List

from app.core.exceptions import BookingError
from app.database import get_db
from app.crud import court as crud
from app.schemas.actor import Actor
from app.schemas.booking import BookedWindow, CourtAvailabilityResponse, SlotWindow
from app.schemas.court import CourtResponse, CourtCreate, CourtUpdate
from app.services.auth import get_current_actor
from app.services.booking_service import BookingService

router = APIRouter()


def _require_manager(actor: Actor, action: str):
    if not actor.can_manage:
        raise HTTPException(status_code=403, detail=f"Only managers can {action}")


@router.post("/", response_model=CourtResponse)
def create_court(
    court: CourtCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    _require_manager(actor, "create courts")
    return crud.create_court(db=db, court=court)


@router.get("/", response_model=List[CourtResponse])
def read_courts(
    skip: int = 0,
    limit: int = 100,
    active_only: bool = True,
    db: Session = Depends(get_db),
):
    courts = crud.get_courts(db, skip=skip, limit=limit, active_only=active_only)
    return courts


@router.get("/{court_id}", response_model=CourtResponse)
def read_court(court_id: int, db: Session = Depends(get_db)):
    db_court = crud.get_court(db, court_id=court_id)
    if db_court is None:
        raise HTTPException(status_code=404, detail="Court not found")
    return db_court


@router.get("/{court_id}/availability", response_model=CourtAvailabilityResponse)
def read_court_availability(
    court_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Open slots, active bookings and free windows of a court for one date."""
    try:
        availability = BookingService(db).query_availability(court_id, target_date)
    except BookingError as exc:
        raise exc.to_http_exception()

    return CourtAvailabilityResponse(
        court_id=availability.court_id,
        date=availability.date,
        weekday=availability.weekday,
        is_open=availability.is_open,
        weekday_slots=[
            SlotWindow(
                start=datetime.combine(target_date, slot.start),
                end=datetime.combine(target_date, slot.end),
                slot_type=slot.slot_type,
            )
            for slot in availability.weekday_slots
        ],
        existing_bookings=[
            BookedWindow.model_validate(booking)
            for booking in availability.existing_bookings
        ],
        free_windows=[
            SlotWindow(start=window.start, end=window.end, slot_type=window.slot_type)
            for window in availability.free_windows
        ],
    )


@router.put("/{court_id}", response_model=CourtResponse)
def update_court(
    court_id: int,
    court: CourtUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    _require_manager(actor, "edit courts")
    db_court = crud.update_court(db=db, court_id=court_id, court=court)
    if db_court is None:
        raise HTTPException(status_code=404, detail="Court not found")
    return db_court


@router.delete("/{court_id}")
def delete_court(
    court_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    _require_manager(actor, "delete courts")
    # Historical bookings keep their court_id
    success = crud.delete_court(db=db, court_id=court_id)
    if not success:
        raise HTTPException(status_code=404, detail="Court not found")
    return {"message": "Court deleted successfully"}
