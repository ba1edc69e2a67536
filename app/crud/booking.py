from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional, Sequence

from app.enums.booking import BLOCKING_STATUSES, BookingStatus
from app.models.booking import Booking


def get_booking(db: Session, booking_id: int) -> Optional[Booking]:
    return db.query(Booking).filter(Booking.id == booking_id).first()


def get_booking_by_reference(db: Session, reference: str) -> Optional[Booking]:
    return db.query(Booking).filter(Booking.booking_reference == reference).first()


def get_bookings(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    user_id: Optional[int] = None,
    court_id: Optional[int] = None,
    team_id: Optional[int] = None,
    status: Optional[BookingStatus] = None,
) -> List[Booking]:
    query = db.query(Booking)

    if user_id:
        query = query.filter(Booking.user_id == user_id)
    if court_id:
        query = query.filter(Booking.court_id == court_id)
    if team_id:
        query = query.filter(Booking.team_id == team_id)
    if status:
        query = query.filter(Booking.status == status)

    return query.order_by(Booking.start_time).offset(skip).limit(limit).all()


def get_court_bookings_between(
    db: Session,
    court_id: int,
    start: datetime,
    end: datetime,
    statuses: Sequence[BookingStatus] = BLOCKING_STATUSES,
) -> List[Booking]:
    """Bookings of a court whose window intersects [start, end)."""
    return (
        db.query(Booking)
        .filter(Booking.court_id == court_id)
        .filter(Booking.status.in_(list(statuses)))
        .filter(Booking.start_time < end)
        .filter(Booking.end_time > start)
        .order_by(Booking.start_time)
        .all()
    )


def get_elapsed_active_bookings(db: Session, now: datetime) -> List[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.status.in_(list(BLOCKING_STATUSES)))
        .filter(Booking.end_time < now)
        .all()
    )


def get_schedule_bookings_between(
    db: Session, schedule_id: int, start: datetime, end: datetime
) -> List[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.recurring_schedule_id == schedule_id)
        .filter(Booking.status.in_(list(BLOCKING_STATUSES)))
        .filter(Booking.start_time >= start)
        .filter(Booking.start_time < end)
        .all()
    )


def create_booking(db: Session, db_booking: Booking) -> Booking:
    db.add(db_booking)
    db.commit()
    db.refresh(db_booking)
    return db_booking


def save_booking(db: Session, db_booking: Booking) -> Booking:
    db.commit()
    db.refresh(db_booking)
    return db_booking


def get_future_schedule_bookings(
    db: Session, schedule_id: int, now: datetime
) -> List[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.recurring_schedule_id == schedule_id)
        .filter(Booking.status.in_(list(BLOCKING_STATUSES)))
        .filter(Booking.start_time >= now)
        .order_by(Booking.start_time)
        .all()
    )


def get_latest_schedule_booking(db: Session, schedule_id: int) -> Optional[Booking]:
    """Last booking generated by a schedule, whatever its status."""
    return (
        db.query(Booking)
        .filter(Booking.recurring_schedule_id == schedule_id)
        .order_by(Booking.start_time.desc())
        .first()
    )
