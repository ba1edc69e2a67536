from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from app.models.court import Court, CourtAvailabilitySlot
from app.schemas.court import CourtCreate, CourtUpdate
from app.utils.availability import validate_day_slots


def get_court(db: Session, court_id: int) -> Optional[Court]:
    return db.query(Court).filter(Court.id == court_id).first()


def get_court_for_update(db: Session, court_id: int) -> Optional[Court]:
    """Loads the court row locking it until the end of the transaction."""
    return (
        db.query(Court)
        .filter(Court.id == court_id)
        .with_for_update(nowait=False)
        .first()
    )


def get_courts(
    db: Session, skip: int = 0, limit: int = 100, active_only: bool = False
) -> List[Court]:
    query = db.query(Court)
    if active_only:
        query = query.filter(Court.is_active == True)
    return query.order_by(Court.id).offset(skip).limit(limit).all()


def get_active_courts(db: Session) -> List[Court]:
    return db.query(Court).filter(Court.is_active == True).order_by(Court.id).all()


def _build_slots(availability: Dict) -> List[CourtAvailabilitySlot]:
    slots = []
    for weekday, day_slots in availability.items():
        # Schemas already validate, but the template can also be written
        # from scripts that bypass them
        validate_day_slots(day_slots)
        for slot in day_slots:
            slots.append(
                CourtAvailabilitySlot(
                    weekday=weekday,
                    start_time=slot.start,
                    end_time=slot.end,
                    slot_type=slot.slot_type,
                )
            )
    return slots


def create_court(db: Session, court: CourtCreate) -> Court:
    court_data = court.model_dump(exclude={"availability"})
    db_court = Court(**court_data)
    db_court.availability_slots = _build_slots(court.availability)
    db.add(db_court)
    db.commit()
    db.refresh(db_court)
    return db_court


def update_court(db: Session, court_id: int, court: CourtUpdate) -> Optional[Court]:
    db_court = get_court(db, court_id)
    if not db_court:
        return None

    update_data = court.model_dump(exclude_unset=True, exclude={"availability"})
    for field, value in update_data.items():
        setattr(db_court, field, value)

    if court.availability is not None:
        db_court.availability_slots = _build_slots(court.availability)

    db.commit()
    db.refresh(db_court)
    return db_court


def delete_court(db: Session, court_id: int) -> bool:
    db_court = get_court(db, court_id)
    if not db_court:
        return False

    db.delete(db_court)
    db.commit()
    return True
