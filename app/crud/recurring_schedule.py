from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from app.models.recurring_schedule import (
    RecurringSchedule,
    RecurringScheduleException,
)
from app.schemas.recurring_schedule import RecurringScheduleCreate


def get_schedule(db: Session, schedule_id: int) -> Optional[RecurringSchedule]:
    return db.query(RecurringSchedule).filter(RecurringSchedule.id == schedule_id).first()


def get_schedules(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    court_id: Optional[int] = None,
    team_id: Optional[int] = None,
    is_active: Optional[bool] = None,
) -> List[RecurringSchedule]:
    query = db.query(RecurringSchedule)

    if court_id:
        query = query.filter(RecurringSchedule.court_id == court_id)
    if team_id:
        query = query.filter(RecurringSchedule.team_id == team_id)
    if is_active is not None:
        query = query.filter(RecurringSchedule.is_active == is_active)

    return query.order_by(RecurringSchedule.id).offset(skip).limit(limit).all()


def create_schedule(
    db: Session,
    schedule: RecurringScheduleCreate,
    horizon_weeks: int,
    created_by: Optional[int] = None,
) -> RecurringSchedule:
    data = schedule.model_dump(exclude={"horizon_weeks", "days_of_week"})
    db_schedule = RecurringSchedule(
        **data,
        days_of_week=[day.value for day in schedule.days_of_week],
        horizon_weeks=horizon_weeks,
        created_by=created_by,
    )
    db.add(db_schedule)
    db.commit()
    db.refresh(db_schedule)
    return db_schedule


def get_exception(
    db: Session, schedule_id: int, day: date
) -> Optional[RecurringScheduleException]:
    return (
        db.query(RecurringScheduleException)
        .filter(RecurringScheduleException.schedule_id == schedule_id)
        .filter(RecurringScheduleException.date == day)
        .first()
    )


def add_exception(
    db: Session, schedule_id: int, day: date, reason: Optional[str] = None
) -> RecurringScheduleException:
    db_exception = RecurringScheduleException(
        schedule_id=schedule_id, date=day, reason=reason or "Manual exception"
    )
    db.add(db_exception)
    db.flush()
    return db_exception


def get_exception_by_id(
    db: Session, schedule_id: int, exception_id: int
) -> Optional[RecurringScheduleException]:
    return (
        db.query(RecurringScheduleException)
        .filter(RecurringScheduleException.id == exception_id)
        .filter(RecurringScheduleException.schedule_id == schedule_id)
        .first()
    )


def delete_exception(db: Session, db_exception: RecurringScheduleException) -> None:
    db.delete(db_exception)
    db.commit()
