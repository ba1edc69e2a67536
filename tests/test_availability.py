"""
Tests de la plantilla semanal de disponibilidad
"""
from datetime import date, datetime, time
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from app.enums.booking import BookingPurpose
from app.enums.slot_type import SlotType
from app.enums.weekday import Weekday
from app.schemas.court import AvailabilitySlot, CourtCreate
from app.utils.availability import (
    TimeSlot,
    slot_accepts_purpose,
    slots_for,
    slots_for_purpose,
    validate_day_slots,
    weekday_of,
)


def _court(*slots):
    return SimpleNamespace(
        availability_slots=[
            SimpleNamespace(weekday=weekday, start_time=start, end_time=end, slot_type=None)
            for weekday, start, end in slots
        ]
    )


def test_weekday_of_date_and_datetime():
    assert weekday_of(date(2026, 3, 9)) == Weekday.MONDAY
    assert weekday_of(datetime(2026, 3, 15, 23, 59)) == Weekday.SUNDAY


def test_slots_for_day_without_slots_is_empty():
    """
    Test: Un día sin franjas devuelve lista vacía, nunca falla
    """
    court = _court((Weekday.MONDAY, time(9), time(12)))

    assert slots_for(court, Weekday.TUESDAY) == []
    assert slots_for(None, Weekday.MONDAY) == []


def test_slots_for_returns_sorted_slots_of_the_day():
    court = _court(
        (Weekday.MONDAY, time(15), time(18)),
        (Weekday.MONDAY, time(9), time(12)),
        (Weekday.FRIDAY, time(8), time(10)),
    )

    slots = slots_for(court, Weekday.MONDAY)

    assert [(slot.start, slot.end) for slot in slots] == [
        (time(9), time(12)),
        (time(15), time(18)),
    ]


def test_validate_day_slots_accepts_touching_slots():
    validate_day_slots([TimeSlot(time(9), time(12)), TimeSlot(time(12), time(14))])


def test_validate_day_slots_rejects_overlap():
    with pytest.raises(ValueError) as exc_info:
        validate_day_slots([TimeSlot(time(9), time(12)), TimeSlot(time(11), time(14))])

    assert "overlap" in str(exc_info.value)


def test_validate_day_slots_rejects_inverted_slot():
    with pytest.raises(ValueError):
        validate_day_slots([TimeSlot(time(12), time(9))])


def test_court_create_rejects_overlapping_template():
    """
    Test: El esquema de creación valida la plantilla de cada día
    """
    with pytest.raises(ValidationError):
        CourtCreate(
            name="Court",
            availability={
                Weekday.MONDAY: [
                    AvailabilitySlot(start=time(9), end=time(12)),
                    AvailabilitySlot(start=time(10), end=time(11)),
                ]
            },
        )


def test_availability_slot_requires_minute_granularity():
    with pytest.raises(ValidationError):
        AvailabilitySlot(start=time(9, 0, 30), end=time(10))


def test_slot_types_filter_purposes():
    academy = TimeSlot(time(18), time(20), SlotType.ACADEMY)
    rental = TimeSlot(time(9), time(12), SlotType.RENTAL)
    open_slot = TimeSlot(time(12), time(14))

    assert slot_accepts_purpose(academy, BookingPurpose.TRAINING)
    assert slot_accepts_purpose(academy, BookingPurpose.MATCH)
    assert not slot_accepts_purpose(academy, BookingPurpose.RENTAL)
    assert not slot_accepts_purpose(rental, BookingPurpose.TRAINING)
    assert slot_accepts_purpose(rental, BookingPurpose.OTHER)
    assert slot_accepts_purpose(open_slot, BookingPurpose.RENTAL)

    assert slots_for_purpose([academy, rental, open_slot], BookingPurpose.RENTAL) == [
        rental,
        open_slot,
    ]
