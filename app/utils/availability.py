"""
Plantilla semanal de disponibilidad de las canchas.

Cada cancha tiene, para cada día de la semana, una lista ordenada de franjas
abiertas (hora de inicio y fin, sin fecha). Un día sin franjas significa que la
cancha NO se puede reservar ese día.
"""

from datetime import date, datetime, time
from typing import Iterable, List, NamedTuple, Optional, Union

from app.enums.booking import BookingPurpose
from app.enums.slot_type import SlotType
from app.enums.weekday import Weekday


class TimeSlot(NamedTuple):
    start: time
    end: time
    slot_type: Optional[SlotType] = None


def weekday_of(value: Union[date, datetime]) -> Weekday:
    """Día de la semana de una fecha (o datetime local)."""
    if isinstance(value, datetime):
        value = value.date()
    return Weekday.from_date(value)


def slots_for(court, weekday: Weekday) -> List[TimeSlot]:
    """
    Obtiene las franjas abiertas de una cancha para un día de la semana.

    Nunca falla: si el día no tiene franjas configuradas devuelve una lista
    vacía, que es la señal de que la cancha no se puede reservar ese día.

    Args:
        court: Cancha (modelo Court) con sus availability_slots cargados
        weekday: Día de la semana

    Returns:
        List[TimeSlot]: Franjas ordenadas por hora de inicio
    """
    if court is None:
        return []

    slots = [
        TimeSlot(slot.start_time, slot.end_time, slot.slot_type)
        for slot in court.availability_slots or []
        if slot.weekday == weekday
    ]
    return sorted(slots, key=lambda slot: (slot.start, slot.end))


def slot_accepts_purpose(slot: TimeSlot, purpose: BookingPurpose) -> bool:
    """
    Verifica si una franja admite reservas con el propósito indicado.

    - Franjas sin tipo admiten cualquier propósito
    - Franjas "academy" admiten entrenamientos y partidos
    - Franjas "rental" admiten alquileres
    - El propósito "Other" se admite en cualquier franja
    """
    if slot.slot_type is None or purpose == BookingPurpose.OTHER:
        return True
    if slot.slot_type == SlotType.ACADEMY:
        return purpose in (BookingPurpose.TRAINING, BookingPurpose.MATCH)
    return purpose == BookingPurpose.RENTAL


def slots_for_purpose(
    slots: Iterable[TimeSlot], purpose: Optional[BookingPurpose]
) -> List[TimeSlot]:
    if purpose is None:
        return list(slots)
    return [slot for slot in slots if slot_accepts_purpose(slot, purpose)]


def validate_day_slots(slots: Iterable) -> None:
    """
    Valida las franjas de un mismo día.

    Cada franja debe cumplir start < end y las franjas no pueden solaparse
    entre sí (franjas que se tocan, 09:00-12:00 y 12:00-14:00, son válidas).

    Args:
        slots: Franjas con atributos start y end

    Raises:
        ValueError: Si alguna franja es inválida o se solapa con otra
    """
    ordered = sorted(slots, key=lambda slot: (slot.start, slot.end))

    for slot in ordered:
        if slot.start >= slot.end:
            raise ValueError(
                f"Slot {slot.start:%H:%M}-{slot.end:%H:%M} must start before it ends"
            )

    for previous, current in zip(ordered, ordered[1:]):
        if current.start < previous.end:
            raise ValueError(
                f"Slots {previous.start:%H:%M}-{previous.end:%H:%M} and "
                f"{current.start:%H:%M}-{current.end:%H:%M} overlap"
            )
