"""
Utilidades para detectar solapamientos de reservas.

Los intervalos son semiabiertos [inicio, fin): una reserva que termina a las
10:00 y otra que comienza a las 10:00 en la misma cancha NO se solapan.
Esta es la única definición de solapamiento del sistema; la usan tanto la
creación de reservas como la consulta de disponibilidad.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, NamedTuple, Optional, Sequence

from app.enums.booking import BLOCKING_STATUSES
from app.enums.slot_type import SlotType


class Window(NamedTuple):
    start: datetime
    end: datetime
    slot_type: Optional[SlotType] = None


def time_to_minutes(value: time) -> int:
    """
    Convierte una hora de reloj a minutos desde medianoche.

    Args:
        value: Hora (se ignoran segundos)

    Returns:
        int: Minutos desde medianoche (0-1439)
    """
    return value.hour * 60 + value.minute


def _bounds(window):
    if isinstance(window, tuple):
        return window[0], window[1]
    return window.start_time, window.end_time


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    """Dos intervalos se solapan si a_start < b_end y a_end > b_start."""
    return a_start < b_end and a_end > b_start


def overlaps(candidate, existing: Iterable) -> bool:
    """
    Verifica si una ventana candidata se solapa con alguna ventana existente.

    Args:
        candidate: Ventana (start, end) o reserva
        existing: Ventanas o reservas existentes

    Returns:
        bool: True si hay solapamiento con al menos una, False en caso contrario
    """
    start, end = _bounds(candidate)
    for window in existing:
        other_start, other_end = _bounds(window)
        if intervals_overlap(start, end, other_start, other_end):
            return True
    return False


def is_blocking(booking) -> bool:
    """Solo las reservas Pending o Confirmed ocupan la cancha."""
    return booking.status in BLOCKING_STATUSES


def find_conflict(candidate: Window, bookings: Iterable):
    """
    Busca la primera reserva activa que se solapa con la ventana candidata.

    Las reservas canceladas o completadas nunca bloquean.

    Args:
        candidate: Ventana candidata
        bookings: Reservas existentes de la misma cancha

    Returns:
        La reserva en conflicto, o None si la ventana está libre
    """
    for booking in bookings:
        if is_blocking(booking) and overlaps(candidate, [booking]):
            return booking
    return None


def fits_within_slots(candidate: Window, slots: Sequence) -> bool:
    """
    Verifica que la ventana candidata quede completamente dentro de una franja.

    Se compara solo la hora de reloj (ignorando la fecha). Una ventana que
    cruza la medianoche nunca cabe en una franja, porque las franjas son de un
    único día.

    Args:
        candidate: Ventana en hora local
        slots: Franjas abiertas del día de la semana de la ventana

    Returns:
        bool: True si alguna franja contiene la ventana completa
    """
    if candidate.start.date() != candidate.end.date():
        return False

    start_minutes = time_to_minutes(candidate.start.time())
    end_minutes = time_to_minutes(candidate.end.time())
    # Segundos sueltos redondean hacia afuera: 10:59:30 cuenta como 11:00
    if candidate.end.time().second or candidate.end.time().microsecond:
        end_minutes += 1

    for slot in slots:
        if (
            start_minutes >= time_to_minutes(slot.start)
            and end_minutes <= time_to_minutes(slot.end)
        ):
            return True
    return False


def day_bounds(day: date) -> Window:
    start = datetime.combine(day, time.min)
    return Window(start, start + timedelta(days=1))


def free_windows(
    day: date,
    slots: Sequence,
    bookings: Iterable,
    not_before: Optional[datetime] = None,
) -> List[Window]:
    """
    Calcula las ventanas libres de un día: franjas abiertas menos reservas activas.

    Cada ventana conserva el tipo de su franja, que indica qué propósitos
    acepta. Con not_before se descarta lo que ya pasó.

    Args:
        day: Fecha consultada
        slots: Franjas abiertas de ese día de la semana
        bookings: Reservas de la cancha que tocan ese día
        not_before: Hora actual de la instalación (opcional)

    Returns:
        List[Window]: Ventanas libres ordenadas
    """
    busy = sorted(
        (_bounds(booking) for booking in bookings if is_blocking(booking)),
        key=lambda window: window[0],
    )

    result = []
    for slot in slots:
        slot_type = getattr(slot, "slot_type", None)
        cursor = datetime.combine(day, slot.start)
        slot_end = datetime.combine(day, slot.end)
        if not_before is not None:
            cursor = max(cursor, not_before)
        for busy_start, busy_end in busy:
            if cursor >= slot_end:
                break
            if not intervals_overlap(cursor, slot_end, busy_start, busy_end):
                continue
            if busy_start > cursor:
                result.append(Window(cursor, busy_start, slot_type))
            cursor = max(cursor, busy_end)
        if cursor < slot_end:
            result.append(Window(cursor, slot_end, slot_type))
    return result
