"""
Expansión de horarios recurrentes en reservas concretas.

Un horario recurrente ("todos los lunes y jueves de 18:00 a 19:30") no se
guarda como una serie infinita: se materializa un número acotado de semanas
(RECURRING_HORIZON_WEEKS, 52 por defecto) y cada ocurrencia se valida por
separado con el mismo camino que una reserva individual.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional
from dotenv import load_dotenv
import logging
import os

from app.core.exceptions import CourtUnavailable, InvalidWindow, TimeSlotConflict
from app.enums.weekday import Weekday

load_dotenv()

logger = logging.getLogger(__name__)

# Horizonte máximo de materialización de un horario recurrente (decisión de producto)
RECURRING_HORIZON_WEEKS = int(os.getenv("RECURRING_HORIZON_WEEKS", "52"))

REASON_COURT_UNAVAILABLE = "court_unavailable"
REASON_TIME_SLOT_CONFLICT = "time_slot_conflict"
REASON_INVALID_WINDOW = "invalid_window"


@dataclass
class RejectedOccurrence:
    date: date
    reason: str
    detail: str


@dataclass
class ExpansionResult:
    accepted: List = field(default_factory=list)
    rejected: List[RejectedOccurrence] = field(default_factory=list)


def resolve_horizon(requested_weeks: Optional[int] = None) -> int:
    """Semanas a materializar: lo pedido, nunca más que RECURRING_HORIZON_WEEKS."""
    if not requested_weeks:
        return RECURRING_HORIZON_WEEKS
    return max(1, min(requested_weeks, RECURRING_HORIZON_WEEKS))


def occurrence_dates(
    first_day: date,
    days_of_week: Iterable,
    horizon_weeks: int,
    effective_until: Optional[date] = None,
    exceptions: Iterable[date] = (),
) -> List[date]:
    """
    Calcula las fechas de las ocurrencias de un horario recurrente.

    Args:
        first_day: Primera fecha candidata (inclusive)
        days_of_week: Días de la semana del horario
        horizon_weeks: Semanas a cubrir desde first_day
        effective_until: Última fecha válida del horario (opcional)
        exceptions: Fechas a omitir

    Returns:
        List[date]: Fechas ordenadas
    """
    weekdays = {Weekday(day) for day in days_of_week}
    skipped = set(exceptions)
    last_day = first_day + timedelta(weeks=horizon_weeks)

    dates = []
    current = first_day
    while current < last_day:
        if effective_until and current > effective_until:
            break
        if Weekday.from_date(current) in weekdays and current not in skipped:
            dates.append(current)
        current += timedelta(days=1)
    return dates


def schedule_occurrences(
    schedule,
    today: date,
    start_from: Optional[date] = None,
    horizon_weeks: Optional[int] = None,
) -> List[date]:
    """
    Ocurrencias de un horario guardado.

    El horizonte comienza en la primera fecha reservable: effective_from o
    hoy, la que sea posterior. Al extender un horario, start_from corre el
    comienzo hasta después de las reservas ya generadas.
    """
    first_day = max(schedule.effective_from, today)
    if start_from is not None:
        first_day = max(first_day, start_from)

    return occurrence_dates(
        first_day=first_day,
        days_of_week=schedule.days_of_week,
        horizon_weeks=horizon_weeks or schedule.horizon_weeks,
        effective_until=schedule.effective_until,
        exceptions=[exception.date for exception in schedule.exceptions],
    )


def expand(
    schedule,
    accept: Callable[[datetime, datetime], object],
    today: date,
    start_from: Optional[date] = None,
    horizon_weeks: Optional[int] = None,
) -> ExpansionResult:
    """
    Genera y envía, una por una, las reservas de un horario recurrente.

    Las ocurrencias son independientes: un conflicto en una fecha no impide
    aceptar las demás. No es todo-o-nada.

    Args:
        schedule: Horario recurrente guardado
        accept: Camino de aceptación de una reserva individual; recibe inicio y
            fin y devuelve la reserva creada o lanza un error de dominio
        today: Fecha actual de la instalación
        start_from: Primera fecha a considerar al extender (opcional)
        horizon_weeks: Semanas a cubrir; por defecto las del horario

    Returns:
        ExpansionResult: Reservas aceptadas y ocurrencias rechazadas con su motivo
    """
    result = ExpansionResult()

    for day in schedule_occurrences(schedule, today, start_from, horizon_weeks):
        start = datetime.combine(day, schedule.start_time_of_day)
        end = datetime.combine(day, schedule.end_time_of_day)
        try:
            result.accepted.append(accept(start, end))
        except CourtUnavailable as exc:
            result.rejected.append(
                RejectedOccurrence(day, REASON_COURT_UNAVAILABLE, exc.message)
            )
        except TimeSlotConflict as exc:
            result.rejected.append(
                RejectedOccurrence(day, REASON_TIME_SLOT_CONFLICT, exc.message)
            )
        except InvalidWindow as exc:
            result.rejected.append(
                RejectedOccurrence(day, REASON_INVALID_WINDOW, exc.message)
            )

    logger.info(
        f"Recurring schedule {schedule.id}: {len(result.accepted)} bookings accepted, "
        f"{len(result.rejected)} occurrences rejected"
    )
    return result
