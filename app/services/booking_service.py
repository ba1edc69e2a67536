"""
Servicio de reservas de canchas.

Orquesta la plantilla de disponibilidad, el detector de solapamientos y el
ciclo de vida de las reservas. Es el único componente que crea reservas y
horarios recurrentes o cambia su estado.

Concurrencia: leer las reservas existentes y escribir la nueva es una sección
crítica por cancha. Se serializa con un lock en proceso por cancha y, dentro
de la transacción, con SELECT ... FOR UPDATE sobre la fila de la cancha. El
índice único parcial de la tabla bookings es la última defensa; si salta, se
traduce a TimeSlotConflict. Un choque del índice de booking_reference no es
un conflicto de horario y se propaga tal cual.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional
import logging
import secrets
import threading

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    BookingError,
    CourtUnavailable,
    Forbidden,
    InvalidTransition,
    InvalidWindow,
    NotFound,
    TimeSlotConflict,
)
from app.crud import booking as booking_crud
from app.crud import court as court_crud
from app.crud import recurring_schedule as schedule_crud
from app.enums.booking import BookingPurpose, BookingStatus, PaymentStatus
from app.enums.weekday import Weekday
from app.models.booking import Booking
from app.models.court import Court
from app.models.recurring_schedule import RecurringSchedule
from app.schemas.actor import Actor
from app.schemas.booking import GuestInfo
from app.schemas.recurring_schedule import RecurringScheduleCreate
from app.services import recurring_expander
from app.utils.availability import TimeSlot, slots_for, slots_for_purpose, weekday_of
from app.utils.booking_lifecycle import (
    apply_cancellation,
    apply_payment_transition,
    apply_status_transition,
    initial_status,
)
from app.utils.booking_overlap import (
    Window,
    day_bounds,
    find_conflict,
    fits_within_slots,
    free_windows,
)
from app.utils.facility_time import facility_now, to_facility_local

logger = logging.getLogger(__name__)

REFERENCE_ATTEMPTS = 5

_court_locks: Dict[int, threading.Lock] = {}
_court_locks_guard = threading.Lock()


@contextmanager
def court_lock(court_id: int):
    """Serializes booking acceptance for one court inside this process."""
    with _court_locks_guard:
        lock = _court_locks.setdefault(court_id, threading.Lock())
    with lock:
        yield


def compute_total_price(hourly_rate, start: datetime, end: datetime) -> Decimal:
    """hourly_rate x duración en horas, redondeado a centavos."""
    hours = Decimal((end - start).total_seconds()) / Decimal(3600)
    total = Decimal(hourly_rate or 0) * hours
    return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def generate_booking_reference() -> str:
    return "GB-" + secrets.token_hex(4).upper()


def _append_note(booking, note: str) -> None:
    booking.notes = f"{booking.notes}\n{note}" if booking.notes else note


def _is_reference_collision(exc: IntegrityError) -> bool:
    """El choque fue contra el índice único de booking_reference y no de horario."""
    return "booking_reference" in str(exc.orig)


@dataclass
class CourtAvailability:
    court_id: int
    date: date
    weekday: Weekday
    weekday_slots: List[TimeSlot]
    existing_bookings: List[Booking]
    free_windows: List[Window]

    @property
    def is_open(self) -> bool:
        return bool(self.weekday_slots)


@dataclass
class RecurringBookingResult:
    schedule: RecurringSchedule
    accepted: List[Booking] = field(default_factory=list)
    rejected: List[recurring_expander.RejectedOccurrence] = field(
        default_factory=list
    )


class BookingService:
    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.clock = clock or facility_now

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_court(self, court_id: int) -> Court:
        court = court_crud.get_court(self.db, court_id)
        if court is None:
            raise NotFound(f"Court {court_id} not found", details={"court_id": court_id})
        return court

    def get_booking(self, booking_id: int) -> Booking:
        booking = booking_crud.get_booking(self.db, booking_id)
        if booking is None:
            raise NotFound(
                f"Booking {booking_id} not found", details={"booking_id": booking_id}
            )
        return booking

    def get_booking_by_reference(self, reference: str) -> Booking:
        booking = booking_crud.get_booking_by_reference(self.db, reference)
        if booking is None:
            raise NotFound(
                f"Booking {reference} not found", details={"reference": reference}
            )
        return booking

    def get_schedule(self, schedule_id: int) -> RecurringSchedule:
        schedule = schedule_crud.get_schedule(self.db, schedule_id)
        if schedule is None:
            raise NotFound(
                f"Recurring schedule {schedule_id} not found",
                details={"schedule_id": schedule_id},
            )
        return schedule

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _unique_booking_reference(self) -> str:
        for _ in range(REFERENCE_ATTEMPTS):
            reference = generate_booking_reference()
            if booking_crud.get_booking_by_reference(self.db, reference) is None:
                return reference
        raise RuntimeError("Could not generate a unique booking reference")

    def request_booking(
        self,
        court_id: int,
        start: datetime,
        end: datetime,
        purpose: BookingPurpose = BookingPurpose.RENTAL,
        team_id: Optional[int] = None,
        guest_info: Optional[GuestInfo] = None,
        actor: Optional[Actor] = None,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Solicita una reserva individual.

        Raises:
            InvalidWindow: start >= end, o start en el pasado
            NotFound: La cancha no existe
            CourtUnavailable: Ninguna franja abierta cubre la ventana
            TimeSlotConflict: La ventana se solapa con una reserva activa
        """
        return self._accept(
            court_id,
            start,
            end,
            purpose,
            status=initial_status(actor),
            team_id=team_id,
            guest_info=guest_info,
            user_id=None if guest_info else (actor.user_id if actor else None),
            notes=notes,
        )

    def _accept(
        self,
        court_id: int,
        start: datetime,
        end: datetime,
        purpose: BookingPurpose,
        status: BookingStatus,
        team_id: Optional[int] = None,
        guest_info: Optional[GuestInfo] = None,
        user_id: Optional[int] = None,
        notes: Optional[str] = None,
        schedule_id: Optional[int] = None,
    ) -> Booking:
        purpose = BookingPurpose(purpose)
        start = to_facility_local(start)
        end = to_facility_local(end)

        if start >= end:
            raise InvalidWindow(
                "End time must be after start time",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        if start < self.clock():
            raise InvalidWindow(
                "Cannot book a time in the past", details={"start": start.isoformat()}
            )

        candidate = Window(start, end)

        with court_lock(court_id):
            try:
                court = court_crud.get_court_for_update(self.db, court_id)
                if court is None:
                    raise NotFound(
                        f"Court {court_id} not found", details={"court_id": court_id}
                    )

                weekday = weekday_of(start)
                day_slots = slots_for(court, weekday)
                if not day_slots:
                    raise CourtUnavailable(
                        f"Court is not available on {weekday.value}",
                        details={"weekday": weekday.value},
                    )

                if not fits_within_slots(candidate, slots_for_purpose(day_slots, purpose)):
                    raise CourtUnavailable(
                        f"Booking time is outside the court's available "
                        f"{purpose.value} hours on {weekday.value}",
                        details={
                            "weekday": weekday.value,
                            "available_slots": [
                                f"{slot.start:%H:%M}-{slot.end:%H:%M}" for slot in day_slots
                            ],
                        },
                    )

                existing = booking_crud.get_court_bookings_between(
                    self.db, court_id, start, end
                )
                conflict = find_conflict(candidate, existing)
                if conflict is not None:
                    raise TimeSlotConflict(
                        f"Court is already booked from "
                        f"{conflict.start_time:%Y-%m-%d %H:%M} to "
                        f"{conflict.end_time:%Y-%m-%d %H:%M}",
                        details={
                            "booking_id": conflict.id,
                            "start": conflict.start_time.isoformat(),
                            "end": conflict.end_time.isoformat(),
                        },
                    )

                booking = Booking(
                    court_id=court_id,
                    user_id=user_id,
                    team_id=team_id,
                    recurring_schedule_id=schedule_id,
                    start_time=start,
                    end_time=end,
                    purpose=purpose,
                    status=status,
                    payment_status=PaymentStatus.UNPAID,
                    total_price=(
                        compute_total_price(court.hourly_rate, start, end)
                        if purpose == BookingPurpose.RENTAL
                        else Decimal("0.00")
                    ),
                    notes=notes,
                )
                if guest_info is not None:
                    booking.is_guest_booking = True
                    booking.guest_name = guest_info.name
                    booking.guest_email = guest_info.email
                    booking.guest_phone = guest_info.phone
                    booking.booking_reference = self._unique_booking_reference()

                booking = booking_crud.create_booking(self.db, booking)
            except IntegrityError as exc:
                self.db.rollback()
                if _is_reference_collision(exc):
                    logger.error(
                        f"Booking reference collision on court {court_id} "
                        f"from {start} to {end}"
                    )
                    raise
                logger.warning(
                    f"Storage constraint rejected booking on court {court_id} "
                    f"from {start} to {end}"
                )
                raise TimeSlotConflict(
                    "Court is already booked during this time",
                    details={"start": start.isoformat(), "end": end.isoformat()},
                )
            except BookingError as exc:
                # Releases the court row lock
                self.db.rollback()
                logger.warning(
                    f"Booking rejected on court {court_id} ({exc.code}): {exc.message}"
                )
                raise

        logger.info(
            f"Booking {booking.id} accepted on court {court_id} "
            f"from {start} to {end} ({booking.status.value})"
        )
        return booking

    def request_recurring_booking(
        self, schedule_in: RecurringScheduleCreate, actor: Actor
    ) -> RecurringBookingResult:
        """
        Crea un horario recurrente y materializa sus reservas.

        Cada ocurrencia pasa por el mismo camino de aceptación que una reserva
        individual; el resultado informa aceptadas y rechazadas por separado.
        """
        if actor is None or not actor.can_manage:
            raise Forbidden("Only booking managers can create recurring schedules")

        self.get_court(schedule_in.court_id)

        schedule = schedule_crud.create_schedule(
            self.db,
            schedule_in,
            horizon_weeks=recurring_expander.resolve_horizon(schedule_in.horizon_weeks),
            created_by=actor.user_id,
        )
        return self._expand_schedule(schedule, actor)

    def extend_recurring_booking(
        self, schedule_id: int, weeks: int, actor: Actor
    ) -> RecurringBookingResult:
        """
        Genera más semanas de un horario existente.

        Continúa después de la última reserva generada por el horario (o desde
        hoy si no hay ninguna) y usa el mismo camino de aceptación.

        Raises:
            Forbidden: Si el actor no tiene capacidad de gestión
            NotFound: Si el horario no existe
            InvalidTransition: Si el horario fue dado de baja
        """
        if actor is None or not actor.can_manage:
            raise Forbidden("Only booking managers can extend recurring schedules")

        schedule = self.get_schedule(schedule_id)
        if not schedule.is_active:
            raise InvalidTransition(
                f"Recurring schedule {schedule_id} is not active",
                details={"schedule_id": schedule_id},
            )

        latest = booking_crud.get_latest_schedule_booking(self.db, schedule_id)
        start_from = latest.start_time.date() + timedelta(days=1) if latest else None
        return self._expand_schedule(
            schedule,
            actor,
            start_from=start_from,
            horizon_weeks=recurring_expander.resolve_horizon(weeks),
        )

    def _expand_schedule(
        self,
        schedule: RecurringSchedule,
        actor: Actor,
        start_from: Optional[date] = None,
        horizon_weeks: Optional[int] = None,
    ) -> RecurringBookingResult:
        schedule_id = schedule.id
        court_id = schedule.court_id
        purpose = BookingPurpose(schedule.purpose)
        team_id = schedule.team_id

        def accept(start: datetime, end: datetime) -> Booking:
            return self._accept(
                court_id,
                start,
                end,
                purpose,
                status=initial_status(actor, scheduled=True),
                team_id=team_id,
                user_id=actor.user_id,
                notes=f"Generated from recurring schedule {schedule_id}",
                schedule_id=schedule_id,
            )

        expansion = recurring_expander.expand(
            schedule,
            accept,
            today=self.clock().date(),
            start_from=start_from,
            horizon_weeks=horizon_weeks,
        )
        self.db.refresh(schedule)
        return RecurringBookingResult(
            schedule=schedule,
            accepted=expansion.accepted,
            rejected=expansion.rejected,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query_availability(self, court_id: int, day: date) -> CourtAvailability:
        """
        Consulta de disponibilidad de una cancha para una fecha.

        Solo lectura y sin lock: el resultado es orientativo y puede quedar
        desactualizado antes de que llegue la solicitud de reserva.
        """
        court = self.get_court(court_id)
        weekday = weekday_of(day)
        day_slots = slots_for(court, weekday)
        bounds = day_bounds(day)
        bookings = booking_crud.get_court_bookings_between(
            self.db, court_id, bounds.start, bounds.end
        )

        return CourtAvailability(
            court_id=court_id,
            date=day,
            weekday=weekday,
            weekday_slots=day_slots,
            existing_bookings=bookings,
            free_windows=free_windows(
                day, day_slots, bookings, not_before=self.clock()
            ),
        )

    def find_available_courts(
        self, day: date, purpose: BookingPurpose = BookingPurpose.RENTAL
    ) -> List[Court]:
        """Canchas activas con al menos una franja para el propósito ese día."""
        weekday = weekday_of(day)
        return [
            court
            for court in court_crud.get_active_courts(self.db)
            if slots_for_purpose(slots_for(court, weekday), purpose)
        ]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def transition_status(
        self, booking_id: int, new_status: BookingStatus, actor: Actor
    ) -> Booking:
        booking = self.get_booking(booking_id)
        apply_status_transition(booking, new_status, actor)
        return booking_crud.save_booking(self.db, booking)

    def set_payment_status(self, booking_id: int, new_status: PaymentStatus) -> Booking:
        booking = self.get_booking(booking_id)
        apply_payment_transition(booking, new_status)
        return booking_crud.save_booking(self.db, booking)

    def cancel(self, booking_id: int, actor: Actor) -> Booking:
        booking = self.get_booking(booking_id)
        apply_cancellation(booking, actor)
        return booking_crud.save_booking(self.db, booking)

    def cancel_guest_booking(self, reference: str, email: str) -> Booking:
        """Autoservicio de invitados: cancela con referencia + email de la reserva."""
        booking = self.get_booking_by_reference(reference)
        if (
            not booking.is_guest_booking
            or (booking.guest_email or "").lower() != email.lower()
        ):
            raise Forbidden("Email verification failed")

        apply_cancellation(booking, Actor(booking_reference=reference))
        return booking_crud.save_booking(self.db, booking)

    def add_schedule_exception(
        self,
        schedule_id: int,
        day: date,
        reason: Optional[str],
        actor: Actor,
    ):
        """
        Agrega una fecha de excepción a un horario recurrente.

        Las reservas activas generadas por el horario para esa fecha se cancelan.

        Returns:
            Tuple[RecurringSchedule, List[Booking]]: Horario y reservas canceladas
        """
        if actor is None or not actor.can_manage:
            raise Forbidden("Only booking managers can edit recurring schedules")

        schedule = self.get_schedule(schedule_id)
        if schedule_crud.get_exception(self.db, schedule_id, day) is not None:
            raise InvalidWindow(
                "This date is already an exception", details={"date": day.isoformat()}
            )

        schedule_crud.add_exception(self.db, schedule_id, day, reason)
        bounds = day_bounds(day)
        cancelled = []
        for booking in booking_crud.get_schedule_bookings_between(
            self.db, schedule_id, bounds.start, bounds.end
        ):
            apply_cancellation(booking, actor)
            _append_note(
                booking, f"Cancelled due to exception: {reason or 'Manual exception'}"
            )
            cancelled.append(booking)

        self.db.commit()
        self.db.refresh(schedule)
        logger.info(
            f"Exception {day} added to recurring schedule {schedule_id}, "
            f"{len(cancelled)} bookings cancelled"
        )
        return schedule, cancelled

    def remove_schedule_exception(
        self, schedule_id: int, exception_id: int, actor: Actor
    ) -> RecurringSchedule:
        """
        Quita una fecha de excepción. Las reservas que ya se cancelaron por
        ella no se reactivan; la ventana queda libre para reservar.
        """
        if actor is None or not actor.can_manage:
            raise Forbidden("Only booking managers can edit recurring schedules")

        schedule = self.get_schedule(schedule_id)
        db_exception = schedule_crud.get_exception_by_id(
            self.db, schedule_id, exception_id
        )
        if db_exception is None:
            raise NotFound(
                f"Exception {exception_id} not found",
                details={"schedule_id": schedule_id, "exception_id": exception_id},
            )

        schedule_crud.delete_exception(self.db, db_exception)
        self.db.refresh(schedule)
        logger.info(f"Exception {exception_id} removed from recurring schedule {schedule_id}")
        return schedule

    def delete_recurring_schedule(self, schedule_id: int, actor: Actor):
        """
        Da de baja un horario recurrente.

        Las reservas no se borran: las futuras (Pending o Confirmed) generadas
        por el horario se cancelan y el horario queda inactivo.

        Returns:
            Tuple[RecurringSchedule, List[Booking]]: Horario y reservas canceladas
        """
        if actor is None or not actor.can_manage:
            raise Forbidden("Only booking managers can delete recurring schedules")

        schedule = self.get_schedule(schedule_id)
        if not schedule.is_active:
            raise InvalidTransition(
                f"Recurring schedule {schedule_id} is already inactive",
                details={"schedule_id": schedule_id},
            )

        cancelled = []
        for booking in booking_crud.get_future_schedule_bookings(
            self.db, schedule_id, self.clock()
        ):
            apply_cancellation(booking, actor)
            _append_note(booking, "Cancelled: recurring schedule deleted")
            cancelled.append(booking)

        schedule.is_active = False
        self.db.commit()
        self.db.refresh(schedule)
        logger.info(
            f"Recurring schedule {schedule_id} deactivated, "
            f"{len(cancelled)} future bookings cancelled"
        )
        return schedule, cancelled

    def complete_elapsed_bookings(self, actor: Actor) -> int:
        """Marca como Completed las reservas activas cuyo fin ya pasó."""
        if actor is None or not actor.can_manage:
            raise Forbidden("Only booking managers can complete bookings")

        elapsed = booking_crud.get_elapsed_active_bookings(self.db, self.clock())
        for booking in elapsed:
            apply_status_transition(booking, BookingStatus.COMPLETED, actor)
        self.db.commit()
        return len(elapsed)
