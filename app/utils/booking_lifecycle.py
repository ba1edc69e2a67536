"""
Máquina de estados del ciclo de vida de una reserva.

Estados: Pending -> Confirmed -> Cancelled / Completed.
Cancelled y Completed son terminales. El estado de pago evoluciona de forma
independiente (Unpaid -> Paid -> Refunded) y nunca modifica el estado de la
reserva.
"""

from typing import Optional
import logging

from app.core.exceptions import Forbidden, InvalidTransition
from app.enums.booking import (
    BLOCKING_STATUSES,
    BookingPurpose,
    BookingStatus,
    PaymentStatus,
)
from app.schemas.actor import Actor

logger = logging.getLogger(__name__)


STATUS_TRANSITIONS = {
    BookingStatus.PENDING: {
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
    },
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED, BookingStatus.COMPLETED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}

PAYMENT_TRANSITIONS = {
    PaymentStatus.UNPAID: {PaymentStatus.PAID},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
}


def can_transition(current: BookingStatus, new_status: BookingStatus) -> bool:
    return new_status in STATUS_TRANSITIONS.get(current, set())


def initial_status(actor: Optional[Actor], scheduled: bool = False) -> BookingStatus:
    """
    Estado inicial de una reserva nueva.

    Las reservas generadas por un horario recurrente o creadas por alguien con
    capacidad de gestión nacen confirmadas; el resto queda pendiente.
    """
    if scheduled or (actor is not None and actor.can_manage):
        return BookingStatus.CONFIRMED
    return BookingStatus.PENDING


def is_owner(booking, actor: Optional[Actor]) -> bool:
    """
    Verifica si el actor es el dueño de la reserva.

    Un usuario registrado es dueño si coincide su id; un invitado lo es si
    presenta la referencia de su reserva.
    """
    if actor is None:
        return False
    if booking.is_guest_booking:
        return (
            actor.booking_reference is not None
            and actor.booking_reference == booking.booking_reference
        )
    return actor.user_id is not None and actor.user_id == booking.user_id


def apply_status_transition(booking, new_status: BookingStatus, actor: Actor):
    """
    Aplica un cambio de estado por acción de gestión.

    Args:
        booking: Reserva a modificar
        new_status: Estado destino
        actor: Actor que ejecuta la acción

    Raises:
        Forbidden: Si el actor no tiene capacidad de gestión
        InvalidTransition: Si el cambio no está permitido
    """
    if actor is None or not actor.can_manage:
        raise Forbidden("Only booking managers can change a booking status")

    current = BookingStatus(booking.status)
    if not can_transition(current, new_status):
        raise InvalidTransition(
            f"Cannot move booking {booking.id} from {current.value} to {new_status.value}",
            details={"from": current.value, "to": new_status.value},
        )

    booking.status = new_status
    logger.info(
        f"Booking {booking.id} moved from {current.value} to {new_status.value}"
    )
    return booking


def apply_cancellation(booking, actor: Actor):
    """
    Cancela una reserva (autoservicio o gestión).

    El dueño puede cancelar su propia reserva Pending o Confirmed sin
    condiciones. El estado de pago no se modifica.

    Raises:
        Forbidden: Si el actor no es el dueño ni tiene capacidad de gestión
        InvalidTransition: Si la reserva ya está cancelada o completada
    """
    can_manage = actor is not None and actor.can_manage
    if not can_manage and not is_owner(booking, actor):
        raise Forbidden("You can only cancel your own bookings")

    current = BookingStatus(booking.status)
    if current not in BLOCKING_STATUSES:
        raise InvalidTransition(
            f"Booking {booking.id} is already {current.value} and cannot be cancelled",
            details={"from": current.value, "to": BookingStatus.CANCELLED.value},
        )

    booking.status = BookingStatus.CANCELLED
    logger.info(f"Booking {booking.id} cancelled")
    return booking


def apply_payment_transition(booking, new_status: PaymentStatus):
    """
    Registra un cambio de estado de pago.

    Unpaid -> Paid solo mientras la reserva no esté cancelada;
    Paid -> Refunded es el único otro movimiento permitido.

    Raises:
        InvalidTransition: Si el movimiento no está permitido
    """
    current = PaymentStatus(booking.payment_status)

    if booking.purpose != BookingPurpose.RENTAL:
        raise InvalidTransition(
            f"Booking {booking.id} is not a rental and carries no payment",
            details={"purpose": BookingPurpose(booking.purpose).value},
        )

    if new_status not in PAYMENT_TRANSITIONS.get(current, set()):
        raise InvalidTransition(
            f"Cannot move payment of booking {booking.id} from {current.value} to {new_status.value}",
            details={"from": current.value, "to": new_status.value},
        )

    if (
        new_status == PaymentStatus.PAID
        and booking.status == BookingStatus.CANCELLED
    ):
        raise InvalidTransition(
            f"Booking {booking.id} is cancelled and cannot be marked as paid",
            details={"status": BookingStatus.CANCELLED.value},
        )

    booking.payment_status = new_status
    logger.info(
        f"Booking {booking.id} payment moved from {current.value} to {new_status.value}"
    )
    return booking
