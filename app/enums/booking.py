from enum import Enum


class BookingPurpose(str, Enum):
    RENTAL = "Rental"
    TRAINING = "Training"
    MATCH = "Match"
    OTHER = "Other"


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class PaymentStatus(str, Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"
    REFUNDED = "Refunded"


# Estados que ocupan la cancha y bloquean nuevas reservas
BLOCKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)
