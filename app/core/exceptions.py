"""
Domain exceptions for the booking engine.

Every failure of a booking operation is raised as one of these typed errors
so the API layer can translate it into the matching HTTP response.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class BookingError(Exception):
    """Base exception for all booking engine errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class InvalidWindow(BookingError):
    """Start is not before end, or start lies in the past."""


class CourtUnavailable(BookingError):
    """No open slot covers the requested window on that weekday."""


class TimeSlotConflict(BookingError):
    """The window overlaps an existing Pending/Confirmed booking."""

    status_code = status.HTTP_409_CONFLICT


class InvalidTransition(BookingError):
    """Illegal status or payment-status move."""


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(BookingError):
    """Actor lacks the capability or ownership for the mutation."""

    status_code = status.HTTP_403_FORBIDDEN
