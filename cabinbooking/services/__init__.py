"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_service import (
    BookingRepositoryProtocol,
    BookingService,
    CalendarSourceProtocol,
    ConfirmationSenderProtocol,
)
from .booking_session import BookingSession, bookable_dates

__all__ = [
    "BookingRepositoryProtocol",
    "BookingService",
    "BookingSession",
    "CalendarSourceProtocol",
    "ConfirmationSenderProtocol",
    "bookable_dates",
]
