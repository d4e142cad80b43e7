"""
Domain-specific exception hierarchy for the cabin booking application.
"""


class BookingError(Exception):
    """Base class for all application-level errors."""


class InvalidCabinError(BookingError, ValueError):
    """Raised when a cabin identifier is missing or unknown."""


class BusinessHoursError(BookingError):
    """Raised when no opening hours are configured for a weekday."""


class CalendarAPIError(BookingError):
    """Raised when a cabin calendar webhook cannot be reached or parsed."""


class NotificationError(BookingError):
    """Raised when the booking confirmation endpoint rejects a request."""


class PersistenceError(BookingError):
    """Raised when the booking store cannot be read or written."""


class BookingNotFoundError(PersistenceError):
    """Raised when a booking id does not exist in the store."""


class BookingValidationError(BookingError, ValueError):
    """Raised when a booking request is incomplete or malformed."""


class SlotUnavailableError(BookingError):
    """Raised when a time that is booked or off the slot grid is selected."""


class BookingSubmissionError(BookingError):
    """Raised when a booking could not be confirmed. Safe to retry."""
