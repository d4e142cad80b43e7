"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import SLOT_MINUTES, AvailabilityCalculator
from .models import (
    DEFAULT_BUSINESS_HOURS,
    AvailabilityResult,
    Booking,
    BookingRequest,
    BookingStatus,
    BusinessHours,
    Cabin,
    CabinCatalog,
    CabinCategory,
    OpeningHours,
    TimeSlot,
)

__all__ = [
    "SLOT_MINUTES",
    "AvailabilityCalculator",
    "DEFAULT_BUSINESS_HOURS",
    "AvailabilityResult",
    "Booking",
    "BookingRequest",
    "BookingStatus",
    "BusinessHours",
    "Cabin",
    "CabinCatalog",
    "CabinCategory",
    "OpeningHours",
    "TimeSlot",
]
