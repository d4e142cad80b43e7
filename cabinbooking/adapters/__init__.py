"""
Adapters layer - External integrations (cabin webhooks, confirmation endpoint, booking store).
"""

from .booking_store import JsonBookingStore
from .cabin_webhook import CabinWebhookClient
from .confirmation_client import ConfirmationClient
from .mock_cabin_webhook import MockCabinWebhookClient, MockConfirmationClient

__all__ = [
    "CabinWebhookClient",
    "ConfirmationClient",
    "JsonBookingStore",
    "MockCabinWebhookClient",
    "MockConfirmationClient",
]
