"""
Cabin booking for a tanning salon: availability, booking and cancellation.
"""

__version__ = "0.1.0"
