"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que create_all les détecte.
Import all models here so create_all can detect them.
"""

from carrental.models.user import AccessToken, Role, User
from carrental.models.listing import City, Listing, PREMIUM_DURATIONS
from carrental.models.availability import AvailabilityWindow, Weekday, WEEKDAYS
from carrental.models.booking import Booking, BookingState, FeedbackStatus
from carrental.models.cart import Cart
from carrental.models.audit import AuditLog

__all__ = [
    "AccessToken",
    "Role",
    "User",
    "City",
    "Listing",
    "PREMIUM_DURATIONS",
    "AvailabilityWindow",
    "Weekday",
    "WEEKDAYS",
    "Booking",
    "BookingState",
    "FeedbackStatus",
    "Cart",
    "AuditLog",
]
