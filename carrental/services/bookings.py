"""
Service Demandes de location / Booking ledger service.

Machine à états / State machine:
    PENDING -> ACCEPTED | REJECTED   (partenaire propriétaire / owning partner)
    PENDING -> CANCELLED             (client propriétaire / owning client)
ACCEPTED, REJECTED et CANCELLED sont terminaux / are terminal.
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carrental.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    UnavailableError,
    ValidationError,
)
from carrental.models.availability import AvailabilityWindow
from carrental.models.booking import Booking, BookingState, FeedbackStatus
from carrental.models.listing import Listing
from carrental.models.user import User
from carrental.schemas.booking import BookingAction
from carrental.utils.audit import log_audit
from carrental.utils.clock import Clock
from carrental.utils.timeslots import weekday_of

log = logging.getLogger(__name__)

_ACTION_TARGETS = {
    BookingAction.ACCEPT: BookingState.ACCEPTED,
    BookingAction.REJECT: BookingState.REJECTED,
}


class BookingService:
    """Registre des demandes / Booking ledger."""

    @staticmethod
    async def _load(db: AsyncSession, booking_id: int) -> Booking:
        result = await db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .options(selectinload(Booking.listing), selectinload(Booking.client))
            .execution_options(populate_existing=True)
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    async def create_booking(
        db: AsyncSession,
        clock: Clock,
        client: User,
        window_id: int,
        reservation_date: date,
    ) -> Booking:
        """Créer une demande PENDING / Create a PENDING booking."""
        if reservation_date < clock.today():
            raise ValidationError({
                "reservation_date": ["The reservation date must be a date after or equal to today."]
            })

        result = await db.execute(
            select(AvailabilityWindow)
            .where(AvailabilityWindow.id == window_id)
            .options(selectinload(AvailabilityWindow.listing))
        )
        window = result.scalar_one_or_none()
        if window is None:
            raise NotFoundError("Availability window not found")
        if weekday_of(reservation_date) != window.day:
            raise ValidationError({
                "reservation_date": [f"The reservation date must be a {window.day.value}."]
            })
        if not window.is_active or not window.listing.is_active:
            raise UnavailableError()

        # Comparaison sur la copie d'horaire : window_id est remis à NULL quand
        # le planning est remplacé / Compared on the time snapshot: window_id is
        # reset to NULL when the schedule is replaced
        existing = await db.execute(
            select(Booking.id).where(
                Booking.listing_id == window.listing_id,
                Booking.user_id == client.id,
                Booking.reservation_date == reservation_date,
                Booking.time_from == window.time_from,
                Booking.time_to == window.time_to,
                Booking.state != BookingState.CANCELLED,
            ).limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("You already have a booking for this slot")

        now = clock.now()
        booking = Booking(
            window_id=window.id,
            listing_id=window.listing_id,
            user_id=client.id,
            reservation_date=reservation_date,
            reservation_day=window.day.value,
            time_from=window.time_from,
            time_to=window.time_to,
            state=BookingState.PENDING,
            feedback_client=FeedbackStatus.PENDING,
            feedback_article=FeedbackStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        db.add(booking)
        try:
            await db.flush()
        except IntegrityError:
            # Demande concurrente passée entre le contrôle et l'insertion /
            # Concurrent request slipped in between the check and the insert
            await db.rollback()
            raise ConflictError("You already have a booking for this slot")

        log_audit(db, clock, "booking", booking.id, "CREATE", client, {
            "window_id": window.id, "reservation_date": reservation_date.isoformat(),
        })
        await db.flush()
        log.info("Booking %s created for window %s by user %s", booking.id, window.id, client.id)
        return await BookingService._load(db, booking.id)

    @staticmethod
    async def cancel_booking(db: AsyncSession, clock: Clock, requester: User, booking_id: int) -> Booking:
        """Annulation par le client / Cancellation by the owning client."""
        booking = await BookingService._load(db, booking_id)
        if booking.user_id != requester.id:
            raise AuthorizationError()
        if booking.state == BookingState.CANCELLED:
            raise InvalidStateError("Already cancelled")
        if booking.state != BookingState.PENDING:
            raise InvalidStateError(f"A {booking.state.value} booking can no longer be cancelled")

        booking.state = BookingState.CANCELLED
        booking.updated_at = clock.now()
        log_audit(db, clock, "booking", booking.id, "CANCEL", requester, {
            "old_state": "pending", "new_state": "cancelled",
        })
        await db.flush()
        return booking

    @staticmethod
    async def update_booking_status(
        db: AsyncSession,
        clock: Clock,
        partner: User,
        booking_id: int,
        action: BookingAction,
    ) -> Booking:
        """Décision du partenaire propriétaire / Decision by the owning partner."""
        booking = await BookingService._load(db, booking_id)
        if booking.listing.user_id != partner.id:
            raise AuthorizationError("You do not own this listing")
        if booking.state != BookingState.PENDING:
            raise InvalidStateError(f"Only pending bookings can be {_ACTION_TARGETS[action].value}")

        target = _ACTION_TARGETS[action]
        booking.state = target
        booking.updated_at = clock.now()
        log_audit(db, clock, "booking", booking.id, action.value.upper(), partner, {
            "old_state": "pending", "new_state": target.value,
        })
        await db.flush()
        return booking

    @staticmethod
    async def list_client_bookings(db: AsyncSession, client: User) -> list[Booking]:
        """Demandes du client, plus récentes d'abord / Client's bookings, newest first."""
        result = await db.execute(
            select(Booking)
            .where(Booking.user_id == client.id)
            .options(selectinload(Booking.listing))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_partner_requests(
        db: AsyncSession, partner: User, state: BookingState | None = None
    ) -> list[Booking]:
        """Demandes reçues sur les annonces du partenaire / Requests received on the partner's listings."""
        query = (
            select(Booking)
            .join(Listing, Booking.listing_id == Listing.id)
            .where(Listing.user_id == partner.id)
            .options(selectinload(Booking.listing), selectinload(Booking.client))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        if state is not None:
            query = query.where(Booking.state == state)
        result = await db.execute(query)
        return list(result.scalars().all())
