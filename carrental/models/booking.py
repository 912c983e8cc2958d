"""Modèle Demande de location / Booking (rental request) model."""

import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, String, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carrental.database import Base


class BookingState(str, enum.Enum):
    """Cycle de vie / Lifecycle. PENDING initial, les autres terminaux / others terminal."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class FeedbackStatus(str, enum.Enum):
    """Statut d'avis / Feedback status."""
    PENDING = "pending"
    SUBMITTED = "submitted"


class Booking(Base):
    """Demande d'un client sur un créneau à une date / A client's request for a window on a date.

    `listing_id` et l'horaire sont copiés à la création : le créneau peut être
    supprimé par un remplacement du planning (window_id devient NULL).
    listing_id and the time range are copied at creation: the window may be
    deleted by a schedule replacement (window_id becomes NULL).
    """
    __tablename__ = "bookings"
    __table_args__ = (
        # Un seul booking non annulé par (créneau, client, date) /
        # One non-cancelled booking per (window, client, date)
        Index(
            "uq_bookings_open_slot",
            "window_id", "user_id", "reservation_date",
            unique=True,
            sqlite_where=text("state != 'CANCELLED'"),
            postgresql_where=text("state != 'CANCELLED'"),
        ),
        # Même garde sur la copie d'horaire, qui survit au remplacement du planning /
        # Same guard on the time snapshot, which survives a schedule replacement
        Index(
            "uq_bookings_open_snapshot",
            "listing_id", "user_id", "reservation_date", "time_from", "time_to",
            unique=True,
            sqlite_where=text("state != 'CANCELLED'"),
            postgresql_where=text("state != 'CANCELLED'"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    window_id: Mapped[int | None] = mapped_column(ForeignKey("availability_windows.id", ondelete="SET NULL"))
    listing_id: Mapped[int] = mapped_column(ForeignKey("listings.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    reservation_date: Mapped[date] = mapped_column(Date, nullable=False)
    reservation_day: Mapped[str] = mapped_column(String(10), nullable=False)
    time_from: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    time_to: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    state: Mapped[BookingState] = mapped_column(Enum(BookingState), nullable=False, default=BookingState.PENDING)
    feedback_client: Mapped[FeedbackStatus] = mapped_column(
        Enum(FeedbackStatus), nullable=False, default=FeedbackStatus.PENDING
    )
    feedback_article: Mapped[FeedbackStatus] = mapped_column(
        Enum(FeedbackStatus), nullable=False, default=FeedbackStatus.PENDING
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relations
    window: Mapped["AvailabilityWindow | None"] = relationship()
    listing: Mapped["Listing"] = relationship()
    client: Mapped["User"] = relationship()

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.state.value} {self.reservation_date}>"
