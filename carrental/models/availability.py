"""Modèle Disponibilité hebdomadaire / Weekly availability window model."""

import enum

from sqlalchemy import Boolean, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carrental.database import Base


class Weekday(str, enum.Enum):
    """Jour de la semaine, ordre canonique / Day of week, canonical order."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


WEEKDAYS = list(Weekday)


class AvailabilityWindow(Base):
    """Créneau récurrent d'une annonce / Recurring weekly slot of a listing.

    Pas de contrôle de chevauchement ni de capacité.
    No overlap check and no capacity limit.
    """
    __tablename__ = "availability_windows"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    listing_id: Mapped[int] = mapped_column(ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True)
    day: Mapped[Weekday] = mapped_column(Enum(Weekday), nullable=False)
    time_from: Mapped[str] = mapped_column("from", String(5), nullable=False)  # HH:MM
    time_to: Mapped[str] = mapped_column("to", String(5), nullable=False)  # HH:MM
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relations
    listing: Mapped["Listing"] = relationship(back_populates="windows")

    def __repr__(self) -> str:
        return f"<AvailabilityWindow listing={self.listing_id} {self.day.value} {self.time_from}-{self.time_to}>"
