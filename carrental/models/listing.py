"""Modèle Annonce / Listing model."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carrental.database import Base


class City(str, enum.Enum):
    """Villes desservies / Supported cities."""
    TETOUAN = "Tetouan"
    TANGER = "Tanger"
    HOUCEIMA = "Houceima"
    CHEFCHAOUEN = "Chefchaouen"
    LARACHE = "Larache"
    OUAZZANE = "Ouazzane"


PREMIUM_DURATIONS = (7, 15)


class Listing(Base):
    """Annonce de location d'un partenaire / A partner's car rental announcement."""
    __tablename__ = "listings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    car_model: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)  # #RRGGBB
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    premium_duration: Mapped[int | None] = mapped_column(Integer)  # 7 | 15 jours / days
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relations
    owner: Mapped["User"] = relationship()
    windows: Mapped[list["AvailabilityWindow"]] = relationship(
        back_populates="listing", order_by="AvailabilityWindow.id"
    )

    def __repr__(self) -> str:
        return f"<Listing {self.id} - {self.title}>"
