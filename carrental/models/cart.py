"""Modèle Panier / Cart model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carrental.database import Base


class Cart(Base):
    """Annonce mise de côté par un client / Listing saved for later by a client."""
    __tablename__ = "carts"
    __table_args__ = (UniqueConstraint("listing_id", "user_id", name="uq_carts_listing_user"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    listing_id: Mapped[int] = mapped_column(ForeignKey("listings.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    promo_code: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    # Relations
    listing: Mapped["Listing"] = relationship()

    def __repr__(self) -> str:
        return f"<Cart user={self.user_id} listing={self.listing_id}>"
