"""
Modèles Identité / Identity models.
User (partenaire ou client) et jetons d'accès persistés.
User (partner or client) and persisted access tokens.
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carrental.database import Base


class Role(str, enum.Enum):
    """Rôle fixé à l'inscription / Role fixed at registration."""
    PARTNER = "partner"
    CLIENT = "client"


class User(Base):
    """Utilisateur de la place de marché / Marketplace user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(Enum(Role), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    job: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relations
    tokens: Mapped[list["AccessToken"]] = relationship(back_populates="user", cascade="all, delete-orphan")

    @property
    def role_name(self) -> str:
        return "Partner" if self.role == Role.PARTNER else "Client"

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class AccessToken(Base):
    """Jeton émis ; valide tant que la ligne existe / Issued token, valid while its row exists."""

    __tablename__ = "access_tokens"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    jti: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Relations
    user: Mapped["User"] = relationship(back_populates="tokens")

    def __repr__(self) -> str:
        return f"<AccessToken user={self.user_id}>"
