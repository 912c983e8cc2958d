"""
Service Identité / Identity service.
Inscription, connexion (session unique), déconnexion, validation des jetons.
Registration, login (single active session), logout, token validation.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carrental.exceptions import AuthenticationError, ValidationError
from carrental.models.user import AccessToken, User
from carrental.schemas.auth import RegisterRequest
from carrental.utils.audit import log_audit
from carrental.utils.auth import create_access_token, decode_token, hash_password, new_token_id, verify_password
from carrental.utils.clock import Clock

log = logging.getLogger(__name__)

_EMAIL_TAKEN = {"email": ["The email has already been taken."]}


class IdentityService:

    @staticmethod
    async def issue_token(db: AsyncSession, clock: Clock, user: User) -> str:
        """Émettre et persister un jeton / Issue and persist a token."""
        jti = new_token_id()
        db.add(AccessToken(user_id=user.id, jti=jti, created_at=clock.now()))
        await db.flush()
        return create_access_token(user.id, jti)

    @staticmethod
    async def register(db: AsyncSession, clock: Clock, data: RegisterRequest) -> tuple[User, str]:
        """Créer un compte et émettre un jeton / Create an account and issue a token."""
        email = data.email.lower()
        existing = await db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(_EMAIL_TAKEN)

        user = User(
            name=data.name,
            email=email,
            hashed_password=hash_password(data.password),
            role=data.role,
            country=data.country,
            city=data.city,
            job=data.job,
            description=data.description,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ValidationError(_EMAIL_TAKEN)

        token = await IdentityService.issue_token(db, clock, user)
        log.info("User %s registered as %s", user.id, user.role.value)
        return user, token

    @staticmethod
    async def login(db: AsyncSession, clock: Clock, email: str, password: str) -> tuple[User, str]:
        """
        Connexion : révoque tous les jetons existants puis en émet un seul.
        Login: revokes every existing token, then issues exactly one.
        """
        email = email.lower()
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.hashed_password):
            # Journal de tentative échouée, conservé malgré l'erreur / Failed attempt, kept despite the error
            log_audit(db, clock, "auth", user.id if user else 0, "LOGIN_FAILED", email)
            await db.commit()
            raise AuthenticationError("Invalid email or password")

        await db.execute(delete(AccessToken).where(AccessToken.user_id == user.id))
        token = await IdentityService.issue_token(db, clock, user)
        log_audit(db, clock, "auth", user.id, "LOGIN", user)
        return user, token

    @staticmethod
    async def authenticate(db: AsyncSession, clock: Clock, token: str) -> AccessToken:
        """Valider un jeton présenté / Validate a presented token."""
        payload = decode_token(token)
        if payload is None or payload.get("type") != "access" or not payload.get("jti"):
            raise AuthenticationError("Invalid or expired token")

        result = await db.execute(
            select(AccessToken)
            .where(AccessToken.jti == payload["jti"])
            .options(selectinload(AccessToken.user))
        )
        access_token = result.scalar_one_or_none()
        if access_token is None or str(access_token.user_id) != payload.get("sub"):
            raise AuthenticationError("Invalid or expired token")

        access_token.last_used_at = clock.now()
        return access_token

    @staticmethod
    async def logout(db: AsyncSession, access_token: AccessToken) -> None:
        """Révoquer uniquement le jeton présenté / Revoke only the presented token."""
        await db.execute(delete(AccessToken).where(AccessToken.id == access_token.id))
        await db.flush()
