"""
Dépendances d'authentification et d'autorisation / Authentication and authorization dependencies.
Injectées dans les routes via Depends().
"""

from typing import Annotated

from fastapi import Depends, Path
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.database import get_db
from carrental.exceptions import AuthenticationError, AuthorizationError
from carrental.models.user import AccessToken, Role, User
from carrental.schemas.common import MAX_INT
from carrental.services.identity import IdentityService
from carrental.utils.clock import Clock, get_clock

security = HTTPBearer(auto_error=False)

# Identifiant en chemin d'URL / Id taken from the URL path
EntityId = Annotated[int, Path(ge=1, le=MAX_INT)]


async def get_current_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> AccessToken:
    """Jeton présenté, validé contre access_tokens / Presented token, checked against access_tokens."""
    if credentials is None:
        raise AuthenticationError("Unauthenticated")
    return await IdentityService.authenticate(db, clock, credentials.credentials)


async def get_current_user(token: AccessToken = Depends(get_current_token)) -> User:
    return token.user


def require_role(role: Role):
    """Factory de dépendance qui vérifie le rôle / Dependency factory that checks the role."""

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role != role:
            raise AuthorizationError(f"This action requires the {role.value} role")
        return user

    return _check
