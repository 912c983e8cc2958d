"""
Routes d'authentification / Authentication routes.
Inscription, connexion, déconnexion, profil utilisateur.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.api.deps import get_current_token, get_current_user
from carrental.config import settings
from carrental.database import get_db
from carrental.models.user import AccessToken, User
from carrental.rate_limit import limiter
from carrental.schemas.auth import LoginRequest, RegisterRequest, TokenData, UserProfile
from carrental.schemas.common import ApiResponse
from carrental.services.identity import IdentityService
from carrental.utils.clock import Clock, get_clock

router = APIRouter()


@router.post("/register", response_model=ApiResponse[TokenData], status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_REGISTER)
async def register(
    request: Request,
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Inscription partenaire ou client / Partner or client registration."""
    user, token = await IdentityService.register(db, clock, data)
    return ApiResponse(
        message="Registration successful",
        data=TokenData(user=UserProfile.model_validate(user), token=token),
    )


@router.post("/login", response_model=ApiResponse[TokenData])
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Connexion par identifiants / Login with credentials."""
    user, token = await IdentityService.login(db, clock, data.email, data.password)
    return ApiResponse(
        message="Login successful",
        data=TokenData(user=UserProfile.model_validate(user), token=token),
    )


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    token: AccessToken = Depends(get_current_token),
    db: AsyncSession = Depends(get_db),
):
    """Révoquer le jeton courant / Revoke the current token."""
    await IdentityService.logout(db, token)
    return ApiResponse(message="Logged out successfully")


@router.get("/me", response_model=ApiResponse[UserProfile])
async def me(user: User = Depends(get_current_user)):
    """Profil de l'utilisateur connecté / Current user profile."""
    return ApiResponse(data=UserProfile.model_validate(user))
