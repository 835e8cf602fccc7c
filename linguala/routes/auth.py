"""Registration, login, profile and premium administration endpoints."""
from __future__ import annotations

import hmac
import logging
import re

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from .. import models
from ..config import settings
from ..db import get_session
from ..pipelines.accounts import RegistrationError, authenticate_user, register_user
from ..premium import (
    PremiumError,
    get_premium_status,
    get_user_limits,
    grant_premium_access,
    limits_to_dict,
    revoke_premium_access,
)
from ..schemas import (
    PremiumGrantRequest,
    PremiumRevokeRequest,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserDTO,
)
from ..security import create_access_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def require_admin_token(x_admin_token: str | None = Header(default=None)) -> None:
    """Guard for premium administration; disabled when no token is configured."""
    expected = settings.auth.admin_token
    if not expected or not x_admin_token or not hmac.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post("/auth/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> RegisterResponse:
    if not request.email or not request.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )
    if not EMAIL_RE.match(request.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

    min_length = settings.auth.min_password_length
    if len(request.password) < min_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {min_length} characters long",
        )

    try:
        user = await register_user(session, request.email, request.password, request.name)
    except RegistrationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return RegisterResponse(
        message="User registered successfully",
        user=UserDTO(id=user.id, email=user.email, name=user.name),
    )


@router.post("/auth/token", response_model=TokenResponse)
async def login(
    form: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """OAuth2 password flow; the username field carries the email."""
    user = await authenticate_user(session, form.username, form.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(access_token=create_access_token({"sub": user.id}))


@router.get("/auth/me", response_model=ProfileResponse)
async def me(
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    premium = await get_premium_status(session, user.id)
    return ProfileResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        image=user.image,
        is_premium=premium["isPremium"],
        days_remaining=premium["daysRemaining"],
        limits=limits_to_dict(get_user_limits(user)),
    )


@router.post("/admin/premium/grant", dependencies=[Depends(require_admin_token)])
async def grant_premium(
    request: PremiumGrantRequest,
    session: AsyncSession = Depends(get_session),
) -> dict:
    try:
        await grant_premium_access(session, request.user_id, request.duration_days)
    except PremiumError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, **await get_premium_status(session, request.user_id)}


@router.post("/admin/premium/revoke", dependencies=[Depends(require_admin_token)])
async def revoke_premium(
    request: PremiumRevokeRequest,
    session: AsyncSession = Depends(get_session),
) -> dict:
    try:
        await revoke_premium_access(session, request.user_id)
    except PremiumError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"success": True, **await get_premium_status(session, request.user_id)}
