"""User registration and credential checks."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from linguala import models
from linguala.security import hash_password, verify_password

logger = logging.getLogger(__name__)


class RegistrationError(Exception):
    """Raised when a new account cannot be created."""
    pass


@dataclass
class RegisteredUser:
    id: str
    email: str
    name: str | None

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name}


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(session: AsyncSession, email: str) -> models.User | None:
    result = await session.execute(
        select(models.User).where(models.User.email == _normalize_email(email))
    )
    return result.scalar_one_or_none()


async def register_user(
    session: AsyncSession,
    email: str,
    password: str,
    name: str | None = None,
) -> RegisteredUser:
    """Create a free-tier account.

    Args:
        session: Database session
        email: Login email, stored lower-cased
        password: Plain password, stored as a bcrypt hash
        name: Display name, defaults to the local part of the email

    Returns:
        RegisteredUser

    Raises:
        RegistrationError: If the email is already registered
    """
    email = _normalize_email(email)
    if await get_user_by_email(session, email) is not None:
        raise RegistrationError("User already exists")

    user = models.User(
        email=email,
        name=name or email.split("@")[0],
        password_hash=hash_password(password),
        is_premium=False,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise RegistrationError("User already exists") from e
    await session.refresh(user)

    logger.info(f"Registered user {user.id}")
    return RegisteredUser(id=user.id, email=user.email, name=user.name)


async def authenticate_user(session: AsyncSession, email: str, password: str) -> models.User | None:
    """Return the user when the password matches, else None."""
    user = await get_user_by_email(session, email)
    if user is None or not user.password_hash:
        return None
    if not verify_password(password, user.password_hash):
        logger.info(f"Failed login for user {user.id}")
        return None
    return user
