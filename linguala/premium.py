"""Premium tier status, grants and per-tier usage limits."""
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from . import models

logger = logging.getLogger(__name__)


class LimitType(str, Enum):
    """Usage limits that differ between tiers."""
    TRANSLATIONS_PER_DAY = "TRANSLATIONS_PER_DAY"
    GLOSSARY_ENTRIES = "GLOSSARY_ENTRIES"
    TRANSLATION_HISTORY_DAYS = "TRANSLATION_HISTORY_DAYS"
    BULK_TRANSLATION_MAX = "BULK_TRANSLATION_MAX"


PREMIUM_LIMITS: dict[str, dict[LimitType, float]] = {
    "FREE": {
        LimitType.TRANSLATIONS_PER_DAY: 50,
        LimitType.GLOSSARY_ENTRIES: 100,
        LimitType.TRANSLATION_HISTORY_DAYS: 7,
        LimitType.BULK_TRANSLATION_MAX: 10,
    },
    "PREMIUM": {
        LimitType.TRANSLATIONS_PER_DAY: math.inf,
        LimitType.GLOSSARY_ENTRIES: math.inf,
        LimitType.TRANSLATION_HISTORY_DAYS: math.inf,
        LimitType.BULK_TRANSLATION_MAX: 1000,
    },
}


class PremiumError(Exception):
    """Raised when a premium grant or revoke targets an unknown user."""
    pass


def is_premium_user(user: models.User | None, now: datetime | None = None) -> bool:
    """Active premium: flag set and not yet expired. No expiry means permanent."""
    if user is None or not user.is_premium:
        return False
    if user.premium_expires_at is None:
        return True
    return user.premium_expires_at > (now or datetime.utcnow())


async def get_premium_status(session: AsyncSession, user_id: str) -> dict[str, Any]:
    """Premium flag plus whole days remaining.

    ``daysRemaining`` is None for a permanent grant and 0 for free users.
    """
    user = await session.get(models.User, user_id)
    if user is None:
        return {"isPremium": False, "daysRemaining": 0}

    now = datetime.utcnow()
    premium = is_premium_user(user, now)
    if user.premium_expires_at is not None:
        seconds = (user.premium_expires_at - now).total_seconds()
        days_remaining: int | None = max(0, math.ceil(seconds / 86400))
    else:
        days_remaining = None if premium else 0

    return {"isPremium": premium, "daysRemaining": days_remaining}


async def grant_premium_access(
    session: AsyncSession,
    user_id: str,
    duration_days: int | None = None,
) -> models.User:
    """Grant premium for ``duration_days``, or permanently when omitted.

    Raises:
        PremiumError: If the user does not exist
    """
    user = await session.get(models.User, user_id)
    if user is None:
        raise PremiumError(f"User {user_id} not found")

    user.is_premium = True
    user.premium_expires_at = (
        datetime.utcnow() + timedelta(days=duration_days) if duration_days else None
    )
    await session.commit()
    await session.refresh(user)
    logger.info(f"Granted premium to {user_id} for {duration_days or 'unlimited'} days")
    return user


async def revoke_premium_access(session: AsyncSession, user_id: str) -> models.User:
    user = await session.get(models.User, user_id)
    if user is None:
        raise PremiumError(f"User {user_id} not found")

    user.is_premium = False
    user.premium_expires_at = None
    await session.commit()
    await session.refresh(user)
    logger.info(f"Revoked premium from {user_id}")
    return user


def get_user_limits(user: models.User | None) -> dict[LimitType, float]:
    return PREMIUM_LIMITS["PREMIUM" if is_premium_user(user) else "FREE"]


def can_perform_action(user: models.User | None, action: LimitType | str, current_usage: int = 0) -> bool:
    """True while ``current_usage`` is below the user's limit for ``action``."""
    limit = get_user_limits(user)[LimitType(action)]
    return current_usage < limit


def limits_to_dict(limits: dict[LimitType, float]) -> dict[str, int | None]:
    """JSON-safe limits: unlimited becomes None."""
    return {key.value: (None if math.isinf(value) else int(value)) for key, value in limits.items()}
