from datetime import datetime, timedelta

import pytest

from linguala import models
from linguala.premium import (
    LimitType,
    PremiumError,
    can_perform_action,
    get_premium_status,
    get_user_limits,
    grant_premium_access,
    is_premium_user,
    limits_to_dict,
    revoke_premium_access,
)


@pytest.fixture
async def user(session):
    user = models.User(email="ana@example.com", name="ana")
    session.add(user)
    await session.commit()
    return user


async def test_free_user_status(session, user):
    assert await get_premium_status(session, user.id) == {"isPremium": False, "daysRemaining": 0}


async def test_timed_grant(session, user):
    await grant_premium_access(session, user.id, 30)

    status = await get_premium_status(session, user.id)
    assert status == {"isPremium": True, "daysRemaining": 30}


async def test_permanent_grant_and_revoke(session, user):
    granted = await grant_premium_access(session, user.id)
    assert granted.premium_expires_at is None
    assert await get_premium_status(session, user.id) == {"isPremium": True, "daysRemaining": None}

    await revoke_premium_access(session, user.id)
    assert await get_premium_status(session, user.id) == {"isPremium": False, "daysRemaining": 0}


async def test_expired_premium_is_free(session, user):
    user.is_premium = True
    user.premium_expires_at = datetime.utcnow() - timedelta(days=1)
    await session.commit()

    assert not is_premium_user(user)
    assert await get_premium_status(session, user.id) == {"isPremium": False, "daysRemaining": 0}


async def test_unknown_user(session):
    with pytest.raises(PremiumError):
        await grant_premium_access(session, "missing", 10)
    with pytest.raises(PremiumError):
        await revoke_premium_access(session, "missing")
    assert (await get_premium_status(session, "missing"))["isPremium"] is False


def test_limits_by_tier():
    free = models.User(email="a@b.c", is_premium=False)
    premium = models.User(email="d@e.f", is_premium=True)

    assert get_user_limits(None)[LimitType.GLOSSARY_ENTRIES] == 100
    assert can_perform_action(free, LimitType.GLOSSARY_ENTRIES, 99)
    assert not can_perform_action(free, "GLOSSARY_ENTRIES", 100)
    assert can_perform_action(premium, LimitType.GLOSSARY_ENTRIES, 1_000_000)
    assert not can_perform_action(premium, LimitType.BULK_TRANSLATION_MAX, 1000)


def test_limits_to_dict():
    premium = models.User(email="d@e.f", is_premium=True)
    limits = limits_to_dict(get_user_limits(premium))
    assert limits["TRANSLATIONS_PER_DAY"] is None
    assert limits["BULK_TRANSLATION_MAX"] == 1000
