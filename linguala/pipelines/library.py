"""Per-user saved data: translation history, glossary and preferences."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from linguala import models
from linguala.premium import LimitType, get_user_limits

logger = logging.getLogger(__name__)

HISTORY_PAGE_SIZE = 100


class LibraryError(Exception):
    """Base class for saved-data errors."""
    status_code = 400


class DuplicateEntryError(LibraryError):
    """Raised when a glossary entry already exists."""
    status_code = 409


class GlossaryLimitError(LibraryError):
    """Raised when a user's glossary is full for their tier."""
    status_code = 403


class EntryNotFoundError(LibraryError):
    status_code = 404


class SettingsError(LibraryError):
    """Raised for settings that fail validation."""
    status_code = 400


class AppSettings(BaseModel):
    """User preferences, serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    # Appearance
    font_size: Literal["small", "medium", "large"] = "medium"
    compact_mode: bool = False
    show_animations: bool = True

    # Translation defaults
    default_source_lang: str = "auto"
    default_target_lang: str = "en"
    auto_detect_language: bool = True
    show_confidence_score: bool = False

    # Writing preferences
    default_writing_style: str = "simple"
    default_tone: str = "friendly"
    auto_corrections_only: bool = False

    # Performance (seconds / items)
    auto_save_interval: int = 30
    processing_timeout: int = 30
    max_history_items: int = 100

    # Notifications
    enable_sound_notifications: bool = False
    show_processing_toasts: bool = True
    show_success_toasts: bool = True
    show_error_toasts: bool = True

    # Data & privacy
    save_translation_history: bool = True
    data_retention_days: int = 30
    analytics_enabled: bool = False

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def history_to_dict(entry: models.TranslationHistory) -> dict[str, Any]:
    return {
        "id": entry.id,
        "sourceText": entry.source_text,
        "translatedText": entry.translated_text,
        "sourceLang": entry.source_lang,
        "targetLang": entry.target_lang,
        "domain": entry.domain,
        "createdAt": _iso(entry.created_at),
    }


def glossary_to_dict(entry: models.GlossaryEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "source": entry.source,
        "target": entry.target,
        "domain": entry.domain,
        "notes": entry.notes,
        "createdAt": _iso(entry.created_at),
    }


# --- Translation history ---

async def list_history(session: AsyncSession, user: models.User, limit: int = HISTORY_PAGE_SIZE) -> list[models.TranslationHistory]:
    """Newest-first history, restricted to the tier's retention window."""
    query = select(models.TranslationHistory).where(models.TranslationHistory.user_id == user.id)

    window_days = get_user_limits(user)[LimitType.TRANSLATION_HISTORY_DAYS]
    if window_days != float("inf"):
        cutoff = datetime.utcnow() - timedelta(days=window_days)
        query = query.where(models.TranslationHistory.created_at >= cutoff)

    result = await session.execute(
        query.order_by(models.TranslationHistory.created_at.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def save_history(
    session: AsyncSession,
    user_id: str,
    source_text: str,
    translated_text: str,
    source_lang: str,
    target_lang: str,
    domain: str | None = None,
) -> models.TranslationHistory:
    entry = models.TranslationHistory(
        user_id=user_id,
        source_text=source_text,
        translated_text=translated_text,
        source_lang=source_lang,
        target_lang=target_lang,
        domain=domain or "general",
    )
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return entry


# --- Glossary ---

async def list_glossary(session: AsyncSession, user_id: str) -> list[models.GlossaryEntry]:
    result = await session.execute(
        select(models.GlossaryEntry)
        .where(models.GlossaryEntry.user_id == user_id)
        .order_by(models.GlossaryEntry.created_at.desc())
    )
    return list(result.scalars().all())


async def get_user_glossary(session: AsyncSession, user_id: str) -> list[models.GlossaryEntry]:
    """Glossary entries used to steer the user's translations."""
    return await list_glossary(session, user_id)


async def count_glossary(session: AsyncSession, user_id: str) -> int:
    result = await session.execute(
        select(func.count()).select_from(models.GlossaryEntry).where(models.GlossaryEntry.user_id == user_id)
    )
    return int(result.scalar_one())


async def add_glossary_entry(
    session: AsyncSession,
    user: models.User,
    source: str,
    target: str,
    domain: str | None = None,
    notes: str | None = None,
) -> models.GlossaryEntry:
    """Add a term pair for ``user``.

    Raises:
        GlossaryLimitError: The user's tier allows no more entries
        DuplicateEntryError: Same source, target and domain already saved
    """
    limit = get_user_limits(user)[LimitType.GLOSSARY_ENTRIES]
    if await count_glossary(session, user.id) >= limit:
        raise GlossaryLimitError(
            f"Glossary limit of {int(limit)} entries reached. Upgrade to premium for unlimited entries."
        )

    entry = models.GlossaryEntry(
        user_id=user.id,
        source=source,
        target=target,
        domain=domain or "general",
        notes=notes,
    )
    session.add(entry)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise DuplicateEntryError("This glossary entry already exists") from e
    await session.refresh(entry)
    return entry


async def delete_glossary_entry(session: AsyncSession, user_id: str, entry_id: str) -> None:
    """Delete one of the user's entries; other users' entries are invisible.

    Raises:
        EntryNotFoundError: No such entry for this user
    """
    result = await session.execute(
        delete(models.GlossaryEntry).where(
            models.GlossaryEntry.id == entry_id,
            models.GlossaryEntry.user_id == user_id,
        )
    )
    await session.commit()
    if not result.rowcount:
        raise EntryNotFoundError("Glossary entry not found")


# --- Settings ---

async def _settings_row(session: AsyncSession, user_id: str) -> models.UserSettings | None:
    return await session.get(models.UserSettings, user_id)


def _validate(data: dict[str, Any]) -> AppSettings:
    try:
        return AppSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings: {e.errors()[0]['msg']}") from e


async def get_user_settings(session: AsyncSession, user_id: str) -> AppSettings:
    """Stored preferences merged over the defaults."""
    row = await _settings_row(session, user_id)
    if row is None or not row.data:
        return AppSettings()
    return _validate(row.data)


async def save_user_settings(session: AsyncSession, user_id: str, app_settings: AppSettings) -> AppSettings:
    data = app_settings.to_public()
    row = await _settings_row(session, user_id)
    if row is None:
        session.add(models.UserSettings(user_id=user_id, data=data))
    else:
        row.data = data
    await session.commit()
    return app_settings


async def update_user_settings(session: AsyncSession, user_id: str, updates: dict[str, Any]) -> AppSettings:
    """Apply a partial update; keys may be camelCase or snake_case."""
    current = await get_user_settings(session, user_id)
    updates = {(to_camel(k) if "_" in k else k): v for k, v in updates.items()}
    merged = {**current.to_public(), **updates}
    return await save_user_settings(session, user_id, _validate(merged))


async def reset_user_settings(session: AsyncSession, user_id: str) -> AppSettings:
    row = await _settings_row(session, user_id)
    if row is not None:
        await session.delete(row)
        await session.commit()
    return AppSettings()


async def export_settings(session: AsyncSession, user_id: str) -> str:
    settings_obj = await get_user_settings(session, user_id)
    return json.dumps(settings_obj.to_public(), indent=2)


async def import_settings(session: AsyncSession, user_id: str, payload: str | dict[str, Any]) -> AppSettings:
    """Merge exported settings over the defaults and store them.

    Raises:
        SettingsError: Payload is not a JSON object or has invalid values
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise SettingsError("Invalid settings data") from e
    if not isinstance(payload, dict):
        raise SettingsError("Invalid settings data")

    payload = {(to_camel(k) if "_" in k else k): v for k, v in payload.items()}
    merged = {**AppSettings().to_public(), **payload}
    return await save_user_settings(session, user_id, _validate(merged))


async def clear_user_data(session: AsyncSession, user_id: str) -> dict[str, int]:
    """Remove history, glossary and stored settings for ``user_id``."""
    history = await session.execute(
        delete(models.TranslationHistory).where(models.TranslationHistory.user_id == user_id)
    )
    glossary = await session.execute(
        delete(models.GlossaryEntry).where(models.GlossaryEntry.user_id == user_id)
    )
    stored = await session.execute(
        delete(models.UserSettings).where(models.UserSettings.user_id == user_id)
    )
    await session.commit()
    counts = {
        "translations": history.rowcount or 0,
        "glossaryEntries": glossary.rowcount or 0,
        "settings": stored.rowcount or 0,
    }
    logger.info(f"Cleared data for user {user_id}: {counts}")
    return counts
