"""Saved translations, glossary and settings endpoints (sign-in required)."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from .. import models
from ..db import get_session
from ..pipelines import library
from ..schemas import GlossaryCreateRequest, SaveTranslationRequest, SettingsImportRequest
from ..security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["library"])


@router.get("/translations")
async def list_translations(
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    entries = await library.list_history(session, user)
    return {"translations": [library.history_to_dict(e) for e in entries]}


@router.post("/translations")
async def save_translation(
    request: SaveTranslationRequest,
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    if not (request.source_text and request.translated_text and request.source_lang and request.target_lang):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

    entry = await library.save_history(
        session,
        user.id,
        request.source_text,
        request.translated_text,
        request.source_lang,
        request.target_lang,
        request.domain,
    )
    return {"translation": library.history_to_dict(entry)}


@router.get("/glossary")
async def list_glossary(
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    entries = await library.list_glossary(session, user.id)
    return {"glossaryEntries": [library.glossary_to_dict(e) for e in entries]}


@router.post("/glossary")
async def create_glossary_entry(
    request: GlossaryCreateRequest,
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    if not request.source or not request.target:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Source and target terms are required",
        )

    entry = await library.add_glossary_entry(
        session,
        user,
        request.source,
        request.target,
        request.domain,
        request.notes,
    )
    return {"glossaryEntry": library.glossary_to_dict(entry)}


@router.delete("/glossary")
async def delete_glossary_entry(
    id: str | None = Query(default=None),
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    if not id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Entry ID is required")
    await library.delete_glossary_entry(session, user.id, id)
    return {"success": True}


@router.get("/settings")
async def read_settings(
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    app_settings = await library.get_user_settings(session, user.id)
    return {"settings": app_settings.to_public()}


@router.patch("/settings")
async def update_settings(
    updates: dict[str, Any] = Body(...),
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    app_settings = await library.update_user_settings(session, user.id, updates)
    return {"settings": app_settings.to_public()}


@router.delete("/settings")
async def reset_settings(
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    app_settings = await library.reset_user_settings(session, user.id)
    return {"settings": app_settings.to_public()}


@router.get("/settings/export")
async def export_settings(
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> Response:
    exported = await library.export_settings(session, user.id)
    return Response(
        content=exported,
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="linguala-settings.json"'},
    )


@router.post("/settings/import")
async def import_settings(
    request: SettingsImportRequest,
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    app_settings = await library.import_settings(session, user.id, request.data)
    return {"success": True, "settings": app_settings.to_public()}


@router.delete("/account/data")
async def clear_account_data(
    user: models.User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    removed = await library.clear_user_data(session, user.id)
    return {"success": True, "removed": removed}
