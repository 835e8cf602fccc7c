"""Translation, writing assistance, diff and language listing endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ai.dashscope import DashScopeClient, get_llm_client
from ai.translation import translate_text
from ai.writing import (
    WritingServiceError,
    assist_text,
    basic_improvement,
    basic_rephrase,
    get_word_alternatives,
    improve_text,
    rephrase_text,
)
from config.languages import LANGUAGE_MAP
from .. import models
from ..db import get_session
from ..diff import generate_diff, summarize_diff
from ..pipelines.library import get_user_glossary, get_user_settings, save_history
from ..schemas import (
    AlternativesResponse,
    AssistResponse,
    DiffPartDTO,
    DiffRequest,
    DiffResponse,
    ImproveResponse,
    LanguageDTO,
    RephraseResponse,
    TranslateRequest,
    TranslateResponse,
    WriteRequest,
)
from ..security import get_optional_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["text"])

ASSIST_OUTPUT_FIELDS = {
    "improve": "improved_text",
    "rephrase": "rephrased_text",
    "summarize": "summary_text",
}


async def _record_history(
    session: AsyncSession,
    user: models.User,
    request: TranslateRequest,
    result: TranslateResponse,
) -> None:
    try:
        preferences = await get_user_settings(session, user.id)
        if not preferences.save_translation_history:
            return
        await save_history(
            session,
            user.id,
            request.text or "",
            result.translated_text,
            result.source_lang,
            result.target_lang,
            request.domain,
        )
    except SQLAlchemyError as e:
        await session.rollback()
        logger.warning(f"Could not save translation history for {user.id}: {e}")


@router.post("/translate", response_model_exclude_none=True)
async def translate(
    request: TranslateRequest,
    session: AsyncSession = Depends(get_session),
    client: DashScopeClient = Depends(get_llm_client),
    user: models.User | None = Depends(get_optional_user),
) -> TranslateResponse | AssistResponse:
    """Translate text, or improve / rephrase / summarize it.

    Signed-in callers get their saved glossary applied when the request
    carries none, and the translation is added to their history.
    """
    if not request.text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Text is required")

    operation = request.operation or "translate"

    if operation == "translate":
        if not request.target_lang:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Target language is required for translation",
            )

        glossary = request.glossary
        if glossary is None and user is not None:
            glossary = await get_user_glossary(session, user.id)

        result = await translate_text(
            request.text,
            request.source_lang,
            request.target_lang,
            domain=request.domain,
            glossary=glossary,
            client=client,
        )
        response = TranslateResponse(
            translated_text=result.translated_text,
            source_lang=result.source_lang,
            target_lang=result.target_lang,
            fallback=result.fallback,
        )
        if user is not None:
            await _record_history(session, user, request, response)
        return response

    if operation in ASSIST_OUTPUT_FIELDS:
        result = await assist_text(operation, request.text, client=client)
        return AssistResponse(
            original_text=result.original_text,
            operation=result.operation,
            fallback=result.fallback,
            **{ASSIST_OUTPUT_FIELDS[operation]: result.output_text},
        )

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid operation. Supported: translate, improve, rephrase, summarize",
    )


@router.post("/write")
async def write(
    request: WriteRequest,
    client: DashScopeClient = Depends(get_llm_client),
) -> ImproveResponse | AlternativesResponse | RephraseResponse:
    """Editor assistance on the fast writing model.

    Model failures fall back to local rewrites flagged ``fallback: true``.
    """
    operation = request.operation

    if operation == "alternatives" and not request.word:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Word is required for alternatives operation",
        )
    if operation in ("improve", "rephrase") and not request.text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Text is required")

    if operation == "improve":
        try:
            improved = await improve_text(
                request.text,
                corrections_only=request.corrections_only,
                writing_style=request.writing_style,
                tone=request.tone,
                client=client,
            )
            return ImproveResponse(original_text=improved.original_text, improved_text=improved.improved_text)
        except WritingServiceError as e:
            logger.warning(f"Improve fell back to local rules: {e}")
            return ImproveResponse(
                original_text=request.text,
                improved_text=basic_improvement(request.text),
                fallback=True,
            )

    if operation == "alternatives":
        try:
            alternatives = await get_word_alternatives(
                request.word,
                request.context or "",
                mode=request.mode,
                client=client,
            )
            return AlternativesResponse(word=alternatives.word, alternatives=alternatives.alternatives)
        except WritingServiceError as e:
            logger.warning(f"Alternatives unavailable: {e}")
            return AlternativesResponse(word=request.word, alternatives=[], fallback=True)

    if operation == "rephrase":
        try:
            rephrased = await rephrase_text(request.text, client=client)
            return RephraseResponse(
                original_text=rephrased.original_text,
                rephrased_text=rephrased.rephrased_text,
                rephrase_options=rephrased.rephrase_options,
            )
        except WritingServiceError as e:
            logger.warning(f"Rephrase fell back to local rules: {e}")
            local = basic_rephrase(request.text)
            return RephraseResponse(
                original_text=request.text,
                rephrased_text=local,
                rephrase_options=[local],
                fallback=True,
            )

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid operation. Supported: improve, alternatives, rephrase",
    )


@router.post("/diff", response_model=DiffResponse)
async def diff(request: DiffRequest) -> DiffResponse:
    """Word-level diff between an original and an edited text."""
    parts = generate_diff(request.original, request.improved)
    return DiffResponse(
        parts=[DiffPartDTO(type=p.type.value, text=p.text) for p in parts],
        summary=summarize_diff(parts),
    )


@router.get("/languages", response_model=list[LanguageDTO])
async def languages() -> list[LanguageDTO]:
    return [LanguageDTO(code=code, name=name) for code, name in LANGUAGE_MAP.items()]
