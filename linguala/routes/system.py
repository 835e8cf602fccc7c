"""Diagnostics for the LLM backend configuration."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ai.dashscope import DashScopeClient, LLMError, get_llm_client, verify_api_configuration
from ..config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/test-ai")
async def test_ai(client: DashScopeClient = Depends(get_llm_client)):
    """Round-trip a tiny prompt to confirm the model endpoint answers."""
    if not client.configured:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Missing API key"},
        )

    logger.info("Testing DashScope API connectivity")
    try:
        reply = await client.ping()
    except LLMError as e:
        logger.warning(f"DashScope connectivity test failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "API test failed", "details": str(e)},
        )

    return {
        "status": "success",
        "message": "DashScope API is reachable",
        "model": settings.dashscope.writing_model,
        "response": reply,
    }


@router.get("/config-check")
async def config_check() -> dict:
    """Report whether an API key is configured, without revealing it."""
    return {
        "environment": settings.environment.value,
        "dashscope": verify_api_configuration(),
        "baseUrl": settings.dashscope.base_url,
        "models": {
            "translation": settings.dashscope.translation_model,
            "writing": settings.dashscope.writing_model,
            "assistant": settings.dashscope.assistant_model,
        },
    }
