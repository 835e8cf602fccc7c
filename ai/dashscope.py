"""DashScope (Alibaba Cloud Qwen) client over the OpenAI-compatible API.

Wraps ``openai.AsyncOpenAI`` with per-call timeouts, retry on transient
failures and a single error type for callers to catch.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import openai
from openai import AsyncOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from linguala.config import settings

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (
    openai.APIConnectionError,  # includes APITimeoutError
    openai.InternalServerError,
    openai.RateLimitError,
)


class LLMError(Exception):
    """Raised when an LLM request cannot produce a usable reply."""
    pass


class DashScopeClient:
    """Thin async client for DashScope chat completions."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        *,
        sdk_client: Any | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.dashscope.api_key
        self.base_url = base_url or settings.dashscope.base_url
        self._sdk = sdk_client

    @property
    def configured(self) -> bool:
        return bool(self.api_key) or self._sdk is not None

    def _client(self) -> Any:
        if self._sdk is None:
            if not self.api_key:
                raise LLMError("DASHSCOPE_API_KEY not configured")
            # Retries are handled by tenacity below
            self._sdk = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, max_retries=0)
        return self._sdk

    @retry(
        stop=stop_after_attempt(settings.dashscope.max_retries + 1),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True,
    )
    async def _create(self, **kwargs: Any) -> Any:
        return await self._client().chat.completions.create(**kwargs)

    async def complete(
        self,
        model: str,
        messages: list[dict[str, str]],
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
        extra_body: dict[str, Any] | None = None,
    ) -> str:
        """Run a chat completion and return the stripped reply text.

        Raises:
            LLMError: If the key is missing, the request fails or the reply is empty
        """
        kwargs: dict[str, Any] = {"model": model, "messages": messages}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if temperature is not None:
            kwargs["temperature"] = temperature
        if timeout is not None:
            kwargs["timeout"] = timeout
        if extra_body:
            kwargs["extra_body"] = extra_body

        try:
            response = await self._create(**kwargs)
        except LLMError:
            raise
        except openai.OpenAIError as e:
            logger.error(f"DashScope request to {model} failed: {e}")
            raise LLMError(f"API request failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        text = (content or "").strip()
        if not text:
            raise LLMError("Empty response from model")
        return text

    async def ping(self) -> str:
        """Connectivity probe used by the diagnostics endpoint."""
        return await self.complete(
            settings.dashscope.writing_model,
            [
                {"role": "system", "content": 'You are a test assistant. Return only the word "OK".'},
                {"role": "user", "content": "test"},
            ],
            timeout=settings.dashscope.ping_timeout,
        )


def verify_api_configuration(api_key: str | None = None) -> dict[str, Any]:
    """Check that an API key is present and looks like a DashScope key."""
    key = api_key if api_key is not None else settings.dashscope.api_key

    if not key:
        return {
            "configured": False,
            "error": "DASHSCOPE_API_KEY not found in environment variables. Please set it in .env file.",
        }

    if not key.startswith("sk-"):
        return {
            "configured": False,
            "error": 'Invalid API key format. DashScope API keys should start with "sk-"',
        }

    return {
        "configured": True,
        "keyPreview": f"{key[:6]}...{key[-4:]}",
    }


@lru_cache(maxsize=1)
def get_client() -> DashScopeClient:
    """Process-wide client."""
    return DashScopeClient()


def get_llm_client() -> DashScopeClient:
    """FastAPI dependency returning the shared client."""
    return get_client()
