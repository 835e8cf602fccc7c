"""Writing assistance: text improvement, word alternatives and rephrasing.

Uses the fast ``qwen-flash`` model with short, primed prompts for the
interactive editor, and ``qwen-turbo`` with system prompts for the
improve / rephrase / summarize operations of the translate endpoint. The
latter degrade to local rule-based rewrites when the model is unavailable.
"""
from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field

from ai.dashscope import DashScopeClient, LLMError, get_client
from linguala.config import settings
from linguala.pipelines.normalization import adaptive_max_tokens, clean_text, normalize_whitespace

logger = logging.getLogger(__name__)

STYLE_MAP = {"simple": "simple", "business": "business", "casual": "casual", "academic": "formal"}

ASSISTANT_PROMPTS = {
    "improve": (
        "You are a professional writing assistant. Improve the given text by enhancing clarity, "
        "grammar, style, and readability while maintaining the original meaning. "
        "Return only the improved text without explanations."
    ),
    "rephrase": (
        "You are a professional writing assistant. Rephrase the given text using different words "
        "and sentence structures while keeping the same meaning. Make it sound natural and engaging. "
        "Return only the rephrased text without explanations."
    ),
    "summarize": (
        "You are a professional summarization assistant. Create a concise summary of the given text "
        "that captures the main points and key information. Keep it clear and well-structured. "
        "Return only the summary without explanations."
    ),
}

_IMPROVE_RULES = [
    (r"\bi\b", "I"),
    (r"\bim\b", "I'm"),
    (r"\bits\b", "it's"),
    (r"\byour\b", "you're"),
    (r"\bwont\b", "won't"),
    (r"\bdont\b", "don't"),
    (r"\bcant\b", "can't"),
]

_REPHRASE_RULES = [
    (r"\bvery\b", "extremely"),
    (r"\bgood\b", "excellent"),
    (r"\bbad\b", "poor"),
    (r"\bnice\b", "pleasant"),
    (r"\bbig\b", "large"),
    (r"\bsmall\b", "tiny"),
    (r"\bfast\b", "quick"),
    (r"\bslow\b", "sluggish"),
]

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_WORD_RE = re.compile(r"[\w']+")


class WritingServiceError(Exception):
    """Raised when a writing operation cannot be completed by the model."""
    pass


@dataclass
class WritingResult:
    original_text: str
    improved_text: str
    operation: str = "improve"
    fallback: bool = False


@dataclass
class AlternativesResult:
    word: str
    alternatives: list[str]
    operation: str = "alternatives"
    fallback: bool = False


@dataclass
class RephraseResult:
    original_text: str
    rephrased_text: str
    rephrase_options: list[str] = field(default_factory=list)
    operation: str = "rephrase"
    fallback: bool = False


@dataclass
class AssistResult:
    """Result of an improve / rephrase / summarize request."""
    operation: str
    original_text: str
    output_text: str
    fallback: bool = False


def parse_string_list(content: str) -> list[str] | None:
    """Parse a JSON list of strings from a model reply.

    Prompts end with ``["`` so the model often answers with the rest of the
    list only; that continuation is tried as well.
    """
    for candidate in (content, '["' + content):
        try:
            parsed = json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]
    return None


async def improve_text(
    text: str,
    *,
    corrections_only: bool = False,
    writing_style: str | None = None,
    tone: str | None = None,
    client: DashScopeClient | None = None,
) -> WritingResult:
    """Improve or correct ``text``.

    Raises:
        WritingServiceError: If the model fails or returns the text unchanged
    """
    logger.info(f"Improving text: {text[:50]}")
    cleaned = clean_text(text)

    prompt = "Fix:\n" if corrections_only else "Improve:\n"
    if writing_style:
        prompt += f"({STYLE_MAP.get(writing_style, writing_style)}) "
    if tone:
        prompt += f"({tone}) "
    prompt += cleaned

    try:
        improved = await (client or get_client()).complete(
            settings.dashscope.writing_model,
            [{"role": "user", "content": prompt}],
            max_tokens=adaptive_max_tokens(cleaned),
            temperature=0.1 if corrections_only else 0.3,
            timeout=settings.dashscope.writing_timeout,
        )
    except LLMError as e:
        logger.error(f"Improve writing error: {e}")
        raise WritingServiceError("Text improvement service unavailable") from e

    if improved == text:
        raise WritingServiceError("Text improvement service unavailable")

    return WritingResult(original_text=text, improved_text=improved)


async def get_word_alternatives(
    word: str,
    context: str = "",
    *,
    mode: str | None = None,
    client: DashScopeClient | None = None,
) -> AlternativesResult:
    """Suggest up to five replacements (or translations) for ``word`` in context.

    Raises:
        WritingServiceError: If the model call fails
    """
    logger.info(f"Getting alternatives for word: {word}")
    cleaned_context = clean_text(context)
    max_tokens = min(adaptive_max_tokens(f"{word} {cleaned_context}"), 200)

    kind = "translations" if mode == "translate" else "alternatives"
    prompt = f'5 {kind} for "{word}" in "{cleaned_context}":\n["'

    try:
        content = await (client or get_client()).complete(
            settings.dashscope.writing_model,
            [{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=0.7,
            timeout=settings.dashscope.writing_timeout,
        )
    except LLMError as e:
        logger.error(f"Get alternatives error: {e}")
        raise WritingServiceError("Word alternatives service unavailable") from e

    alternatives = parse_string_list(content)
    if alternatives is None:
        alternatives = _WORD_RE.findall(content)[:5]

    filtered = [alt for alt in alternatives if alt.lower() != word.lower()]
    return AlternativesResult(word=word, alternatives=filtered[:5])


async def rephrase_text(text: str, *, client: DashScopeClient | None = None) -> RephraseResult:
    """Ask for three rephrasings of ``text``.

    Raises:
        WritingServiceError: If the model call fails
    """
    cleaned = clean_text(text)

    try:
        content = await (client or get_client()).complete(
            settings.dashscope.writing_model,
            [{"role": "user", "content": f'3 rephrase options:\n{cleaned}\n["'}],
            max_tokens=adaptive_max_tokens(cleaned),
            timeout=settings.dashscope.writing_timeout,
        )
    except LLMError as e:
        logger.error(f"Rephrase text error: {e}")
        raise WritingServiceError("Text rephrasing service unavailable") from e

    options = parse_string_list(content)
    if options is None:
        options = [content]

    return RephraseResult(
        original_text=text,
        rephrased_text=options[0] if options else text,
        rephrase_options=[opt for opt in options if opt and opt != text],
    )


def basic_improvement(text: str) -> str:
    """Rule-based grammar touch-ups used when the model is unavailable."""
    for pattern, replacement in _IMPROVE_RULES:
        text = re.sub(pattern, replacement, text)
    return normalize_whitespace(text)


def basic_rephrase(text: str) -> str:
    """Swap a handful of common adjectives for stronger synonyms."""
    for pattern, replacement in _REPHRASE_RULES:
        text = re.sub(pattern, replacement, text)
    return text


def basic_summary(text: str) -> str:
    """Leading sentences up to ~40% of the text (at least 50 chars)."""
    sentences = _SENTENCE_RE.findall(text) or [text]
    target_length = max(math.floor(len(text) * 0.4), 50)

    summary = ""
    for sentence in sentences:
        if len(summary) + len(sentence) <= target_length:
            summary += sentence.strip() + " "
        else:
            break

    summary = summary.strip()
    if summary:
        return summary
    return text[:100] + "..." if len(text) > 100 else text


_LOCAL_FALLBACKS = {
    "improve": basic_improvement,
    "rephrase": basic_rephrase,
    "summarize": basic_summary,
}


async def assist_text(
    operation: str,
    text: str,
    *,
    client: DashScopeClient | None = None,
) -> AssistResult:
    """Improve, rephrase or summarize ``text`` with a local fallback.

    Raises:
        ValueError: For an unknown operation
    """
    if operation not in ASSISTANT_PROMPTS:
        raise ValueError(f"Unsupported operation: {operation}")

    try:
        output = await (client or get_client()).complete(
            settings.dashscope.assistant_model,
            [
                {"role": "system", "content": ASSISTANT_PROMPTS[operation]},
                {"role": "user", "content": text},
            ],
            timeout=settings.dashscope.assistant_timeout,
        )
        return AssistResult(operation=operation, original_text=text, output_text=output)
    except LLMError as e:
        logger.warning(f"{operation} via model failed, using local fallback: {e}")

    return AssistResult(
        operation=operation,
        original_text=text,
        output_text=_LOCAL_FALLBACKS[operation](text),
        fallback=True,
    )
