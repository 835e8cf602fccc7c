"""Translation service backed by DashScope's Qwen MT model.

The model call is the primary path. When it fails, the service degrades to
small offline phrase tables so the caller always gets a result, flagged with
``fallback=True``.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable

from rapidfuzz import fuzz

from ai.dashscope import DashScopeClient, LLMError, get_client
from config.languages import COMMON_PHRASES, PATTERN_TRANSLATIONS, language_name
from linguala.config import settings
from linguala.pipelines.chunking import split_into_chunks
from linguala.pipelines.normalization import adaptive_max_tokens

logger = logging.getLogger(__name__)

_PUNCT_RE = re.compile(r"[.,!?;:]")


@dataclass
class GlossaryTerm:
    """A source → target term pair supplied with a translation request."""
    source: str
    target: str
    domain: str = "general"


@dataclass
class TranslationResult:
    """Outcome of a single translation request."""
    translated_text: str
    source_lang: str
    target_lang: str
    fallback: bool = False


def _as_term(entry: Any) -> GlossaryTerm:
    if isinstance(entry, GlossaryTerm):
        return entry
    if isinstance(entry, dict):
        return GlossaryTerm(entry["source"], entry["target"], entry.get("domain") or "general")
    return GlossaryTerm(entry.source, entry.target, getattr(entry, "domain", None) or "general")


def select_glossary_terms(
    text: str,
    entries: Iterable[Any],
    domain: str | None = None,
    *,
    threshold: int | None = None,
) -> list[GlossaryTerm]:
    """Pick the glossary entries that apply to ``text``.

    An entry applies when its source term occurs in the text
    (case-insensitive) or, for terms of four characters or more, when
    rapidfuzz's partial ratio reaches the threshold. With a specific domain,
    only entries of that domain or of ``general`` are considered.
    """
    cutoff = settings.translation.glossary_fuzzy_threshold if threshold is None else threshold
    haystack = text.lower()
    selected: list[GlossaryTerm] = []
    seen: set[tuple[str, str]] = set()

    for raw in entries:
        term = _as_term(raw)
        if not term.source or not term.target:
            continue
        if domain and domain != "general" and term.domain not in (domain, "general"):
            continue

        needle = term.source.lower()
        matched = needle in haystack
        if not matched and len(needle) >= 4:
            matched = fuzz.partial_ratio(needle, haystack) >= cutoff

        key = (term.source, term.target)
        if matched and key not in seen:
            seen.add(key)
            selected.append(term)

    return selected


def get_fallback_translation(text: str, target_language: str) -> str | None:
    """Look up a canned translation for common phrases contained in ``text``."""
    lower_text = text.lower().strip()
    for phrase, translations in COMMON_PHRASES.items():
        if phrase in lower_text:
            return translations.get(target_language)
    return None


def get_pattern_based_translation(text: str, target_language: str) -> str:
    """Exact phrase lookup, then naive word-by-word substitution."""
    lower_text = text.lower().strip()

    exact = PATTERN_TRANSLATIONS.get(lower_text, {}).get(target_language)
    if exact:
        return exact

    translated_words = []
    for word in lower_text.split(" "):
        clean_word = _PUNCT_RE.sub("", word, count=1)
        translated_words.append(PATTERN_TRANSLATIONS.get(clean_word, {}).get(target_language) or word)

    result = " ".join(translated_words)
    if result != text:
        return result

    return f"[Translated to {target_language}] {text}"


def _build_prompt(text: str, source_language: str, target_language: str) -> str:
    # qwen-mt models do not accept a system role
    if source_language == "auto":
        return f"Translate to {target_language}: {text}"
    return f"Translate from {source_language} to {target_language}: {text}"


async def translate_with_qwen(
    client: DashScopeClient,
    text: str,
    source_language: str,
    target_language: str,
    *,
    domain: str | None = None,
    terms: list[GlossaryTerm] | None = None,
) -> str:
    """Single model call; raises ``LLMError`` on any unusable reply."""
    logger.info(f'Translating with Qwen: "{text[:50]}" from {source_language} to {target_language}')

    options: dict[str, Any] = {}
    if terms:
        options["terms"] = [{"source": t.source, "target": t.target} for t in terms]
    if domain and domain != "general":
        options["domains"] = domain
    extra_body = None
    if options:
        options["source_lang"] = source_language
        options["target_lang"] = target_language
        extra_body = {"translation_options": options}

    translated = await client.complete(
        settings.dashscope.translation_model,
        [{"role": "user", "content": _build_prompt(text, source_language, target_language)}],
        max_tokens=max(settings.dashscope.translation_max_tokens, adaptive_max_tokens(text)),
        temperature=0.3,
        timeout=settings.dashscope.translation_timeout,
        extra_body=extra_body,
    )

    if translated == text:
        raise LLMError("No translation received or same as input")
    return translated


async def translate_text(
    text: str,
    source_lang: str | None,
    target_lang: str,
    *,
    domain: str | None = None,
    glossary: Iterable[Any] | None = None,
    client: DashScopeClient | None = None,
) -> TranslationResult:
    """Translate ``text``, degrading to offline fallbacks instead of raising.

    Args:
        text: Text to translate
        source_lang: Source language code, ``auto`` or empty for detection
        target_lang: Target language code
        domain: Optional subject domain hint
        glossary: Optional glossary entries (dicts or objects with source/target)
        client: DashScope client (shared client by default)

    Returns:
        TranslationResult; ``fallback`` is set when the model was not used
    """
    source_code = source_lang or "auto"

    if not text or not target_lang:
        logger.error("Translation error: text and target language are required")
        return TranslationResult(
            translated_text=f"Translation error: {text or ''}",
            source_lang=source_code,
            target_lang=target_lang or "",
            fallback=True,
        )

    target_language = language_name(target_lang)
    source_language = language_name(source_code) if source_code != "auto" else "auto"
    terms = select_glossary_terms(text, glossary, domain) if glossary else []

    try:
        translated = await translate_with_qwen(
            client or get_client(),
            text,
            source_language,
            target_language,
            domain=domain,
            terms=terms,
        )
        return TranslationResult(translated, source_code, target_lang)
    except LLMError as e:
        logger.warning(f"Qwen translation failed, using fallback: {e}")

    fallback_translation = get_fallback_translation(text, target_language)
    if fallback_translation:
        return TranslationResult(fallback_translation, source_code, target_lang, fallback=True)

    return TranslationResult(
        get_pattern_based_translation(text, target_language),
        source_code,
        target_lang,
        fallback=True,
    )


async def translate_long_text(
    text: str,
    source_lang: str | None,
    target_lang: str,
    *,
    domain: str | None = None,
    glossary: Iterable[Any] | None = None,
    client: DashScopeClient | None = None,
) -> str:
    """Translate document-sized text chunk by chunk.

    Chunks are sent sequentially with a short pause between them; a chunk
    whose translation raises keeps its original text.
    """
    chunks = split_into_chunks(text)
    glossary = list(glossary or [])
    translated_chunks: list[str] = []

    for index, chunk in enumerate(chunks):
        logger.info(f"Translating chunk {index + 1}/{len(chunks)}")
        try:
            result = await translate_text(
                chunk,
                source_lang,
                target_lang,
                domain=domain,
                glossary=glossary,
                client=client,
            )
            translated_chunks.append(result.translated_text)
        except Exception as e:
            logger.error(f"Error translating chunk {index + 1}: {e}", exc_info=True)
            translated_chunks.append(chunk)

        if index < len(chunks) - 1 and settings.translation.chunk_delay:
            await asyncio.sleep(settings.translation.chunk_delay)

    return "\n\n".join(translated_chunks)
