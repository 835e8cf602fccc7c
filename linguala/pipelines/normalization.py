"""Text normalization utilities shared by the LLM and document pipelines.

Handles markup stripping, whitespace, Unicode composition and the rough
token estimates used to size model requests.
"""
from __future__ import annotations

import math
import re
import unicodedata

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_PARAGRAPH_BREAK = "\n\n"


def normalize_whitespace(text: str) -> str:
    """Normalize whitespace: collapse multiple spaces, remove leading/trailing."""
    return _WS_RE.sub(" ", text).strip()


def clean_html(text: str, replacement: str = "") -> str:
    """Remove HTML tags from text."""
    return _TAG_RE.sub(replacement, text)


def clean_text(text: str) -> str:
    """Strip markup and collapse whitespace before sending text to a model."""
    if not text:
        return ""
    return normalize_whitespace(clean_html(text, " "))


def normalize_unicode(text: str) -> str:
    """Compose characters (NFC) so diacritics compare and count consistently."""
    return unicodedata.normalize("NFC", text)


def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per four characters."""
    return math.ceil(len(text) / 4)


def adaptive_max_tokens(text: str) -> int:
    """Completion budget proportional to the input, with a small floor."""
    return math.ceil(estimate_tokens(text) * 1.5) + 20


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())


def split_paragraphs(text: str) -> list[str]:
    """Split on blank lines, dropping paragraphs that are only whitespace."""
    return [p for p in text.split(_PARAGRAPH_BREAK) if p.strip()]
