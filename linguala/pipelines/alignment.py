"""Map translated text back onto the structure of the source document."""
from __future__ import annotations

import math
from typing import Sequence

from linguala.pipelines.normalization import split_paragraphs

BREAK_THRESHOLD = 0.7


def split_translated_text(translated_text: str, segments: Sequence) -> list[str]:
    """Split a translation into one piece per source segment.

    Paragraph boundaries are used when the model kept them. Otherwise the
    text is cut into roughly equal pieces, preferring a sentence or line
    end in the last 30% of each piece.
    """
    paragraphs = split_paragraphs(translated_text)
    if not segments:
        return paragraphs
    if len(paragraphs) >= len(segments):
        return paragraphs[: len(segments)]

    target = math.ceil(len(translated_text) / len(segments))
    pieces: list[str] = []
    remaining = translated_text

    for _ in range(len(segments) - 1):
        if len(remaining) <= target:
            pieces.append(remaining)
            remaining = ""
            break

        break_point = target
        sentence_end = remaining.rfind(".", 0, break_point + 1)
        line_end = remaining.rfind("\n", 0, break_point + 1)
        if sentence_end > break_point * BREAK_THRESHOLD:
            break_point = sentence_end + 1
        elif line_end > break_point * BREAK_THRESHOLD:
            break_point = line_end + 1

        pieces.append(remaining[:break_point].strip())
        remaining = remaining[break_point:].strip()

    if remaining:
        pieces.append(remaining)
    return pieces


def split_text_for_pdf(text: str, page_count: int) -> list[str]:
    """Group paragraphs into at most ``page_count`` roughly even pages."""
    paragraphs = split_paragraphs(text)
    page_count = max(page_count, 1)

    if len(paragraphs) <= page_count:
        per_page = max(math.ceil(len(paragraphs) / page_count), 1)
        pages = [
            "\n\n".join(paragraphs[i * per_page:(i + 1) * per_page])
            for i in range(page_count)
        ]
        return [p for p in pages if p.strip()]

    chars_per_page = math.ceil(len(text) / page_count)
    pages: list[str] = []
    current = ""
    for paragraph in paragraphs:
        if current and len(current) + len(paragraph) > chars_per_page:
            pages.append(current.strip())
            current = paragraph
        else:
            current = f"{current}\n\n{paragraph}" if current else paragraph
    if current.strip():
        pages.append(current.strip())
    return pages
