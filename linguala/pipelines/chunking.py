"""Split long text into request-sized chunks on paragraph boundaries."""
from __future__ import annotations

from linguala.config import settings
from linguala.pipelines.normalization import split_paragraphs


def split_into_chunks(text: str, max_chunk_size: int | None = None) -> list[str]:
    """Greedily pack paragraphs into chunks of at most ``max_chunk_size`` chars.

    A paragraph longer than the limit becomes a chunk on its own rather
    than being cut mid-sentence.

    Args:
        text: Input text with paragraphs separated by blank lines
        max_chunk_size: Character limit per chunk (default from settings)

    Returns:
        List of stripped, non-empty chunks
    """
    limit = max_chunk_size or settings.translation.max_chunk_size
    chunks: list[str] = []
    current = ""

    for paragraph in split_paragraphs(text):
        if current and len(current) + len(paragraph) > limit:
            chunks.append(current.strip())
            current = paragraph
        else:
            current = f"{current}\n\n{paragraph}" if current else paragraph

    if current.strip():
        chunks.append(current.strip())

    return chunks
