"""Build translated DOCX and PDF files from translated text."""
from __future__ import annotations

import io
import logging
from typing import Any, Sequence

from docx import Document
from docx.shared import Inches, Pt
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from linguala.parsers import Segment, SegmentType
from linguala.pipelines.alignment import split_text_for_pdf, split_translated_text
from linguala.pipelines.normalization import split_paragraphs

logger = logging.getLogger(__name__)

HEADING_SIZES = {1: 16, 2: 14}
DEFAULT_HEADING_SIZE = 12
PDF_MARGIN = 50
PDF_FONT_SIZE = 11


class RenderError(Exception):
    """Raised when an output document cannot be built."""
    pass


def create_translated_docx(translated_text: str, segments: Sequence[Segment]) -> bytes:
    """Rebuild a Word document with the source's headings and list items.

    Args:
        translated_text: Full translation of the document text
        segments: Structure of the source document

    Returns:
        DOCX file content
    """
    try:
        document = Document()
        pieces = split_translated_text(translated_text, segments)
        written = 0

        for idx, piece in enumerate(pieces):
            if not piece.strip():
                continue
            original = segments[idx] if idx < len(segments) else None
            paragraph = document.add_paragraph()

            if original is not None and original.type == SegmentType.HEADING:
                run = paragraph.add_run(piece)
                run.bold = True
                run.font.size = Pt(HEADING_SIZES.get(original.level or 1, DEFAULT_HEADING_SIZE))
                paragraph.paragraph_format.space_after = Pt(10)
            elif original is not None and original.type == SegmentType.LIST:
                paragraph.add_run(f"• {piece}")
                paragraph.paragraph_format.left_indent = Inches(0.5)
                paragraph.paragraph_format.space_after = Pt(5)
            else:
                paragraph.add_run(piece)
                paragraph.paragraph_format.space_after = Pt(7.5)
            written += 1

        if not written:
            for block in split_paragraphs(translated_text):
                paragraph = document.add_paragraph(block.strip())
                paragraph.paragraph_format.space_after = Pt(7.5)

        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue()
    except Exception as e:
        logger.error(f"DOCX creation failed: {e}", exc_info=True)
        raise RenderError(f"Failed to create translated DOCX: {e}") from e


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def create_translated_pdf(translated_text: str, metadata: dict[str, Any] | None, page_count: int) -> bytes:
    """Lay the translation out over about as many pages as the source had.

    Text is wrapped in Helvetica; a page that overflows continues onto the
    next one rather than being truncated.
    """
    metadata = metadata or {}
    title = f"{metadata['title']} (Translated)" if metadata.get("title") else "Translated Document"
    style = ParagraphStyle(
        "Translated",
        fontName="Helvetica",
        fontSize=PDF_FONT_SIZE,
        leading=PDF_FONT_SIZE * 1.2,
    )

    try:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=LETTER,
            leftMargin=PDF_MARGIN,
            rightMargin=PDF_MARGIN,
            topMargin=PDF_MARGIN,
            bottomMargin=PDF_MARGIN,
            title=title,
            author=metadata.get("author") or "Linguala Translator",
            subject=metadata.get("subject") or "Translated Document",
            creator="Linguala Translation Platform",
        )

        story = []
        pages = split_text_for_pdf(translated_text, page_count) or [""]
        for page_idx, page_text in enumerate(pages):
            if page_idx:
                story.append(PageBreak())
            for block in split_paragraphs(page_text) or [page_text]:
                story.append(Paragraph(_escape(block).replace("\n", "<br/>"), style))
                story.append(Spacer(1, PDF_FONT_SIZE * 0.6))

        doc.build(story)
        return buffer.getvalue()
    except Exception as e:
        logger.error(f"PDF creation failed: {e}", exc_info=True)
        raise RenderError(f"Failed to create translated PDF: {e}") from e
