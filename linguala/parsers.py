"""Document parsing utilities.

Supports PDF (text extraction + OCR fallback), DOCX and plain text, and
keeps enough structure (pages, headings, list items) to rebuild a
translated document in the same shape.
"""
from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO

import docx
import pdfplumber
import pytesseract
from pdf2image import convert_from_bytes
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .config import settings
from .pipelines.normalization import count_words, split_paragraphs

logger = logging.getLogger(__name__)


class FileType(str, Enum):
    """Supported file types."""
    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    UNKNOWN = "unknown"


class SegmentType(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"


class ParseError(Exception):
    """Raised when document parsing fails."""
    pass


@dataclass
class Segment:
    """One structural block of a document."""
    text: str
    type: SegmentType = SegmentType.PARAGRAPH
    level: int | None = None
    page: int | None = None


@dataclass
class ParsedDocument:
    """Result of document parsing."""
    text: str
    file_type: FileType
    segments: list[Segment] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    page_count: int = 0
    confidence: float = 1.0

    @property
    def word_count(self) -> int:
        return count_words(self.text)


@dataclass
class DocumentInfo:
    word_count: int
    page_count: int
    file_size: int
    is_valid: bool


def _is_docx(content: bytes) -> bool:
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            return "word/document.xml" in archive.namelist()
    except zipfile.BadZipFile:
        return False


def detect_file_type(filename: str, content: bytes | None = None) -> FileType:
    """Detect file type from content or filename.

    Magic bytes win over the extension so a renamed file is still
    recognised; undecodable content with no known signature is UNKNOWN.

    Args:
        filename: Original filename
        content: Optional file content for magic number detection

    Returns:
        Detected FileType
    """
    if content:
        if content.startswith(b"%PDF"):
            return FileType.PDF
        if content.startswith(b"PK\x03\x04"):  # ZIP/Office
            return FileType.DOCX if _is_docx(content) else FileType.UNKNOWN

    filename_lower = (filename or "").lower()
    if content is None:
        if filename_lower.endswith(".pdf"):
            return FileType.PDF
        elif filename_lower.endswith(".docx"):
            return FileType.DOCX
        elif filename_lower.endswith(".txt"):
            return FileType.TXT
        return FileType.UNKNOWN

    try:
        decoded = content.decode("utf-8")
    except UnicodeDecodeError:
        return FileType.UNKNOWN
    if "\x00" in decoded:
        return FileType.UNKNOWN
    return FileType.TXT


def extract_text_from_pdf_native(file_obj: BinaryIO) -> tuple[list[str], float]:
    """Extract per-page text from PDF using native text extraction.

    Args:
        file_obj: Binary file object

    Returns:
        Tuple of (page_texts, confidence_score)
    """
    try:
        # Try pdfplumber first (better text extraction)
        with pdfplumber.open(file_obj) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]

        total = sum(len(p.strip()) for p in pages)
        # Estimate confidence based on text density
        if total > 100:
            return pages, 0.95
        elif total > 20:
            return pages, 0.7
        else:
            return pages, 0.3

    except Exception as e:
        logger.warning(f"pdfplumber extraction failed: {e}, trying pypdf")

        # Fallback to pypdf
        try:
            file_obj.seek(0)
            reader = PdfReader(file_obj)
            pages = [page.extract_text() or "" for page in reader.pages]
            total = sum(len(p.strip()) for p in pages)
            confidence = 0.8 if total > 100 else 0.5
            return pages, confidence

        except Exception as e2:
            logger.error(f"pypdf extraction also failed: {e2}")
            return [], 0.0


def extract_text_from_pdf_ocr(file_content: bytes) -> tuple[list[str], float]:
    """Extract per-page text from a scanned PDF using Tesseract.

    Args:
        file_content: PDF file content as bytes

    Returns:
        Tuple of (page_texts, confidence_score)

    Raises:
        ParseError: If the PDF cannot be rasterised
    """
    try:
        images = convert_from_bytes(file_content, dpi=settings.ocr.dpi, fmt="jpeg")
    except Exception as e:
        logger.error(f"PDF rasterisation failed: {e}")
        raise ParseError(f"OCR processing failed: {e}") from e

    if not images:
        logger.warning("No images extracted from PDF")
        return [], 0.0

    logger.info(f"Running OCR on {len(images)} pages")
    pages: list[str] = []
    confidences: list[float] = []

    for idx, image in enumerate(images):
        try:
            ocr_data = pytesseract.image_to_data(
                image,
                lang=settings.ocr.tesseract_lang,
                output_type=pytesseract.Output.DICT,
            )
            page_text = pytesseract.image_to_string(image, lang=settings.ocr.tesseract_lang)
        except Exception as e:
            logger.error(f"OCR failed for page {idx + 1}: {e}")
            pages.append("")
            continue

        pages.append(page_text)
        conf_values = [float(c) for c in ocr_data["conf"] if float(c) >= 0]
        if conf_values:
            confidences.append(sum(conf_values) / len(conf_values) / 100.0)

    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    logger.info(f"OCR completed with confidence {confidence:.2f}")
    return pages, confidence


def _pdf_metadata(reader: PdfReader) -> dict[str, Any]:
    info = reader.metadata
    if info is None:
        return {}
    metadata = {
        "title": info.title,
        "author": info.author,
        "subject": info.subject,
        "creator": info.creator,
    }
    return {k: str(v) for k, v in metadata.items() if v}


def parse_pdf(content: bytes, filename: str) -> ParsedDocument:
    """Parse PDF with text extraction + OCR fallback.

    Args:
        content: PDF file content
        filename: Original filename

    Returns:
        ParsedDocument with one segment per non-empty page

    Raises:
        ParseError: If the file is not a readable PDF or has no text
    """
    try:
        reader = PdfReader(io.BytesIO(content))
        page_count = len(reader.pages)
        metadata = _pdf_metadata(reader)
    except (PdfReadError, ValueError, OSError) as e:
        logger.error(f"Invalid PDF {filename}: {e}")
        raise ParseError(f"Invalid PDF file: {e}") from e

    pages, confidence = extract_text_from_pdf_native(io.BytesIO(content))
    method = "native"

    if settings.ocr.enabled and (
        confidence < settings.ocr.confidence_threshold or sum(len(p.strip()) for p in pages) < 50
    ):
        logger.info(f"Native extraction confidence {confidence:.2f} too low, trying OCR")
        try:
            ocr_pages, ocr_confidence = extract_text_from_pdf_ocr(content)
        except ParseError as e:
            logger.warning(f"OCR unavailable for {filename}: {e}")
        else:
            ocr_chars = sum(len(p.strip()) for p in ocr_pages)
            if ocr_confidence > confidence or ocr_chars > sum(len(p.strip()) for p in pages):
                pages, confidence, method = ocr_pages, ocr_confidence, "ocr"

    segments = [
        Segment(text=text.strip(), page=idx + 1)
        for idx, text in enumerate(pages)
        if text.strip()
    ]
    if not segments:
        raise ParseError("No text could be extracted from PDF")

    metadata.update({"filename": filename, "method": method})
    return ParsedDocument(
        text="\n\n".join(s.text for s in segments),
        file_type=FileType.PDF,
        segments=segments,
        metadata=metadata,
        page_count=page_count,
        confidence=confidence,
    )


def _classify_paragraph(style_name: str) -> tuple[SegmentType, int | None]:
    if style_name == "Title":
        return SegmentType.HEADING, 1
    if style_name.startswith("Heading"):
        suffix = style_name[len("Heading"):].strip()
        return SegmentType.HEADING, int(suffix) if suffix.isdigit() else 1
    if style_name.startswith("List"):
        return SegmentType.LIST, None
    return SegmentType.PARAGRAPH, None


def parse_docx(content: bytes, filename: str) -> ParsedDocument:
    """Parse a Word document into headings, list items and paragraphs.

    Raises:
        ParseError: If the file is not a valid DOCX
    """
    try:
        document = docx.Document(io.BytesIO(content))
    except Exception as e:
        logger.error(f"DOCX parsing failed for {filename}: {e}")
        raise ParseError(f"Invalid DOCX file: {e}") from e

    segments: list[Segment] = []
    for paragraph in document.paragraphs:
        text = paragraph.text.strip()
        if not text:
            continue
        style_name = paragraph.style.name if paragraph.style is not None else ""
        segment_type, level = _classify_paragraph(style_name or "")
        segments.append(Segment(text=text, type=segment_type, level=level))

    text = "\n\n".join(s.text for s in segments)
    core = document.core_properties
    metadata = {
        "filename": filename,
        "title": core.title or None,
        "author": core.author or None,
        "subject": core.subject or None,
        "word_count": count_words(text),
        "character_count": len(text),
    }
    logger.info(f"Parsed DOCX {filename} with {len(segments)} segments")
    return ParsedDocument(
        text=text,
        file_type=FileType.DOCX,
        segments=segments,
        metadata={k: v for k, v in metadata.items() if v is not None},
    )


def parse_txt(content: bytes, filename: str) -> ParsedDocument:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"Text file is not valid UTF-8: {e}") from e

    segments = [Segment(text=p.strip()) for p in split_paragraphs(text)]
    return ParsedDocument(
        text=text,
        file_type=FileType.TXT,
        segments=segments,
        metadata={"filename": filename},
    )


def parse_file(content: bytes, filename: str, file_type: FileType | None = None) -> ParsedDocument:
    """Parse uploaded file based on type.

    Args:
        content: Raw file bytes
        filename: Original filename
        file_type: Known type, detected from the content when omitted

    Returns:
        ParsedDocument

    Raises:
        ParseError: If file type unsupported or parsing fails
    """
    file_type = file_type or detect_file_type(filename, content)

    if file_type == FileType.PDF:
        return parse_pdf(content, filename)
    elif file_type == FileType.DOCX:
        return parse_docx(content, filename)
    elif file_type == FileType.TXT:
        return parse_txt(content, filename)
    else:
        raise ParseError(f"Unsupported file type: {filename}")


def get_document_info(content: bytes, file_type: FileType) -> DocumentInfo:
    """Cheap validity check plus counts shown to the user after upload.

    PDF word counts come from native extraction only; OCR is left to the
    translation step.
    """
    try:
        if file_type == FileType.PDF:
            reader = PdfReader(io.BytesIO(content))
            page_count = len(reader.pages)
            pages, _ = extract_text_from_pdf_native(io.BytesIO(content))
            word_count = sum(count_words(p) for p in pages)
            return DocumentInfo(word_count, page_count, len(content), True)

        parsed = parse_file(content, "", file_type)
        return DocumentInfo(parsed.word_count, parsed.page_count, len(content), True)
    except (ParseError, PdfReadError, ValueError, OSError) as e:
        logger.info(f"Document failed validation: {e}")
        return DocumentInfo(0, 0, len(content), False)
