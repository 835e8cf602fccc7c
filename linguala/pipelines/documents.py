"""Document upload, translation and storage pipeline.

Uploaded files live on local disk under the configured upload directory,
named by an opaque file id. A translation reads the stored original, runs
it through the long-text translator, renders the result in the original
format and replaces the original with the translated file.
"""
from __future__ import annotations

import asyncio
import logging
import re
import secrets
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable

from ai.dashscope import DashScopeClient
from ai.translation import translate_long_text
from linguala.config import settings
from linguala.parsers import FileType, ParseError, detect_file_type, get_document_info, parse_file
from linguala.pipelines.rendering import RenderError, create_translated_docx, create_translated_pdf

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("pdf", "docx", "txt")
MIME_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "txt": "text/plain",
}
TRANSLATED_PREFIX = "translated_"
FILE_ID_RE = re.compile(rf"^({TRANSLATED_PREFIX})?doc_\d+_[a-z0-9]+$")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class DocumentError(Exception):
    """Base class for document pipeline failures."""
    status_code = 500


class DocumentValidationError(DocumentError):
    """Raised when an upload is rejected."""
    status_code = 400


class InvalidFileIdError(DocumentError):
    """Raised for file ids that were not issued by the store."""
    status_code = 400


class DocumentNotFoundError(DocumentError):
    """Raised when a stored file is missing."""
    status_code = 404


class DocumentProcessingError(DocumentError):
    """Raised when extraction, translation or rendering fails."""
    status_code = 500


@dataclass
class UploadedDocument:
    file_id: str
    file_name: str
    file_type: str
    file_size: int
    word_count: int = 0
    page_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TranslatedDocument:
    translated_file_id: str
    original_file_name: str
    translated_file_name: str
    file_size: int
    download_path: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class DocumentStore:
    """Flat on-disk store keyed by file id and extension."""

    def __init__(self, upload_dir: str | Path | None = None) -> None:
        self.upload_dir = Path(upload_dir or settings.storage.upload_dir)

    @staticmethod
    def new_file_id() -> str:
        suffix = "".join(secrets.choice(_BASE36) for _ in range(11))
        return f"doc_{int(time.time() * 1000)}_{suffix}"

    @staticmethod
    def validate_file_id(file_id: str) -> str:
        if not file_id or not FILE_ID_RE.match(file_id):
            raise InvalidFileIdError("Invalid file ID")
        return file_id

    def path_for(self, file_id: str, ext: str) -> Path:
        self.validate_file_id(file_id)
        if ext not in SUPPORTED_EXTENSIONS:
            raise DocumentValidationError(f"Unsupported file type: {ext}")
        return self.upload_dir / f"{file_id}.{ext}"

    def save(self, content: bytes, ext: str, file_id: str | None = None) -> str:
        file_id = file_id or self.new_file_id()
        path = self.path_for(file_id, ext)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.info(f"Stored {path.name} ({len(content)} bytes)")
        return file_id

    def read(self, file_id: str, ext: str) -> bytes:
        path = self.path_for(file_id, ext)
        if not path.is_file():
            raise DocumentNotFoundError("File not found. Please upload the document again.")
        return path.read_bytes()

    def locate(self, file_id: str) -> tuple[Path, str] | None:
        """Find a stored file by id, trying each supported extension."""
        for ext in SUPPORTED_EXTENSIONS:
            path = self.path_for(file_id, ext)
            if path.is_file():
                return path, ext
        return None

    def delete(self, file_id: str, ext: str) -> bool:
        path = self.path_for(file_id, ext)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Failed to remove {path}: {e}")
            return False

    def purge_expired(self, max_age_seconds: int | None = None) -> int:
        """Delete stored files older than ``max_age_seconds``; returns the count."""
        if not self.upload_dir.is_dir():
            return 0
        max_age = max_age_seconds if max_age_seconds is not None else settings.storage.retention_seconds
        cutoff = time.time() - max_age
        removed = 0
        for path in self.upload_dir.iterdir():
            if not path.is_file() or not FILE_ID_RE.match(path.stem):
                continue
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except OSError as e:
                logger.warning(f"Failed to purge {path}: {e}")
        if removed:
            logger.info(f"Purged {removed} expired documents")
        return removed


def format_size_limit(num_bytes: int) -> str:
    """Human-readable size: whole MB where possible, otherwise KB."""
    mb = num_bytes / (1024 * 1024)
    if mb >= 1:
        return f"{mb:g}MB" if mb == int(mb) else f"{mb:.1f}MB"
    if num_bytes >= 1024:
        return f"{num_bytes / 1024:.0f}KB"
    return f"{num_bytes} bytes"


def check_file_size(content: bytes) -> None:
    """Raise DocumentValidationError when ``content`` exceeds the upload limit."""
    limit = settings.storage.max_file_size
    if len(content) > limit:
        raise DocumentValidationError(f"File too large. Maximum size is {format_size_limit(limit)}.")


def get_document_store() -> DocumentStore:
    """FastAPI dependency; reads the upload directory at call time."""
    return DocumentStore(settings.storage.upload_dir)


async def inspect_upload(content: bytes, filename: str | None, store: DocumentStore | None = None) -> UploadedDocument:
    """Validate an uploaded file and keep it for a later translation.

    Raises:
        DocumentValidationError: Empty, oversized, unsupported or corrupt file
    """
    store = store or get_document_store()
    if not content:
        raise DocumentValidationError("No file uploaded")
    check_file_size(content)

    file_type = detect_file_type(filename or "", content)
    if file_type == FileType.UNKNOWN:
        raise DocumentValidationError("Unsupported file type. Please upload PDF, DOCX, or TXT files.")

    info = await asyncio.to_thread(get_document_info, content, file_type)
    if not info.is_valid:
        raise DocumentValidationError("Invalid or corrupted document")

    store.purge_expired()
    file_id = store.save(content, file_type.value)
    return UploadedDocument(
        file_id=file_id,
        file_name=filename or "unnamed",
        file_type=file_type.value,
        file_size=info.file_size,
        word_count=info.word_count,
        page_count=info.page_count,
    )


async def translate_document(
    file_id: str,
    source_lang: str | None,
    target_lang: str,
    file_type: str,
    file_name: str | None = None,
    *,
    store: DocumentStore | None = None,
    client: DashScopeClient | None = None,
    domain: str | None = None,
    glossary: Iterable[Any] | None = None,
) -> TranslatedDocument:
    """Translate a stored document into a new file of the same format.

    Raises:
        InvalidFileIdError: Malformed file id
        DocumentNotFoundError: No stored file for ``file_id``
        DocumentProcessingError: Extraction or rendering failed
    """
    store = store or get_document_store()
    if file_type not in SUPPORTED_EXTENSIONS:
        raise DocumentValidationError("Unsupported file type")
    store.validate_file_id(file_id)
    if file_id.startswith(TRANSLATED_PREFIX):
        raise InvalidFileIdError("This document has already been translated. Please upload the original.")
    translated_file_id = f"{TRANSLATED_PREFIX}{file_id}"

    content = store.read(file_id, file_type)
    logger.info(f"Starting translation: {file_type} file {file_id} from {source_lang} to {target_lang}")

    try:
        parsed = await asyncio.to_thread(parse_file, content, file_name or file_id, FileType(file_type))
    except ParseError as e:
        logger.error(f"Extraction failed for {file_id}: {e}")
        raise DocumentProcessingError(f"Failed to extract text: {e}") from e
    logger.info(f"Extracted {len(parsed.text)} characters from {file_type.upper()}")

    translated_text = await translate_long_text(
        parsed.text,
        source_lang,
        target_lang,
        domain=domain,
        glossary=glossary,
        client=client,
    )
    logger.info(f"Translation completed: {len(translated_text)} characters")

    try:
        if file_type == "pdf":
            output = await asyncio.to_thread(
                create_translated_pdf, translated_text, parsed.metadata, parsed.page_count
            )
        elif file_type == "docx":
            output = await asyncio.to_thread(create_translated_docx, translated_text, parsed.segments)
        else:
            output = translated_text.encode("utf-8")
    except RenderError as e:
        raise DocumentProcessingError(str(e)) from e

    store.save(output, file_type, translated_file_id)
    if not store.delete(file_id, file_type):
        logger.warning(f"Failed to clean up original file {file_id}")

    base_name = file_name or "document"
    return TranslatedDocument(
        translated_file_id=translated_file_id,
        original_file_name=base_name,
        translated_file_name=f"{base_name}_translated.{file_type}",
        file_size=len(output),
        download_path=f"/api/documents/download/{translated_file_id}",
    )
