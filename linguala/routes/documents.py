"""Document extraction, upload, translation and download endpoints."""
from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ai.dashscope import DashScopeClient, get_llm_client
from .. import models
from ..db import get_session
from ..parsers import FileType, parse_file
from ..pipelines.documents import (
    MIME_TYPES,
    DocumentError,
    DocumentNotFoundError,
    DocumentStore,
    check_file_size,
    get_document_store,
    inspect_upload,
    translate_document,
)
from ..pipelines.library import get_user_glossary
from ..schemas import (
    ExtractDocumentResponse,
    TranslateDocumentRequest,
    TranslateDocumentResponse,
    UploadDocumentResponse,
)
from ..security import get_optional_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])

EXTRACTABLE_TYPES = {
    "text/plain": FileType.TXT,
    "application/pdf": FileType.PDF,
    MIME_TYPES["docx"]: FileType.DOCX,
}


@router.post("/extract-document", response_model=ExtractDocumentResponse)
async def extract_document(file: UploadFile | None = File(None)) -> ExtractDocumentResponse:
    """Return the plain text of an uploaded document for the editor."""
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")

    try:
        content_type = (file.content_type or "").split(";")[0].strip()
        file_type = EXTRACTABLE_TYPES.get(content_type)
        if file_type is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported file type")

        content = await file.read()
        check_file_size(content)
        parsed = await asyncio.to_thread(parse_file, content, file.filename or "document", file_type)
        return ExtractDocumentResponse(
            content=parsed.text,
            filename=file.filename or "document",
            size=len(content),
        )
    finally:
        await file.close()


@router.post("/documents/upload", response_model=UploadDocumentResponse)
async def upload_document(
    file: UploadFile | None = File(None),
    store: DocumentStore = Depends(get_document_store),
) -> UploadDocumentResponse:
    """Validate and store a document for translation."""
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    logger.info(f"Received document upload: {file.filename}")
    try:
        content = await file.read()
        uploaded = await inspect_upload(content, file.filename, store)
        return UploadDocumentResponse(
            file_id=uploaded.file_id,
            file_name=uploaded.file_name,
            file_type=uploaded.file_type,
            file_size=uploaded.file_size,
            word_count=uploaded.word_count,
            page_count=uploaded.page_count,
        )
    except DocumentError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during upload: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Upload failed. Please try again.",
        )
    finally:
        await file.close()


@router.post("/documents/translate", response_model=TranslateDocumentResponse)
async def translate_uploaded_document(
    request: TranslateDocumentRequest,
    store: DocumentStore = Depends(get_document_store),
    client: DashScopeClient = Depends(get_llm_client),
    session: AsyncSession = Depends(get_session),
    user: models.User | None = Depends(get_optional_user),
) -> TranslateDocumentResponse:
    """Translate a previously uploaded document into the same format."""
    glossary = await get_user_glossary(session, user.id) if user is not None else None

    try:
        translated = await translate_document(
            request.file_id,
            request.source_lang,
            request.target_lang,
            request.file_type,
            request.file_name,
            store=store,
            client=client,
            domain=request.domain,
            glossary=glossary,
        )
    except DocumentError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error translating {request.file_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Translation failed. Please try again later.",
        )

    return TranslateDocumentResponse(
        translated_file_id=translated.translated_file_id,
        original_file_name=translated.original_file_name,
        translated_file_name=translated.translated_file_name,
        file_size=translated.file_size,
        download_path=translated.download_path,
    )


@router.get("/documents/download/{file_id}")
async def download_document(
    file_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> FileResponse:
    store.validate_file_id(file_id)
    located = store.locate(file_id)
    if located is None:
        raise DocumentNotFoundError("File not found")

    path, ext = located
    return FileResponse(
        path,
        media_type=MIME_TYPES.get(ext, "application/octet-stream"),
        filename=f"translated_document.{ext}",
    )
