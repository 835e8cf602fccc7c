"""Request and response models for the HTTP API.

Field names are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


# --- Text operations ---

class GlossaryTermDTO(CamelModel):
    source: str
    target: str
    domain: str = "general"


class TranslateRequest(CamelModel):
    text: str | None = None
    operation: str = "translate"
    source_lang: str | None = None
    target_lang: str | None = None
    domain: str | None = None
    glossary: list[GlossaryTermDTO] | None = None


class TranslateResponse(CamelModel):
    translated_text: str
    source_lang: str
    target_lang: str
    fallback: bool = False


class AssistResponse(CamelModel):
    """improve / rephrase / summarize through the translate endpoint."""
    original_text: str
    operation: str
    improved_text: str | None = None
    rephrased_text: str | None = None
    summary_text: str | None = None
    fallback: bool = False


class WriteRequest(CamelModel):
    operation: str | None = None
    text: str | None = None
    word: str | None = None
    context: str | None = None
    corrections_only: bool = False
    writing_style: str | None = None
    tone: str | None = None
    mode: str | None = None
    source_lang: str | None = None
    target_lang: str | None = None


class ImproveResponse(CamelModel):
    original_text: str
    improved_text: str
    operation: str = "improve"
    fallback: bool = False


class AlternativesResponse(CamelModel):
    word: str
    alternatives: list[str]
    operation: str = "alternatives"
    fallback: bool = False


class RephraseResponse(CamelModel):
    original_text: str
    rephrased_text: str
    rephrase_options: list[str] = Field(default_factory=list)
    operation: str = "rephrase"
    fallback: bool = False


class DiffRequest(CamelModel):
    original: str
    improved: str


class DiffPartDTO(BaseModel):
    type: Literal["unchanged", "removed", "added"]
    text: str


class DiffResponse(CamelModel):
    parts: list[DiffPartDTO]
    summary: dict[str, int]


class LanguageDTO(BaseModel):
    code: str
    name: str


# --- Documents ---

class ExtractDocumentResponse(BaseModel):
    content: str
    filename: str
    size: int


class UploadDocumentResponse(CamelModel):
    success: bool = True
    file_id: str
    file_name: str
    file_type: str
    file_size: int
    word_count: int = 0
    page_count: int = 0


class TranslateDocumentRequest(CamelModel):
    file_id: str
    source_lang: str
    target_lang: str
    file_name: str | None = None
    file_type: Literal["pdf", "docx", "txt"]
    domain: str | None = None


class TranslateDocumentResponse(CamelModel):
    success: bool = True
    translated_file_id: str
    original_file_name: str
    translated_file_name: str
    file_size: int
    download_path: str


# --- Scraping ---

class ScrapeRequest(CamelModel):
    url: str
    extract_method: Literal["readability", "basic"] = "readability"
    timeout: int = Field(default=10000, ge=1000, le=30000)


class ScrapeResponse(CamelModel):
    success: bool = True
    url: str
    title: str
    content: str
    excerpt: str
    content_length: int
    extract_method: str
    warning: str | None = None


# --- Auth ---

class RegisterRequest(CamelModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None


class UserDTO(CamelModel):
    id: str
    email: str
    name: str | None = None


class RegisterResponse(CamelModel):
    message: str
    user: UserDTO


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ProfileResponse(CamelModel):
    id: str
    email: str
    name: str | None = None
    image: str | None = None
    is_premium: bool
    days_remaining: int | None = None
    limits: dict[str, int | None]


class PremiumGrantRequest(CamelModel):
    user_id: str
    duration_days: int | None = Field(default=None, ge=1, le=3650)


class PremiumRevokeRequest(CamelModel):
    user_id: str


# --- Library ---

class SaveTranslationRequest(CamelModel):
    source_text: str | None = None
    translated_text: str | None = None
    source_lang: str | None = None
    target_lang: str | None = None
    domain: str | None = None


class GlossaryCreateRequest(CamelModel):
    source: str | None = None
    target: str | None = None
    domain: str | None = None
    notes: str | None = None


class SettingsImportRequest(BaseModel):
    data: str | dict[str, Any]
