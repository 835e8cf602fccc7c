"""FastAPI app with health, translation, document and account endpoints.

Route groups live in ``linguala.routes``; this module wires them together
with CORS, rate limiting and the JSON error format shared by all routes.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from ai.dashscope import LLMError
from ai.writing import WritingServiceError
from .config import settings
from .logging_config import setup_logging
from .parsers import ParseError
from .pipelines.accounts import RegistrationError
from .pipelines.documents import DocumentError
from .pipelines.library import LibraryError
from .rate_limit import limiter, rate_limit_exceeded_handler
from .routes import auth, documents, library, system, text, web
from .schemas import ErrorResponse, HealthResponse
from .scraper import ScrapeError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    # Startup
    setup_logging()
    logger.info(f"{settings.app_name} {settings.version} starting up ({settings.environment.value})")

    yield

    # Shutdown
    logger.info("Application shutting down")


app = FastAPI(
    title="Linguala API",
    version=settings.version,
    description="Translation and writing assistance on Qwen models",
    lifespan=lifespan,
)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(exclude_none=True),
    )


# Exception handlers
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as ``{"error": detail}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies."""
    logger.info(f"Invalid input on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid input", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError):
    """Handle document parsing errors."""
    logger.error(f"Parse error: {exc}")
    return _error(status.HTTP_400_BAD_REQUEST, "parse_error", str(exc))


@app.exception_handler(LLMError)
async def llm_error_handler(request: Request, exc: LLMError):
    """Handle model failures that escaped the service fallbacks."""
    logger.error(f"LLM error: {exc}")
    return _error(status.HTTP_502_BAD_GATEWAY, "llm_error", str(exc))


@app.exception_handler(WritingServiceError)
async def writing_error_handler(request: Request, exc: WritingServiceError):
    logger.error(f"Writing service error: {exc}")
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "writing_service_error", str(exc))


@app.exception_handler(DocumentError)
async def document_error_handler(request: Request, exc: DocumentError):
    """Handle upload, storage and document translation errors."""
    logger.error(f"Document error ({type(exc).__name__}): {exc}")
    return _error(exc.status_code, str(exc))


@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    logger.info(f"Library error ({type(exc).__name__}): {exc}")
    return _error(exc.status_code, str(exc))


@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(ScrapeError)
async def scrape_error_handler(request: Request, exc: ScrapeError):
    """Handle website fetch and extraction errors."""
    logger.error(f"Scrape error ({exc.status_code}): {exc.message}")
    return _error(exc.status_code, exc.message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


app.include_router(text.router)
app.include_router(documents.router)
app.include_router(web.router)
app.include_router(auth.router)
app.include_router(library.router)
app.include_router(system.router)


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", version=settings.version)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.version,
        "endpoints": {
            "health": "/health",
            "translate": "/api/translate",
            "write": "/api/write",
            "diff": "/api/diff",
            "languages": "/api/languages",
            "extract_document": "/api/extract-document",
            "upload_document": "/api/documents/upload",
            "translate_document": "/api/documents/translate",
            "download_document": "/api/documents/download/{fileId}",
            "scrape_website": "/api/scrape-website",
            "auth": "/api/auth/token",
            "docs": "/docs",
        },
    }
