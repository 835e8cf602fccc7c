"""Website content extraction endpoint."""
# Annotations stay eager; FastAPI resolves them through the slowapi wrapper.
import logging

from fastapi import APIRouter, HTTPException, Request, status

from ..config import settings
from ..rate_limit import limiter
from ..schemas import ScrapeRequest, ScrapeResponse
from ..scraper import scrape_website
from ..url_utils import validate_and_normalize_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["web"])


@router.post("/scrape-website", response_model=ScrapeResponse, response_model_exclude_none=True)
@limiter.limit(settings.scrape.rate_limit)
async def scrape(request: Request, payload: ScrapeRequest) -> ScrapeResponse:
    """Fetch a page and return its readable text for translation."""
    validation = validate_and_normalize_url(payload.url)
    if not validation.is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=validation.error)

    logger.info(f"Scraping website: {validation.normalized_url} using {payload.extract_method} method")
    page = await scrape_website(validation.normalized_url, payload.extract_method, payload.timeout)

    return ScrapeResponse(
        url=page.url,
        title=page.title,
        content=page.content,
        excerpt=page.excerpt,
        content_length=len(page.content),
        extract_method=page.extract_method,
        warning=validation.warning,
    )
