"""Fetch a web page and pull out its readable text.

Pages are fetched as static HTML (no JavaScript execution) and reduced to
a title, plain-text content and a short excerpt.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup
from readability import Document

from .config import settings
from .pipelines.normalization import normalize_whitespace
from .url_utils import PRIVATE_HOST_ERROR, is_private_host

logger = logging.getLogger(__name__)

CONTENT_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
    ".content",
    ".main-content",
    "#content",
    "#main",
]
NOISE_TAGS = ["script", "style", "nav", "header", "footer", "aside"]
EXCERPT_LENGTH = 200
GENERIC_FAILURE = "Failed to scrape website. Please try again later."


class ScrapeError(Exception):
    """Raised when a page cannot be fetched or yields no content."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class ScrapedPage:
    """Readable content extracted from one page."""
    title: str
    content: str
    excerpt: str
    url: str
    extract_method: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "url": self.url,
            "extractMethod": self.extract_method,
        }


def _excerpt(text: str) -> str:
    if len(text) > EXCERPT_LENGTH:
        return f"{text[:EXCERPT_LENGTH]}..."
    return text


async def _reject_private_hosts(request: httpx.Request) -> None:
    """Request hook; runs for the first request and every redirect hop."""
    if settings.is_production and is_private_host(request.url.host.lower()):
        logger.warning(f"Blocked request to private host: {request.url}")
        raise ScrapeError(PRIVATE_HOST_ERROR, 400)


async def fetch_html(
    url: str,
    timeout_ms: int = 10000,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Download a page body, following redirects.

    In production every hop is checked, so a public page cannot redirect
    the fetch onto a private or loopback host.

    Raises:
        ScrapeError: 408 on timeout, 400 when the host is unreachable or
            private, 500 otherwise.
    """
    headers = {
        "User-Agent": settings.scrape.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    try:
        async with httpx.AsyncClient(
            headers=headers,
            follow_redirects=True,
            max_redirects=settings.scrape.max_redirects,
            timeout=timeout_ms / 1000,
            event_hooks={"request": [_reject_private_hosts]},
            transport=transport,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
    except httpx.TimeoutException as e:
        logger.warning(f"Timed out fetching {url}: {e}")
        raise ScrapeError("Website took too long to load. Please try again.", 408) from e
    except httpx.TooManyRedirects as e:
        logger.warning(f"Too many redirects fetching {url}: {e}")
        raise ScrapeError("Website redirected too many times.", 400) from e
    except httpx.ConnectError as e:
        logger.warning(f"Could not connect to {url}: {e}")
        raise ScrapeError("Could not connect to the website. Please check the URL.", 400) from e
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch {url}: {e}", exc_info=True)
        raise ScrapeError(GENERIC_FAILURE, 500) from e


def extract_content_with_readability(html: str, url: str) -> ScrapedPage:
    """Main-article extraction via readability-lxml."""
    doc = Document(html, url=url)
    title = (doc.short_title() or doc.title() or "").strip() or "Untitled"
    summary_html = doc.summary(html_partial=True)
    content = normalize_whitespace(BeautifulSoup(summary_html, "html.parser").get_text(" "))

    meta = BeautifulSoup(html, "html.parser").find("meta", attrs={"name": "description"})
    description = meta.get("content", "").strip() if meta else ""

    return ScrapedPage(
        title=title,
        content=content,
        excerpt=description or _excerpt(content),
        url=url,
        extract_method="readability",
    )


def extract_content_basic(html: str, url: str) -> ScrapedPage:
    """Selector-based extraction for pages readability handles poorly."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NOISE_TAGS):
        tag.decompose()

    title = ""
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title:
        h1 = soup.find("h1")
        title = h1.get_text(strip=True) if h1 else ""

    node = None
    for selector in CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node is not None:
            break
    if node is None:
        node = soup.body or soup

    content = normalize_whitespace(node.get_text(" "))
    return ScrapedPage(
        title=title or "Untitled",
        content=content,
        excerpt=_excerpt(content),
        url=url,
        extract_method="basic",
    )


async def scrape_website(url: str, extract_method: str = "readability", timeout_ms: int = 10000) -> ScrapedPage:
    """Fetch ``url`` and extract its readable content.

    Args:
        url: Normalized absolute URL
        extract_method: "readability" or "basic"
        timeout_ms: Fetch timeout in milliseconds

    Returns:
        ScrapedPage with content truncated to the configured maximum

    Raises:
        ScrapeError: On fetch failure or when the page is empty
    """
    html = await fetch_html(url, timeout_ms)
    if not html or len(html) < settings.scrape.min_html_length:
        raise ScrapeError(GENERIC_FAILURE, 500)

    try:
        if extract_method == "basic":
            page = extract_content_basic(html, url)
        else:
            page = extract_content_with_readability(html, url)
    except Exception as e:
        logger.error(f"Content extraction failed for {url}: {e}", exc_info=True)
        raise ScrapeError(GENERIC_FAILURE, 500) from e

    if not page.content:
        raise ScrapeError("Could not extract readable content from the page", 500)

    limit = settings.scrape.max_content_length
    if len(page.content) > limit:
        page.content = f"{page.content[:limit]}..."

    logger.info(f"Scraped {url} ({extract_method}): {len(page.content)} chars")
    return page
