"""URL validation and normalization for user-supplied scrape targets."""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from urllib.parse import urlsplit

from .config import settings

PRIVATE_HOST_PATTERNS = [
    re.compile(r"^localhost$"),
    re.compile(r"^127\."),
    re.compile(r"^10\."),
    re.compile(r"^172\.(1[6-9]|2[0-9]|3[0-1])\."),
    re.compile(r"^192\.168\."),
    re.compile(r"^::1$"),
    re.compile(r"^fc00:"),
    re.compile(r"^fd00:"),
]

SUSPICIOUS_TLDS = (".tk", ".ml", ".ga", ".cf")
PRIVATE_HOST_ERROR = "Private/local URLs are not allowed"


@dataclass
class URLValidationResult:
    is_valid: bool
    normalized_url: str | None = None
    error: str | None = None
    domain: str | None = None
    protocol: str | None = None
    warning: str | None = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


def is_private_host(hostname: str) -> bool:
    return any(p.search(hostname) for p in PRIVATE_HOST_PATTERNS)


def validate_and_normalize_url(value: str | None, *, block_private: bool | None = None) -> URLValidationResult:
    """Validate a URL, adding ``https://`` when no scheme is given.

    Private and loopback hosts are rejected only in production unless
    ``block_private`` says otherwise.
    """
    if not value or not isinstance(value, str):
        return URLValidationResult(is_valid=False, error="URL is required")

    trimmed = value.strip()
    if not trimmed:
        return URLValidationResult(is_valid=False, error="URL cannot be empty")

    url = trimmed
    if not trimmed.startswith(("http://", "https://")):
        url = f"https://{trimmed}"

    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        # Accessing .port validates it
        parts.port
    except ValueError:
        return URLValidationResult(is_valid=False, error="Invalid URL format")

    if not hostname:
        return URLValidationResult(is_valid=False, error="Invalid hostname")
    if any(ch.isspace() for ch in url):
        return URLValidationResult(is_valid=False, error="Invalid URL format")

    hostname = hostname.lower()
    if block_private is None:
        block_private = settings.is_production
    if block_private and is_private_host(hostname):
        return URLValidationResult(is_valid=False, error=PRIVATE_HOST_ERROR)

    warning = None
    if hostname.endswith(SUSPICIOUS_TLDS):
        warning = "This domain uses a TLD that may be associated with spam or malicious content"

    return URLValidationResult(
        is_valid=True,
        normalized_url=url,
        domain=hostname,
        protocol=f"{parts.scheme}:",
        warning=warning,
    )


def extract_domain_from_url(url: str) -> str | None:
    return validate_and_normalize_url(url).domain


def is_valid_domain(domain: str) -> bool:
    return validate_and_normalize_url(f"https://{domain}").is_valid
