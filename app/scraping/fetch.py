"""
HTTP fetch mechanics for the page extractor.
"""

from __future__ import annotations

import logging
import time
from urllib.parse import urlparse

import requests

from app.domain.scraping import ScrapeOptions
from app.errors import DeadlineExceededError, FetchError
from app.scraping.types import Deadline, FetchedPage

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_LANGUAGE_HEADER = "en-US,en;q=0.5"
FAVICON_PATHS = ("/favicon.ico", "/favicon.png", "/apple-touch-icon.png")
_CHUNK_SIZE = 64 * 1024


def request_headers(options: ScrapeOptions) -> dict[str, str]:
    return {
        "User-Agent": options.user_agent,
        "Accept": ACCEPT_HEADER,
        "Accept-Language": ACCEPT_LANGUAGE_HEADER,
    }


def fetch_page(
    session: requests.Session,
    url: str,
    *,
    options: ScrapeOptions,
    deadline: Deadline,
) -> FetchedPage:
    """
    GET ``url`` and read the whole body before ``deadline`` expires.

    Any HTTP status is returned as-is; only transport failures raise.
    """

    deadline.check("fetch")
    started = time.monotonic()
    try:
        response = session.get(
            url,
            headers=request_headers(options),
            timeout=deadline.clamp(options.timeout_seconds),
            allow_redirects=True,
            stream=True,
        )
    except requests.Timeout as exc:
        raise DeadlineExceededError(f"timed out fetching {url}: {exc}") from exc
    except requests.RequestException as exc:
        raise FetchError(f"failed to fetch {url}: {exc}") from exc

    with response:
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                deadline.check("body read")
                chunks.append(chunk)
        except requests.RequestException as exc:
            raise FetchError(f"failed to read response body from {url}: {exc}") from exc

    load_time_ms = int((time.monotonic() - started) * 1000)
    content_type = response.headers.get("Content-Type", "")
    return FetchedPage(
        url=url,
        status_code=response.status_code,
        content_type=content_type,
        body=_decode_body(b"".join(chunks), content_type, response.encoding),
        load_time_ms=load_time_ms,
    )


def _decode_body(raw: bytes, content_type: str, declared_encoding: str | None) -> str:
    # requests defaults text/* without a charset to ISO-8859-1; prefer UTF-8.
    encoding = declared_encoding if "charset=" in content_type.lower() else None
    try:
        return raw.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


def probe_favicon(
    session: requests.Session,
    page_url: str,
    *,
    options: ScrapeOptions,
    deadline: Deadline,
) -> str:
    """
    HEAD the well-known favicon locations of the page's host, in order.

    Returns the first URL answering 200, or "" when none does. Probe failures
    never propagate.
    """

    parsed = urlparse(page_url)
    if not parsed.scheme or not parsed.netloc:
        return ""

    headers = {"User-Agent": options.user_agent}
    for path in FAVICON_PATHS:
        if deadline.expired:
            return ""
        candidate = f"{parsed.scheme}://{parsed.netloc}{path}"
        try:
            response = session.head(
                candidate,
                headers=headers,
                timeout=deadline.clamp(options.favicon_timeout_seconds),
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            logger.debug("Favicon probe failed url=%s: %s", candidate, exc)
            continue
        if response.status_code == 200:
            return candidate
    return ""
