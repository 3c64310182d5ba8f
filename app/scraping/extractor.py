"""
Page extraction pipeline: fetch, parse, derive, persist.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

import requests

from app.domain.scraping import ScrapeOptions, ScrapeResult
from app.logging_utils import log_event
from app.repositories.scrape_result_repository import ScrapeResultRepository
from app.scraping.fetch import FAVICON_PATHS, fetch_page, probe_favicon
from app.scraping.parsing.page_parser import calculate_word_count, parse_page
from app.scraping.types import Deadline

logger = logging.getLogger(__name__)


class PageExtractor:
    """
    Turns one URL into a persisted ScrapeResult.

    Safe to share between threads: each call opens its own HTTP session and
    keeps all traversal state local.
    """

    def __init__(
        self,
        *,
        repository: ScrapeResultRepository,
        options: ScrapeOptions | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self._repository = repository
        self._options = options or ScrapeOptions()
        self._session_factory = session_factory

    def extract(
        self,
        url: str,
        owner_id: int,
        *,
        options: ScrapeOptions | None = None,
        deadline: Deadline | None = None,
    ) -> ScrapeResult:
        """
        Fetch ``url``, extract its structured data and save it for ``owner_id``.

        The URL must already be validated. Raises FetchError on transport
        failure, PageParseError if the body cannot be parsed and
        PersistenceError if saving fails. Non-2xx responses are extracted
        normally and reported through ``status_code``.
        """

        opts = options or self._options
        fetch_deadline = Deadline.after(opts.timeout_seconds).earliest(deadline)

        with self._session_factory() as session:
            session.max_redirects = opts.max_redirects
            page = fetch_page(session, url, options=opts, deadline=fetch_deadline)
            parsed = parse_page(page.body, page_url=url, options=opts)

            favicon = ""
            if opts.extract_favicon:
                probe_deadline = Deadline.after(
                    opts.favicon_timeout_seconds * len(FAVICON_PATHS)
                ).earliest(deadline)
                favicon = probe_favicon(session, url, options=opts, deadline=probe_deadline)

        result = ScrapeResult(
            url=url,
            owner_id=owner_id,
            status_code=page.status_code,
            created_at=datetime.now(timezone.utc),
            title=parsed.title,
            description=parsed.description,
            keywords=parsed.keywords,
            author=parsed.author,
            language=parsed.language,
            favicon=favicon,
            image_url=parsed.image_url,
            site_name=parsed.site_name,
            links=tuple(parsed.links),
            images=tuple(parsed.images),
            headers=tuple(parsed.headers),
            content_type=page.content_type,
            word_count=calculate_word_count(page.body),
            load_time_ms=page.load_time_ms,
        )

        if deadline is not None:
            deadline.check("persist")
        saved = self._repository.save(result)
        log_event(
            logger,
            logging.INFO,
            "page_scraped",
            url=url,
            owner_id=owner_id,
            result_id=saved.id,
            status_code=saved.status_code,
            links=len(saved.links),
            images=len(saved.images),
            load_time_ms=saved.load_time_ms,
        )
        return saved
