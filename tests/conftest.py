"""
tests/conftest.py

Shared fixtures: in-memory SQLite database, repositories and a stubbed HTTP
session so no test touches the network.
"""

from __future__ import annotations

import io
from collections.abc import Iterator

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 - registers all ORM models on Base.metadata
from app.domain.scraping import ScrapeOptions
from app.repositories.schedule_repository import ScheduleRepository
from app.repositories.scrape_result_repository import ScrapeResultRepository
from app.scraping.extractor import PageExtractor
from db.base import Base
from db.session import SessionFactory, build_session_factory

HTML_CONTENT_TYPE = "text/html; charset=utf-8"


def make_response(
    url: str,
    *,
    status_code: int = 200,
    body: str = "",
    content_type: str = HTML_CONTENT_TYPE,
) -> requests.Response:
    response = requests.Response()
    response.url = url
    response.status_code = status_code
    response.headers = CaseInsensitiveDict({"Content-Type": content_type})
    response.encoding = get_encoding_from_headers(response.headers)
    response.raw = io.BytesIO(body.encode("utf-8"))
    return response


class FakeHTTPSession:
    """
    Minimal stand-in for ``requests.Session``.

    GETs of URLs not in ``pages`` fail like a refused connection; HEADs answer
    with ``head_status`` (404 when unset).
    """

    def __init__(self) -> None:
        self.pages: dict[str, tuple[int, str, str]] = {}
        self.head_status: dict[str, int] = {}
        self.errors: dict[str, requests.RequestException] = {}
        self.max_redirects = 30
        self.get_calls: list[tuple[str, dict]] = []
        self.head_calls: list[str] = []

    def add_page(
        self,
        url: str,
        body: str,
        *,
        status_code: int = 200,
        content_type: str = HTML_CONTENT_TYPE,
    ) -> None:
        self.pages[url] = (status_code, body, content_type)

    def __enter__(self) -> "FakeHTTPSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def get(self, url: str, **kwargs) -> requests.Response:
        self.get_calls.append((url, kwargs))
        if url in self.errors:
            raise self.errors[url]
        if url not in self.pages:
            raise requests.ConnectionError(f"connection refused: {url}")
        status_code, body, content_type = self.pages[url]
        return make_response(url, status_code=status_code, body=body, content_type=content_type)

    def head(self, url: str, **kwargs) -> requests.Response:
        self.head_calls.append(url)
        if url in self.errors:
            raise self.errors[url]
        response = requests.Response()
        response.url = url
        response.status_code = self.head_status.get(url, 404)
        return response


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> SessionFactory:
    return build_session_factory(engine)


@pytest.fixture()
def schedule_repository(session_factory: SessionFactory) -> ScheduleRepository:
    return ScheduleRepository(session_factory)


@pytest.fixture()
def result_repository(session_factory: SessionFactory) -> ScrapeResultRepository:
    return ScrapeResultRepository(session_factory)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture()
def http() -> FakeHTTPSession:
    return FakeHTTPSession()


@pytest.fixture()
def scrape_options() -> ScrapeOptions:
    return ScrapeOptions(timeout_seconds=5.0, favicon_timeout_seconds=1.0)


@pytest.fixture()
def extractor(
    http: FakeHTTPSession,
    result_repository: ScrapeResultRepository,
    scrape_options: ScrapeOptions,
) -> PageExtractor:
    return PageExtractor(
        repository=result_repository,
        options=scrape_options,
        session_factory=lambda: http,
    )
