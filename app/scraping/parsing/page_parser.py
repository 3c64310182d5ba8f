"""
BeautifulSoup-based extraction of page metadata, links, images and headings.

The document is walked once, depth first. Each element is dispatched on its
tag name through a handler table; tags without a handler are skipped.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import PageElement, PreformattedString

from app.domain.scraping import Header, ScrapeOptions
from app.errors import PageParseError
from app.scraping.types import ParsedPage

TAG_PATTERN = re.compile(r"<[^>]*>")
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
_SKIPPED_HREF_PREFIXES = ("#", "javascript:")


def calculate_word_count(body: str) -> int:
    """
    Count whitespace-delimited tokens after replacing every tag with a space.
    """

    return len(TAG_PATTERN.sub(" ", body).split())


def resolve_url(base_url: str, reference: str) -> str:
    """
    Resolve ``reference`` against ``base_url``; returns "" when either is malformed.
    """

    try:
        return urljoin(base_url, reference)
    except ValueError:
        return ""


def parse_page(body: str, *, page_url: str, options: ScrapeOptions) -> ParsedPage:
    """
    Parse an HTML body and collect every extracted field in one traversal.
    """

    try:
        soup = BeautifulSoup(body, "html.parser")
    except (ParserRejectedMarkup, AssertionError, ValueError) as exc:
        raise PageParseError(f"failed to parse HTML from {page_url}: {exc}") from exc
    return _DocumentWalker(page_url=page_url, options=options).walk(soup)


def _is_text_node(node: PageElement | None) -> bool:
    # Comments, CDATA, doctypes and processing instructions are not text.
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def _first_child(node: Tag) -> PageElement | None:
    return node.contents[0] if node.contents else None


class _DocumentWalker:
    """
    Per-document traversal state. Not shared between threads.
    """

    def __init__(self, *, page_url: str, options: ScrapeOptions) -> None:
        self._page_url = page_url
        self._options = options
        self._page = ParsedPage()
        self._title_seen = False
        self._named_description: str | None = None
        self._og_description: str | None = None
        self._seen_links: set[str] = set()
        self._seen_images: set[str] = set()

        self._handlers: dict[str, Callable[[Tag], None]] = {
            "title": self._visit_title,
            "meta": self._visit_meta,
            "a": self._visit_anchor,
        }
        if options.extract_images:
            self._handlers["img"] = self._visit_image
        if options.extract_headers:
            for tag_name in HEADING_TAGS:
                self._handlers[tag_name] = self._visit_heading

    def walk(self, soup: BeautifulSoup) -> ParsedPage:
        for node in soup.descendants:
            if not isinstance(node, Tag):
                continue
            handler = self._handlers.get(node.name)
            if handler is not None:
                handler(node)

        if self._named_description is not None:
            self._page.description = self._named_description
        elif self._og_description is not None:
            self._page.description = self._og_description
        return self._page

    def _visit_title(self, node: Tag) -> None:
        if self._title_seen:
            return
        self._title_seen = True
        child = _first_child(node)
        if _is_text_node(child):
            self._page.title = str(child).strip()

    def _visit_meta(self, node: Tag) -> None:
        name = str(node.get("name") or "").strip().lower()
        prop = str(node.get("property") or "").strip().lower()
        content = str(node.get("content") or "")

        if name == "description":
            if self._named_description is None and content:
                self._named_description = content
        elif prop == "og:description":
            if self._og_description is None and content:
                self._og_description = content
        elif name == "keywords":
            self._page.keywords = content
        elif name == "author":
            self._page.author = content
        elif name == "language" or prop == "og:locale":
            self._page.language = content
        elif prop == "og:image":
            self._page.image_url = content
        elif prop == "og:site_name":
            self._page.site_name = content

    def _visit_anchor(self, node: Tag) -> None:
        if len(self._page.links) >= self._options.max_links:
            return
        href = str(node.get("href") or "").strip()
        if not href or href.lower().startswith(_SKIPPED_HREF_PREFIXES):
            return
        absolute = resolve_url(self._page_url, href)
        if absolute and absolute not in self._seen_links:
            self._seen_links.add(absolute)
            self._page.links.append(absolute)

    def _visit_image(self, node: Tag) -> None:
        if len(self._page.images) >= self._options.max_images:
            return
        src = str(node.get("src") or "").strip()
        if not src:
            return
        absolute = resolve_url(self._page_url, src)
        if absolute and absolute not in self._seen_images:
            self._seen_images.add(absolute)
            self._page.images.append(absolute)

    def _visit_heading(self, node: Tag) -> None:
        child = _first_child(node)
        if not _is_text_node(child):
            return
        text = str(child).strip()
        if text:
            self._page.headers.append(Header(level=int(node.name[1]), text=text))
