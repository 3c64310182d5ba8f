"""
tests/test_page_parser.py

Unit tests for the single-pass HTML extraction.

Coverage
--------
- Word counting over raw markup
- Relative URL resolution
- Title and meta precedence rules
- Link and image filtering, dedupe and caps
- Heading collection and the extraction toggles
"""

from __future__ import annotations

import pytest

from app.domain.scraping import Header, ScrapeOptions
from app.scraping.parsing.page_parser import calculate_word_count, parse_page, resolve_url

PAGE_URL = "https://x.com/p/"


def _parse(body: str, **option_overrides) -> object:
    return parse_page(body, page_url=PAGE_URL, options=ScrapeOptions(**option_overrides))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestWordCount:
    def test_tags_are_not_words(self) -> None:
        assert calculate_word_count("<p>Hello  world</p>") == 2

    def test_adjacent_tags_split_words(self) -> None:
        assert calculate_word_count("<b>one</b><i>two</i>") == 2

    def test_script_text_is_counted(self) -> None:
        assert calculate_word_count("<script>var a = 1;</script>") == 4

    def test_empty_body(self) -> None:
        assert calculate_word_count("") == 0


class TestResolveURL:
    def test_root_relative(self) -> None:
        assert resolve_url(PAGE_URL, "/a/b") == "https://x.com/a/b"

    def test_path_relative(self) -> None:
        assert resolve_url(PAGE_URL, "c") == "https://x.com/p/c"

    def test_absolute_reference_wins(self) -> None:
        assert resolve_url(PAGE_URL, "https://other.org/z") == "https://other.org/z"

    def test_malformed_reference_is_dropped(self) -> None:
        assert resolve_url(PAGE_URL, "http://[broken") == ""


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class TestMetadata:
    def test_first_title_wins(self) -> None:
        parsed = _parse("<html><head><title> First </title><title>Second</title></head></html>")
        assert parsed.title == "First"

    def test_named_description_beats_og_description(self) -> None:
        parsed = _parse(
            '<meta property="og:description" content="from og">'
            '<meta name="description" content="from name">'
        )
        assert parsed.description == "from name"

    def test_first_named_description_wins(self) -> None:
        parsed = _parse(
            '<meta name="description" content="first">'
            '<meta name="description" content="second">'
        )
        assert parsed.description == "first"

    def test_og_description_used_when_named_is_empty(self) -> None:
        parsed = _parse(
            '<meta name="description" content="">'
            '<meta property="og:description" content="from og">'
        )
        assert parsed.description == "from og"

    def test_meta_names_are_case_insensitive(self) -> None:
        parsed = _parse('<meta name="Keywords" content="a, b">')
        assert parsed.keywords == "a, b"

    def test_last_keywords_and_author_win(self) -> None:
        parsed = _parse(
            '<meta name="keywords" content="old">'
            '<meta name="author" content="Ann">'
            '<meta name="keywords" content="new">'
            '<meta name="author" content="Bob">'
        )
        assert parsed.keywords == "new"
        assert parsed.author == "Bob"

    def test_language_from_og_locale(self) -> None:
        parsed = _parse('<meta property="og:locale" content="en_US">')
        assert parsed.language == "en_US"

    def test_open_graph_image_and_site_name(self) -> None:
        parsed = _parse(
            '<meta property="og:image" content="https://cdn.x.com/i.png">'
            '<meta property="og:site_name" content="X">'
        )
        assert parsed.image_url == "https://cdn.x.com/i.png"
        assert parsed.site_name == "X"

    def test_missing_metadata_defaults_to_empty(self) -> None:
        parsed = _parse("<html><body><p>nothing here</p></body></html>")
        assert parsed.title == ""
        assert parsed.description == ""
        assert parsed.links == []


# ---------------------------------------------------------------------------
# Links and images
# ---------------------------------------------------------------------------


class TestLinks:
    def test_relative_links_are_resolved(self) -> None:
        parsed = _parse('<a href="/a/b">x</a>')
        assert parsed.links == ["https://x.com/a/b"]

    def test_duplicates_kept_once_in_first_seen_order(self) -> None:
        parsed = _parse(
            '<a href="/one">1</a><a href="/two">2</a><a href="https://x.com/one">again</a>'
        )
        assert parsed.links == ["https://x.com/one", "https://x.com/two"]

    @pytest.mark.parametrize("href", ["#top", "javascript:void(0)", "JavaScript:alert(1)", "   "])
    def test_fragment_script_and_blank_links_are_skipped(self, href: str) -> None:
        parsed = _parse(f'<a href="{href}">x</a><a>no href</a>')
        assert parsed.links == []

    def test_link_cap(self) -> None:
        body = "".join(f'<a href="/l{i}">{i}</a>' for i in range(10))
        parsed = _parse(body, max_links=3)
        assert parsed.links == ["https://x.com/l0", "https://x.com/l1", "https://x.com/l2"]


class TestImages:
    def test_images_are_resolved_deduped_and_capped(self) -> None:
        body = '<img src="a.png"><img src="a.png"><img src="/b.png"><img src="c.png"><img>'
        parsed = _parse(body, max_images=2)
        assert parsed.images == ["https://x.com/p/a.png", "https://x.com/b.png"]

    def test_images_disabled(self) -> None:
        parsed = _parse('<img src="a.png">', extract_images=False)
        assert parsed.images == []


# ---------------------------------------------------------------------------
# Headings
# ---------------------------------------------------------------------------


class TestHeadings:
    def test_headings_in_document_order(self) -> None:
        parsed = _parse("<h2>Second level</h2><h1> Top </h1><h6>Deep</h6>")
        assert parsed.headers == [
            Header(level=2, text="Second level"),
            Header(level=1, text="Top"),
            Header(level=6, text="Deep"),
        ]

    def test_heading_must_start_with_text(self) -> None:
        parsed = _parse("<h2><span>wrapped</span></h2><h3>   </h3><h4>kept</h4>")
        assert parsed.headers == [Header(level=4, text="kept")]

    def test_headings_disabled(self) -> None:
        parsed = _parse("<h1>Title</h1>", extract_headers=False)
        assert parsed.headers == []


class TestMalformedMarkup:
    def test_unbalanced_markup_still_extracts(self) -> None:
        parsed = _parse("<html><body><a href='/x'>x</div></p><h1>End")
        assert parsed.links == ["https://x.com/x"]
        assert parsed.headers == [Header(level=1, text="End")]
