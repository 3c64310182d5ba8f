"""
tests/test_request_validator.py

Input validation for scrape and schedule requests.
"""

from __future__ import annotations

import pytest

from app.errors import ValidationError
from app.scheduler.cron import CronExpressionError
from app.validators.request_validator import (
    validate_cron_expression,
    validate_name,
    validate_required,
    validate_url,
)


class TestRequired:
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_is_rejected(self, value) -> None:
        with pytest.raises(ValidationError, match="name is required"):
            validate_required(value, "name")

    def test_value_is_trimmed(self) -> None:
        assert validate_required("  x  ", "name") == "x"


class TestName:
    def test_max_length(self) -> None:
        assert validate_name("a" * 100) == "a" * 100
        with pytest.raises(ValidationError):
            validate_name("a" * 101)


class TestURL:
    @pytest.mark.parametrize(
        "url",
        ["https://example.com", "http://example.com/path?q=1", "  https://example.com/  "],
    )
    def test_accepts_http_and_https(self, url: str) -> None:
        assert validate_url(url) == url.strip()

    @pytest.mark.parametrize(
        "url",
        [
            "example.com",
            "/relative/path",
            "ftp://example.com/file",
            "mailto:someone@example.com",
            "https://",
            "http://[::1",
        ],
    )
    def test_rejects_everything_else(self, url: str) -> None:
        with pytest.raises(ValidationError):
            validate_url(url)


class TestCron:
    def test_valid_expression_is_returned_trimmed(self) -> None:
        assert validate_cron_expression(" 0 0 * * * * ") == "0 0 * * * *"

    def test_invalid_expression(self) -> None:
        with pytest.raises(CronExpressionError):
            validate_cron_expression("0 0 * * *")

    def test_missing_expression(self) -> None:
        with pytest.raises(ValidationError, match="cron expression is required"):
            validate_cron_expression(None)
