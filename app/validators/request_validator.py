"""
app/validators/request_validator.py

Input validation for scrape and schedule requests.
"""

from __future__ import annotations

from datetime import tzinfo
from urllib.parse import urlparse

from app.errors import ValidationError
from app.scheduler.cron import parse_cron_expression

MAX_NAME_LENGTH = 100
_ALLOWED_SCHEMES = {"http", "https"}


def validate_required(value: str | None, field_name: str) -> str:
    """
    Return the trimmed value, rejecting missing or blank input.
    """

    stripped = (value or "").strip()
    if not stripped:
        raise ValidationError(f"{field_name} is required")
    return stripped


def validate_name(value: str | None) -> str:
    name = validate_required(value, "name")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"name must not exceed {MAX_NAME_LENGTH} characters")
    return name


def validate_url(value: str | None) -> str:
    """
    Accept only absolute http(s) URLs with a host. Returns the trimmed URL.
    """

    url = validate_required(value, "URL")
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise ValidationError(f"invalid URL format: {exc}") from exc

    if not parsed.scheme or not parsed.netloc:
        raise ValidationError(
            "URL must include protocol (http:// or https://) and valid domain"
        )
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        raise ValidationError("only HTTP and HTTPS protocols are supported")
    if not parsed.hostname:
        raise ValidationError("URL must include a valid domain")
    return url


def validate_cron_expression(value: str | None, *, tz: str | tzinfo = "UTC") -> str:
    expression = validate_required(value, "cron expression")
    parse_cron_expression(expression, tz=tz)
    return expression
