"""
app/validators package marker.
"""

from app.validators.request_validator import (
    validate_cron_expression,
    validate_name,
    validate_required,
    validate_url,
)

__all__ = [
    "validate_cron_expression",
    "validate_name",
    "validate_required",
    "validate_url",
]
