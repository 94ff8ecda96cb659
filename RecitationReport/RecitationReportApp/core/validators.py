"""Validation helpers for rubric marks and account contact data."""

import re

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator

MARK_VALIDATORS = [MinValueValidator(0), MaxValueValidator(100)]

PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9 \-]{5,19}$")

def validate_phone_number(value: str) -> None:
    """Allow digits with optional leading '+', spaces and dashes (6-20 chars)."""
    if value and not PHONE_PATTERN.match(value.strip()):
        raise ValidationError("Enter a valid phone number.")

def validate_registration_number(value: str) -> None:
    """Registration numbers (NIS) are non-blank and contain no whitespace."""
    if not value or not value.strip():
        raise ValidationError("Registration number is required.")
    if any(ch.isspace() for ch in value.strip()):
        raise ValidationError("Registration number must not contain spaces.")
