"""Shared validation utilities"""

import re
from typing import Optional

from .errors import ValidationError


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number to E.164 format.

    Numbers without a country code are assumed to be 10-digit US numbers.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    has_plus = phone.strip().startswith("+")
    digits = re.sub(r"\D", "", phone)

    if has_plus:
        if not 8 <= len(digits) <= 15:
            raise ValueError("Phone number must have 8 to 15 digits")
        return f"+{digits}"

    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]
    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits or include a country code")

    return f"+1{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def require_text(value: Optional[str], field: str) -> str:
    """Return the trimmed value, or raise ValidationError if it is blank"""
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def normalize_code(code: str) -> str:
    """Discount codes are matched case-insensitively and stored upper-cased"""
    return code.strip().upper()
