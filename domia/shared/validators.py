"""Shared validation utilities"""

import re
from typing import Optional


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number.

    Accepts national (0612345678) and international (+33 6 12 34 56 78)
    formats; spaces, dots, dashes and parentheses are stripped.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    cleaned = re.sub(r"[\s.\-()]", "", phone.strip())
    if cleaned.startswith("00"):
        cleaned = "+" + cleaned[2:]

    digits = cleaned[1:] if cleaned.startswith("+") else cleaned
    if not digits.isdigit() or not 8 <= len(digits) <= 15:
        raise ValueError("Invalid phone number")

    return cleaned


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

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def normalize_text(value: Optional[str]) -> str:
    """Trim and collapse internal whitespace; None becomes an empty string"""
    return re.sub(r"\s+", " ", str(value if value is not None else "")).strip()


def require_text(value: Optional[str], field_name: str) -> str:
    """Normalize a required free-text field, rejecting blank values"""
    normalized = normalize_text(value)
    if not normalized:
        raise ValueError(f"{field_name} is required")
    return normalized
