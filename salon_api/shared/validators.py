"""Shared validation utilities"""

import re
from typing import Optional


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

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


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to digits with an optional leading '+'.

    Raises:
        ValueError: If fewer than 8 or more than 15 digits remain
    """
    if not phone:
        return phone

    phone = phone.strip()
    prefix = "+" if phone.startswith("+") else ""
    digits = re.sub(r"\D", "", phone)

    if not 8 <= len(digits) <= 15:
        raise ValueError("Phone number must contain between 8 and 15 digits")

    return f"{prefix}{digits}"


def strip_or_none(value: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace, mapping blank strings to None"""
    if value is None:
        return None
    value = value.strip()
    return value or None
