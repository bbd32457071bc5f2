"""Shared validation utilities"""

import re
from datetime import date, datetime, time
from typing import Optional


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD form value, returning None when empty or invalid"""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_time(value: Optional[str]) -> Optional[time]:
    """Parse an HH:MM (or HH:MM:SS) form value, returning None when empty or invalid"""
    if not value:
        return None
    value = value.strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    return None


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


def validate_zip(zip_code: Optional[str]) -> Optional[str]:
    """
    Validate a postal code.

    Postal codes are stored as digits only (German PLZ are five digits, but
    shorter foreign codes are accepted).

    Raises:
        ValueError: If the code contains anything but digits
    """
    if not zip_code:
        return zip_code

    zip_code = zip_code.strip()
    if not re.fullmatch(r"\d{3,10}", zip_code):
        raise ValueError("Postal code must contain digits only")

    return zip_code
