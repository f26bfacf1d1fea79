"""Shared validation utilities"""

import re
from datetime import date, datetime
from typing import Optional

# Optional +33 / 0033 / 0 prefix, a digit 1-9, then four pairs of digits.
# Space, dot and hyphen separators are accepted between the pairs.
FR_PHONE_PATTERN = re.compile(r"^(?:(?:\+|00)33|0)\s*[1-9](?:[\s.-]*\d{2}){4}$")

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_fr_phone(phone: str) -> str:
    """
    Validate a French phone number.

    The number is stored as entered (trimmed) so the operator sees exactly what
    the customer typed.

    Raises:
        ValueError: If the number does not match the French pattern
    """
    phone = phone.strip()
    if not FR_PHONE_PATTERN.match(phone):
        raise ValueError("numéro de téléphone français invalide")
    return phone


def validate_time(value: str) -> str:
    """
    Validate a 24-hour HH:MM time and return it zero-padded (9:05 -> 09:05).

    Raises:
        ValueError: If the value is not a valid 24-hour time
    """
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("heure invalide, format attendu HH:MM")
    hours, minutes = match.groups()
    return f"{int(hours):02d}:{minutes}"


def parse_iso_date(value: str) -> date:
    """
    Parse an ISO calendar date. A full ISO datetime is accepted and truncated
    to its date part.

    Raises:
        ValueError: If the value is not an ISO date
    """
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError as e:
        raise ValueError("date invalide, format attendu AAAA-MM-JJ") from e


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address, or None when blank

    Raises:
        ValueError: If email format is invalid
    """
    if email is None:
        return None

    email = email.strip().lower()
    if not email:
        return None

    if not EMAIL_PATTERN.match(email):
        raise ValueError("adresse email invalide")

    return email
