"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_iso_date(value: Optional[str]) -> Optional[str]:
    """
    Validate a calendar date string.

    Booking dates are stored as YYYY-MM-DD strings so that Firestore range
    filters on them sort chronologically.

    Raises:
        ValueError: If the value is not a valid YYYY-MM-DD date
    """
    if value is None:
        return value
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise ValueError("Date must be in YYYY-MM-DD format") from None


def validate_time_of_day(value: Optional[str]) -> Optional[str]:
    """Validate a 24-hour HH:MM time string"""
    if value is None:
        return value
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM (24-hour) format")
    return value


def reject_null(value):
    """Used on partial updates for fields a stored record must always carry"""
    if value is None:
        raise ValueError("Field cannot be null")
    return value
