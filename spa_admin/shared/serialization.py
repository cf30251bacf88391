"""Shared conversions between Firestore values and JSON-safe values"""

from datetime import date, datetime
from typing import Any

DATETIME_TAG = "$datetime"


def to_jsonable(value: Any) -> Any:
    """
    Convert a Firestore document value into something json.dumps accepts.

    Datetimes (including Firestore's DatetimeWithNanoseconds) become ISO-8601
    strings; nested dicts and lists are converted recursively.
    """
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def encode_scalar(value: Any) -> Any:
    """Encode a single ordering value, keeping datetimes distinguishable from strings"""
    if isinstance(value, datetime):
        return {DATETIME_TAG: value.isoformat()}
    return value


def decode_scalar(value: Any) -> Any:
    """Inverse of encode_scalar"""
    if isinstance(value, dict) and DATETIME_TAG in value:
        return datetime.fromisoformat(value[DATETIME_TAG])
    return value


def sort_key(value: Any) -> tuple:
    """Total ordering over mixed document values (numbers, then strings, then missing)"""
    if value is None:
        return (2, "")
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, datetime):
        return (1, value.isoformat())
    return (1, str(value))
