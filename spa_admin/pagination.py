"""
Paginated list primitives shared by every collection.

A `ListQuery` describes one list view (collection, ordering, filters); its
`scope` is the canonical key under which the mirror stores that view. A
`ListPage` is the uniform result handed back to routers.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional

from .shared.serialization import decode_scalar, encode_scalar

# Operators accepted by Firestore FieldFilter and the mirror scope key
FILTER_OPERATORS = ("==", "!=", "<", "<=", ">", ">=", "in", "array-contains")


class InvalidCursorError(ValueError):
    """Raised when a cursor token cannot be decoded"""


class CursorAnchor(NamedTuple):
    doc_id: str
    order_value: Any


@dataclass(frozen=True)
class ListQuery:
    collection: str
    order_field: str
    descending: bool = False
    filters: tuple = ()

    def __post_init__(self):
        for _field, op, _value in self.filters:
            if op not in FILTER_OPERATORS:
                raise ValueError(f"Unsupported filter operator: {op}")

    @property
    def scope(self) -> str:
        if not self.filters:
            return "all"
        return "|".join(f"{f}{op}{json.dumps(v, sort_keys=True, default=str)}" for f, op, v in self.filters)


@dataclass
class ListPage:
    items: list = field(default_factory=list)
    last_cursor: Optional[str] = None
    total_count: int = 0
    from_cache: bool = False


def encode_cursor(doc_id: str, order_value: Any) -> str:
    """Build an opaque cursor pointing at the last record of a page"""
    raw = json.dumps({"id": doc_id, "v": encode_scalar(order_value)}, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")


def decode_cursor(token: str) -> CursorAnchor:
    padding = "=" * (-len(token) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(token + padding))
        return CursorAnchor(doc_id=str(data["id"]), order_value=decode_scalar(data.get("v")))
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
        raise InvalidCursorError(f"Invalid cursor: {token!r}") from e


def page_payload(page: ListPage, convert=dict) -> dict:
    """Uniform JSON body for a list endpoint"""
    return {
        "items": [convert(item) for item in page.items],
        "lastCursor": page.last_cursor,
        "totalCount": page.total_count,
        "fromCache": page.from_cache,
    }
