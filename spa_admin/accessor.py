"""
Firestore collection accessor.

Translates a (pageSize, cursor, filters) request into a Firestore query,
runs it together with a server-side count over the same predicate, and maps
documents to plain record dicts. Remote errors are not caught here.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .pagination import ListPage, ListQuery, decode_cursor, encode_cursor

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def wall_clock_id() -> str:
    """Numeric document id taken from the wall clock (epoch millis)"""
    return str(int(time.time() * 1000))


def snapshot_to_record(snapshot) -> dict:
    data = snapshot.to_dict() or {}
    return {**data, "id": snapshot.id}


class CollectionAccessor:
    """Remote reads and writes for one Firestore collection"""

    collection_name: str = ""
    # When set, new documents get this id instead of a store-assigned one
    id_factory: Optional[Callable[[], str]] = None

    def __init__(self, client: firestore.AsyncClient, collection_name: Optional[str] = None):
        self.client = client
        if collection_name:
            self.collection_name = collection_name

    @property
    def collection(self):
        return self.client.collection(self.collection_name)

    def _filtered(self, filters=()):
        query = self.collection
        for field_path, op, value in filters:
            query = query.where(filter=FieldFilter(field_path, op, value))
        return query

    async def fetch_page(
        self, list_query: ListQuery, page_size: int, cursor: Optional[str] = None
    ) -> ListPage:
        """Fetch one ordered page plus the total count of matching documents"""
        direction = firestore.Query.DESCENDING if list_query.descending else firestore.Query.ASCENDING
        query = (
            self._filtered(list_query.filters)
            .order_by(list_query.order_field, direction=direction)
            .limit(page_size)
        )

        if cursor:
            anchor = decode_cursor(cursor)
            snapshot = await self.collection.document(anchor.doc_id).get()
            if snapshot.exists:
                query = query.start_after(snapshot)
            else:
                # Anchor was deleted; resume after its ordering value
                logger.debug(f"Cursor anchor {self.collection_name}/{anchor.doc_id} is gone")
                query = query.start_after({list_query.order_field: anchor.order_value})

        records = [snapshot_to_record(s) async for s in query.stream()]
        total_count = await self.count(list_query.filters)

        last_cursor = None
        if records:
            last = records[-1]
            last_cursor = encode_cursor(last["id"], last.get(list_query.order_field))

        logger.debug(
            f"📡 {self.collection_name}: fetched {len(records)} of {total_count} "
            f"(cursor={'yes' if cursor else 'no'})"
        )
        return ListPage(items=records, last_cursor=last_cursor, total_count=total_count)

    async def count(self, filters=()) -> int:
        """Server-side count of documents matching the filters"""
        results = await self._filtered(filters).count(alias="total").get()
        return int(results[0][0].value)

    async def list_all(self, filters=()) -> list[dict]:
        """Every matching document, unordered"""
        return [snapshot_to_record(s) async for s in self._filtered(filters).stream()]

    async def get(self, doc_id: str) -> Optional[dict]:
        snapshot = await self.collection.document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot_to_record(snapshot)

    async def add(self, data: dict) -> dict:
        """Create a document, stamping createdAt/updatedAt"""
        now = utcnow()
        payload = {**data, "createdAt": now, "updatedAt": now}

        if self.id_factory is not None:
            doc_ref = self.collection.document(self.id_factory())
            await doc_ref.set(payload)
        else:
            _, doc_ref = await self.collection.add(payload)

        logger.info(f"✅ Added {self.collection_name}/{doc_ref.id}")
        return {**payload, "id": doc_ref.id}

    async def update(self, doc_id: str, changes: dict[str, Any]) -> dict:
        """
        Apply a partial update. updatedAt always advances, even for an empty
        change set. Raises google.cloud.exceptions.NotFound for a missing document.
        """
        payload = {**changes, "updatedAt": utcnow()}
        await self.collection.document(doc_id).update(payload)
        logger.info(f"✅ Updated {self.collection_name}/{doc_id}: {sorted(changes)}")
        return payload

    async def set(self, doc_id: str, data: dict, merge: bool = True) -> dict:
        payload = {**data, "updatedAt": utcnow()}
        await self.collection.document(doc_id).set(payload, merge=merge)
        return payload

    async def delete(self, doc_id: str) -> None:
        await self.collection.document(doc_id).delete()
        logger.info(f"🗑️ Deleted {self.collection_name}/{doc_id}")
