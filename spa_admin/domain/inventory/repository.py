"""Inventory repository - Firestore queries for stock items"""

from typing import Optional

from ...accessor import CollectionAccessor, wall_clock_id
from ...pagination import ListQuery


def is_low_stock(item: dict) -> bool:
    """An item is low on stock once current drops to its minimum"""
    return (item.get("current") or 0) <= (item.get("minimum") or 0)


class InventoryRepository(CollectionAccessor):
    """Repository for inventory documents (ids are creation-time millis)"""

    collection_name = "inventory"
    id_factory = staticmethod(wall_clock_id)

    @staticmethod
    def list_query(category: Optional[str] = None) -> ListQuery:
        filters = (("category", "==", category),) if category else ()
        return ListQuery("inventory", "name", filters=filters)

    async def count_low_stock(self) -> int:
        """
        Firestore cannot compare two fields of one document, so the
        low-stock count scans the collection.
        """
        items = await self.list_all()
        return sum(1 for item in items if is_low_stock(item))
