"""Supplier repository - Firestore queries for suppliers"""

from typing import Optional

from ...accessor import CollectionAccessor
from ...pagination import ListQuery


class SupplierRepository(CollectionAccessor):
    """Repository for supplier documents"""

    collection_name = "suppliers"

    @staticmethod
    def list_query(status: Optional[str] = None, category: Optional[str] = None) -> ListQuery:
        filters = []
        if status:
            filters.append(("status", "==", status))
        if category:
            filters.append(("category", "==", category))
        return ListQuery("suppliers", "name", filters=tuple(filters))
