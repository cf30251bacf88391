"""Transaction repository - Firestore queries for payment transactions"""

from datetime import datetime
from typing import Optional

from ...accessor import CollectionAccessor
from ...pagination import ListQuery


class TransactionRepository(CollectionAccessor):
    """Repository for transaction documents"""

    collection_name = "transactions"

    @staticmethod
    def list_query(
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> ListQuery:
        """Most recent first, optionally limited to a status and a date range"""
        filters = []
        if start:
            filters.append(("date", ">=", start))
        if end:
            filters.append(("date", "<=", end))
        if status:
            filters.append(("status", "==", status))
        return ListQuery("transactions", "date", descending=True, filters=tuple(filters))
