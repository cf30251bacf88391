"""Service repository - Firestore queries for spa services"""

from typing import Optional

from ...accessor import CollectionAccessor
from ...pagination import ListQuery


class ServiceRepository(CollectionAccessor):
    """Repository for service documents"""

    collection_name = "services"

    @staticmethod
    def list_query(status: Optional[str] = None) -> ListQuery:
        filters = (("status", "==", status),) if status else ()
        return ListQuery("services", "name", filters=filters)

    async def find_by_name(self, name: str) -> Optional[dict]:
        """First service whose name matches exactly"""
        matches = await self.list_all((("name", "==", name),))
        return matches[0] if matches else None
