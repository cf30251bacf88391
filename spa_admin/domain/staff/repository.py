"""Staff repository - Firestore queries for therapists and other staff"""

from typing import Optional

from ...accessor import CollectionAccessor
from ...pagination import ListQuery


class StaffRepository(CollectionAccessor):
    """Repository for staff documents"""

    collection_name = "staffs"

    @staticmethod
    def list_query(active: Optional[bool] = None) -> ListQuery:
        """Newest first; `active` narrows to active or inactive staff"""
        filters = (("active", "==", active),) if active is not None else ()
        return ListQuery("staffs", "createdAt", descending=True, filters=filters)
