"""Staff service - Business logic for staff members"""

import logging
from typing import Optional

from fastapi import HTTPException
from google.cloud import exceptions as gexc
from sqlalchemy.orm import Session

from ...fetcher import CachedListFetcher, CancellationToken, InflightRequests
from ...mirror import LocalMirror
from ...pagination import ListPage
from .repository import StaffRepository
from .schemas import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)


class StaffService:
    """Service layer for staff business logic"""

    def __init__(self, db: Session, client, inflight: Optional[InflightRequests] = None):
        self.repo = StaffRepository(client)
        self.mirror = LocalMirror(db)
        self.fetcher = CachedListFetcher(self.repo, self.mirror, inflight)

    async def list_staff(
        self,
        page_size: int = 10,
        cursor: Optional[str] = None,
        refresh: bool = False,
        active: Optional[bool] = None,
        token: Optional[CancellationToken] = None,
    ) -> ListPage:
        """
        Newest staff first. Active and inactive lists are cached separately
        and each reports its own aggregate count.
        """
        return await self.fetcher.fetch(self.repo.list_query(active), page_size, cursor, refresh, token)

    async def therapists(self) -> list[dict]:
        """Active staff, sorted by name, for the therapist picker"""
        staff = await self.repo.list_all(self.repo.list_query(True).filters)
        return sorted(staff, key=lambda s: (s.get("name") or "").lower())

    async def active_count(self, refresh: bool = False) -> int:
        list_query = self.repo.list_query(True)
        return await self.fetcher.fetch_count(
            list_query.scope, lambda: self.repo.count(list_query.filters), refresh
        )

    async def get_staff(self, staff_id: str) -> dict:
        member = await self.repo.get(staff_id)
        if not member:
            raise HTTPException(status_code=404, detail="Staff member not found")
        return member

    async def create_staff(self, data: StaffCreate) -> dict:
        member = await self.repo.add(data.model_dump())
        self.mirror.invalidate_counts(self.repo.collection_name)
        return member

    async def update_staff(self, staff_id: str, data: StaffUpdate) -> dict:
        member = await self.get_staff(staff_id)
        try:
            applied = await self.repo.update(staff_id, data.model_dump(exclude_unset=True))
        except gexc.NotFound:
            raise HTTPException(status_code=404, detail="Staff member not found")
        self.mirror.forget(self.repo.collection_name, staff_id)
        return {**member, **applied}

    async def delete_staff(self, staff_id: str) -> dict:
        await self.get_staff(staff_id)
        await self.repo.delete(staff_id)
        self.mirror.forget(self.repo.collection_name, staff_id)
        return {"message": "Staff member deleted"}
