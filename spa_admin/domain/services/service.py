"""Service catalog service - Business logic for spa services"""

import logging
from typing import Optional

from fastapi import HTTPException
from google.cloud import exceptions as gexc
from sqlalchemy.orm import Session

from ...fetcher import CachedListFetcher, CancellationToken, InflightRequests
from ...mirror import LocalMirror
from ...pagination import ListPage
from .repository import ServiceRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    """Service layer for the treatment catalog"""

    def __init__(self, db: Session, client, inflight: Optional[InflightRequests] = None):
        self.repo = ServiceRepository(client)
        self.mirror = LocalMirror(db)
        self.fetcher = CachedListFetcher(self.repo, self.mirror, inflight)

    async def list_services(
        self,
        page_size: int = 10,
        cursor: Optional[str] = None,
        refresh: bool = False,
        status: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> ListPage:
        return await self.fetcher.fetch(self.repo.list_query(status), page_size, cursor, refresh, token)

    async def active_services(self) -> list[dict]:
        """Every active service sorted by name, for the booking form"""
        services = await self.repo.list_all(self.repo.list_query("active").filters)
        return sorted(services, key=lambda s: (s.get("name") or "").lower())

    async def get_service(self, service_id: str) -> dict:
        service = await self.repo.get(service_id)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    async def create_service(self, data: ServiceCreate) -> dict:
        service = await self.repo.add(data.model_dump())
        self.mirror.invalidate_counts(self.repo.collection_name)
        return service

    async def update_service(self, service_id: str, data: ServiceUpdate) -> dict:
        service = await self.get_service(service_id)
        try:
            applied = await self.repo.update(service_id, data.model_dump(exclude_unset=True))
        except gexc.NotFound:
            raise HTTPException(status_code=404, detail="Service not found")
        self.mirror.forget(self.repo.collection_name, service_id)
        return {**service, **applied}

    async def delete_service(self, service_id: str) -> dict:
        await self.get_service(service_id)
        await self.repo.delete(service_id)
        self.mirror.forget(self.repo.collection_name, service_id)
        return {"message": "Service deleted"}
