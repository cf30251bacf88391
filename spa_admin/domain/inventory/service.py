"""Inventory service - Business logic for stock items"""

import logging
from typing import Optional

from fastapi import HTTPException
from google.cloud import exceptions as gexc
from sqlalchemy.orm import Session

from ...fetcher import CachedListFetcher, CancellationToken, InflightRequests
from ...mirror import LocalMirror
from ...pagination import ListPage
from .repository import InventoryRepository, is_low_stock
from .schemas import InventoryItemCreate, InventoryItemUpdate

logger = logging.getLogger(__name__)

LOW_STOCK_SCOPE = "lowStock"


def with_stock_status(item: dict) -> dict:
    """Attach the derived stock status; it is never stored"""
    return {**item, "stockStatus": "Low Stock" if is_low_stock(item) else "In Stock"}


class InventoryService:
    """Service layer for inventory business logic"""

    def __init__(self, db: Session, client, inflight: Optional[InflightRequests] = None):
        self.repo = InventoryRepository(client)
        self.mirror = LocalMirror(db)
        self.fetcher = CachedListFetcher(self.repo, self.mirror, inflight)

    async def list_items(
        self,
        page_size: int = 10,
        cursor: Optional[str] = None,
        refresh: bool = False,
        category: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> ListPage:
        return await self.fetcher.fetch(self.repo.list_query(category), page_size, cursor, refresh, token)

    async def low_stock_count(self, refresh: bool = False) -> int:
        return await self.fetcher.fetch_count(LOW_STOCK_SCOPE, self.repo.count_low_stock, refresh)

    async def get_item(self, item_id: str) -> dict:
        item = await self.repo.get(item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Inventory item not found")
        return item

    async def create_item(self, data: InventoryItemCreate) -> dict:
        item = await self.repo.add(data.model_dump())
        self.mirror.invalidate_counts(self.repo.collection_name)
        if is_low_stock(item):
            logger.warning(f"⚠️ {item['name']} created below its minimum ({item['current']}/{item['minimum']})")
        return item

    async def update_item(self, item_id: str, data: InventoryItemUpdate) -> dict:
        item = await self.get_item(item_id)
        try:
            applied = await self.repo.update(item_id, data.model_dump(exclude_unset=True))
        except gexc.NotFound:
            raise HTTPException(status_code=404, detail="Inventory item not found")
        self.mirror.forget(self.repo.collection_name, item_id)
        return {**item, **applied}

    async def delete_item(self, item_id: str) -> dict:
        await self.get_item(item_id)
        await self.repo.delete(item_id)
        self.mirror.forget(self.repo.collection_name, item_id)
        return {"message": "Inventory item deleted"}
