"""Supplier service - Business logic for suppliers"""

from typing import Optional

from fastapi import HTTPException
from google.cloud import exceptions as gexc
from sqlalchemy.orm import Session

from ...fetcher import CachedListFetcher, CancellationToken, InflightRequests
from ...mirror import LocalMirror
from ...pagination import ListPage
from .repository import SupplierRepository
from .schemas import SupplierCreate, SupplierUpdate


class SupplierService:
    def __init__(self, db: Session, client, inflight: Optional[InflightRequests] = None):
        self.repo = SupplierRepository(client)
        self.mirror = LocalMirror(db)
        self.fetcher = CachedListFetcher(self.repo, self.mirror, inflight)

    async def list_suppliers(
        self,
        page_size: int = 10,
        cursor: Optional[str] = None,
        refresh: bool = False,
        status: Optional[str] = None,
        category: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> ListPage:
        list_query = self.repo.list_query(status, category)
        return await self.fetcher.fetch(list_query, page_size, cursor, refresh, token)

    async def get_supplier(self, supplier_id: str) -> dict:
        supplier = await self.repo.get(supplier_id)
        if not supplier:
            raise HTTPException(status_code=404, detail="Supplier not found")
        return supplier

    async def create_supplier(self, data: SupplierCreate) -> dict:
        supplier = await self.repo.add(data.model_dump())
        self.mirror.invalidate_counts(self.repo.collection_name)
        return supplier

    async def update_supplier(self, supplier_id: str, data: SupplierUpdate) -> dict:
        supplier = await self.get_supplier(supplier_id)
        try:
            applied = await self.repo.update(supplier_id, data.model_dump(exclude_unset=True))
        except gexc.NotFound:
            raise HTTPException(status_code=404, detail="Supplier not found")
        self.mirror.forget(self.repo.collection_name, supplier_id)
        return {**supplier, **applied}

    async def delete_supplier(self, supplier_id: str) -> dict:
        await self.get_supplier(supplier_id)
        await self.repo.delete(supplier_id)
        self.mirror.forget(self.repo.collection_name, supplier_id)
        return {"message": "Supplier deleted"}
