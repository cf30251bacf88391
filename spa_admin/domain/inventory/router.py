"""Inventory router - stock items and the low-stock counter"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...database import get_db
from ...fetcher import CancellationToken, InflightRequests, get_inflight, request_cancellation
from ...firestore import get_firestore
from ...pagination import page_payload
from .schemas import (
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryItemUpdate,
    InventoryListResponse,
    LowStockCountResponse,
)
from .service import InventoryService, with_stock_status

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def get_inventory_service(
    db: Session = Depends(get_db),
    client=Depends(get_firestore),
    inflight: InflightRequests = Depends(get_inflight),
) -> InventoryService:
    """Dependency injection for InventoryService"""
    return InventoryService(db, client, inflight)


@router.get("", response_model=InventoryListResponse)
async def list_inventory(
    pageSize: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(None),
    refresh: bool = Query(False),
    category: Optional[str] = Query(None),
    token: CancellationToken = Depends(request_cancellation),
    service: InventoryService = Depends(get_inventory_service),
):
    page = await service.list_items(pageSize, cursor, refresh, category, token=token)
    return page_payload(page, with_stock_status)


@router.get("/low-stock-count", response_model=LowStockCountResponse)
async def low_stock_count(
    refresh: bool = Query(False),
    service: InventoryService = Depends(get_inventory_service),
):
    return {"lowStock": await service.low_stock_count(refresh)}


@router.post("", response_model=InventoryItemResponse, status_code=201)
async def create_item(
    data: InventoryItemCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    return with_stock_status(await service.create_item(data))


@router.get("/{item_id}", response_model=InventoryItemResponse)
async def get_item(item_id: str, service: InventoryService = Depends(get_inventory_service)):
    return with_stock_status(await service.get_item(item_id))


@router.patch("/{item_id}", response_model=InventoryItemResponse)
async def update_item(
    item_id: str,
    data: InventoryItemUpdate,
    service: InventoryService = Depends(get_inventory_service),
):
    return with_stock_status(await service.update_item(item_id, data))


@router.delete("/{item_id}")
async def delete_item(item_id: str, service: InventoryService = Depends(get_inventory_service)):
    return await service.delete_item(item_id)
