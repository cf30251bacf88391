"""Supplier router - CRUD for suppliers"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...database import get_db
from ...fetcher import CancellationToken, InflightRequests, get_inflight, request_cancellation
from ...firestore import get_firestore
from ...pagination import page_payload
from .schemas import (
    SupplierCategory,
    SupplierCreate,
    SupplierListResponse,
    SupplierResponse,
    SupplierStatus,
    SupplierUpdate,
)
from .service import SupplierService

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


def get_supplier_service(
    db: Session = Depends(get_db),
    client=Depends(get_firestore),
    inflight: InflightRequests = Depends(get_inflight),
) -> SupplierService:
    """Dependency injection for SupplierService"""
    return SupplierService(db, client, inflight)


@router.get("", response_model=SupplierListResponse)
async def list_suppliers(
    pageSize: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(None),
    refresh: bool = Query(False),
    status: Optional[SupplierStatus] = Query(None),
    category: Optional[SupplierCategory] = Query(None),
    token: CancellationToken = Depends(request_cancellation),
    service: SupplierService = Depends(get_supplier_service),
):
    page = await service.list_suppliers(pageSize, cursor, refresh, status, category, token=token)
    return page_payload(page)


@router.post("", response_model=SupplierResponse, status_code=201)
async def create_supplier(data: SupplierCreate, service: SupplierService = Depends(get_supplier_service)):
    return await service.create_supplier(data)


@router.get("/{supplier_id}", response_model=SupplierResponse)
async def get_supplier(supplier_id: str, service: SupplierService = Depends(get_supplier_service)):
    return await service.get_supplier(supplier_id)


@router.patch("/{supplier_id}", response_model=SupplierResponse)
async def update_supplier(
    supplier_id: str,
    data: SupplierUpdate,
    service: SupplierService = Depends(get_supplier_service),
):
    return await service.update_supplier(supplier_id, data)


@router.delete("/{supplier_id}")
async def delete_supplier(supplier_id: str, service: SupplierService = Depends(get_supplier_service)):
    return await service.delete_supplier(supplier_id)
