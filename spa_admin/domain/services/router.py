"""Service router - CRUD for the treatment catalog"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...database import get_db
from ...fetcher import CancellationToken, InflightRequests, get_inflight, request_cancellation
from ...firestore import get_firestore
from ...pagination import page_payload
from .schemas import ServiceCreate, ServiceListResponse, ServiceResponse, ServiceStatus, ServiceUpdate
from .service import CatalogService

router = APIRouter(prefix="/services", tags=["Services"])


def get_catalog_service(
    db: Session = Depends(get_db),
    client=Depends(get_firestore),
    inflight: InflightRequests = Depends(get_inflight),
) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db, client, inflight)


@router.get("", response_model=ServiceListResponse)
async def list_services(
    pageSize: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(None),
    refresh: bool = Query(False),
    status: Optional[ServiceStatus] = Query(None),
    token: CancellationToken = Depends(request_cancellation),
    service: CatalogService = Depends(get_catalog_service),
):
    page = await service.list_services(pageSize, cursor, refresh, status, token=token)
    return page_payload(page)


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(data: ServiceCreate, service: CatalogService = Depends(get_catalog_service)):
    return await service.create_service(data)


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: str, service: CatalogService = Depends(get_catalog_service)):
    return await service.get_service(service_id)


@router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    data: ServiceUpdate,
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.update_service(service_id, data)


@router.delete("/{service_id}")
async def delete_service(service_id: str, service: CatalogService = Depends(get_catalog_service)):
    return await service.delete_service(service_id)
