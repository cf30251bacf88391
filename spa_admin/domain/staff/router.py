"""Staff router - staff members and the therapist list"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...database import get_db
from ...fetcher import CancellationToken, InflightRequests, get_inflight, request_cancellation
from ...firestore import get_firestore
from ...pagination import page_payload
from .schemas import StaffCreate, StaffListResponse, StaffResponse, StaffUpdate
from .service import StaffService

router = APIRouter(prefix="/staff", tags=["Staff"])


def get_staff_service(
    db: Session = Depends(get_db),
    client=Depends(get_firestore),
    inflight: InflightRequests = Depends(get_inflight),
) -> StaffService:
    """Dependency injection for StaffService"""
    return StaffService(db, client, inflight)


@router.get("", response_model=StaffListResponse)
async def list_staff(
    pageSize: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(None),
    refresh: bool = Query(False),
    active: Optional[bool] = Query(None),
    token: CancellationToken = Depends(request_cancellation),
    service: StaffService = Depends(get_staff_service),
):
    page = await service.list_staff(pageSize, cursor, refresh, active, token=token)
    return page_payload(page)


@router.get("/therapists", response_model=list[StaffResponse])
async def list_therapists(service: StaffService = Depends(get_staff_service)):
    return await service.therapists()


@router.post("", response_model=StaffResponse, status_code=201)
async def create_staff(data: StaffCreate, service: StaffService = Depends(get_staff_service)):
    return await service.create_staff(data)


@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff(staff_id: str, service: StaffService = Depends(get_staff_service)):
    return await service.get_staff(staff_id)


@router.patch("/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: str,
    data: StaffUpdate,
    service: StaffService = Depends(get_staff_service),
):
    return await service.update_staff(staff_id, data)


@router.delete("/{staff_id}")
async def delete_staff(staff_id: str, service: StaffService = Depends(get_staff_service)):
    return await service.delete_staff(staff_id)
