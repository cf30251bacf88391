"""Booking router - admin endpoints for appointments"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...database import get_db
from ...fetcher import CancellationToken, InflightRequests, get_inflight, request_cancellation
from ...firestore import get_firestore
from ...pagination import page_payload
from .schemas import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatus,
    BookingStatusUpdate,
    BookingTab,
    BookingUpdate,
    ConfirmBookingRequest,
    ConfirmBookingResponse,
    TherapistAssignment,
    WeeklyCalendarResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(
    db: Session = Depends(get_db),
    client=Depends(get_firestore),
    inflight: InflightRequests = Depends(get_inflight),
) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db, client, inflight)


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    tab: BookingTab = Query("upcoming"),
    pageSize: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(None),
    refresh: bool = Query(False),
    status: Optional[BookingStatus] = Query(None),
    token: CancellationToken = Depends(request_cancellation),
    service: BookingService = Depends(get_booking_service),
):
    """Upcoming or history tab of the appointments table"""
    page = await service.list_bookings(tab, pageSize, cursor, refresh, status, token=token)
    return page_payload(page)


@router.get("/calendar", response_model=WeeklyCalendarResponse)
async def weekly_calendar(
    weekOf: Optional[date] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    return await service.weekly_calendar(weekOf or date.today())


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    return await service.create_booking(data)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_booking(booking_id)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: str,
    data: BookingUpdate,
    service: BookingService = Depends(get_booking_service),
):
    return await service.patch_booking(booking_id, data)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    data: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
):
    return await service.set_status(booking_id, data.status)


@router.patch("/{booking_id}/therapist", response_model=BookingResponse)
async def assign_therapist(
    booking_id: str,
    data: TherapistAssignment,
    service: BookingService = Depends(get_booking_service),
):
    return await service.assign_therapist(booking_id, data.therapist, data.therapistId)


@router.post("/{booking_id}/confirm", response_model=ConfirmBookingResponse)
async def confirm_booking(
    booking_id: str,
    data: ConfirmBookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    """Confirm the booking and record the payment as a completed transaction"""
    return await service.confirm_booking(booking_id, data)


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
):
    return await service.delete_booking(booking_id)
