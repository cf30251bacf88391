"""Public booking router - booking form and booking status pages"""

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ...config import BOOKING_RATE_LIMIT, BOOKING_RATE_WINDOW
from ...rate_limiter import create_rate_limiter
from ..services.router import get_catalog_service
from ..services.schemas import ServiceResponse
from ..services.service import CatalogService
from .router import get_booking_service
from .schemas import BookingCreate, BookingReceipt, BookingSlotsResponse, BookingStatusView
from .service import BookingService, booking_status_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/book", tags=["Public Booking"])

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")

booking_form_limit = create_rate_limiter(
    limit=BOOKING_RATE_LIMIT, window_seconds=BOOKING_RATE_WINDOW, key_prefix="booking_form"
)


@router.post("", response_model=BookingReceipt, status_code=201)
async def submit_booking(
    data: BookingCreate,
    _: None = Depends(booking_form_limit),
    service: BookingService = Depends(get_booking_service),
):
    """Public booking form submission; the booking starts as pending"""
    booking = await service.create_booking(data)
    return {
        "id": booking["id"],
        "status": booking["status"],
        "statusUrl": booking_status_url(booking["id"]),
    }


@router.get("/slots", response_model=BookingSlotsResponse)
async def booking_slots(service: BookingService = Depends(get_booking_service)):
    return service.booking_slots()


@router.get("/services", response_model=list[ServiceResponse])
async def bookable_services(service: CatalogService = Depends(get_catalog_service)):
    return await service.active_services()


@router.get("/status", response_model=BookingStatusView)
async def booking_status(
    id: Optional[str] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    """Read-only status of one booking with a QR code linking back here"""
    return await service.status_view(id)


@router.get("/status/qr")
async def booking_status_qr(
    id: Optional[str] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    png = await service.status_qr_png(id)
    filename = f"booking-{UNSAFE_FILENAME_CHARS.sub('_', id)}.png"
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
