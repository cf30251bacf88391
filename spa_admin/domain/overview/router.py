"""Overview router - dashboard counters"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..bookings.router import get_booking_service
from ..bookings.service import BookingService
from ..inventory.router import get_inventory_service
from ..inventory.service import InventoryService
from ..staff.router import get_staff_service
from ..staff.service import StaffService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/overview", tags=["Overview"])


class OverviewResponse(BaseModel):
    lowStockItems: int
    todaysAppointments: int
    activeTherapists: int


@router.get("", response_model=OverviewResponse)
async def get_overview(
    refresh: bool = Query(False),
    inventory: InventoryService = Depends(get_inventory_service),
    bookings: BookingService = Depends(get_booking_service),
    staff: StaffService = Depends(get_staff_service),
):
    """Counters for the dashboard cards, each cached like a list count"""
    return {
        "lowStockItems": await inventory.low_stock_count(refresh),
        "todaysAppointments": await bookings.count_for_day(date.today(), refresh),
        "activeTherapists": await staff.active_count(refresh),
    }
