"""Booking service - Business logic for appointments and the public booking pages"""

import base64
import io
import logging
from datetime import date, timedelta
from typing import Optional
from urllib.parse import quote

import qrcode
from fastapi import HTTPException
from google.cloud import exceptions as gexc
from sqlalchemy.orm import Session

from ...accessor import utcnow
from ...config import PUBLIC_BASE_URL
from ...fetcher import CachedListFetcher, CancellationToken, InflightRequests
from ...mirror import LocalMirror
from ...pagination import ListPage
from ..services.repository import ServiceRepository
from ..transactions.repository import TransactionRepository
from .repository import BookingRepository, week_bounds
from .schemas import BookingCreate, BookingUpdate, ConfirmBookingRequest

logger = logging.getLogger(__name__)

# Predefined time slots offered by the booking form (no slot at noon)
TIME_SLOTS = [
    ("09:00", "9:00 AM"),
    ("10:00", "10:00 AM"),
    ("11:00", "11:00 AM"),
    ("13:00", "1:00 PM"),
    ("14:00", "2:00 PM"),
    ("15:00", "3:00 PM"),
    ("16:00", "4:00 PM"),
    ("17:00", "5:00 PM"),
]
BOOKING_WINDOW_DAYS = 14


def booking_status_url(booking_id: str) -> str:
    """Deep link to the public status page of a booking"""
    return f"{PUBLIC_BASE_URL}/book/status?id={quote(booking_id, safe='')}"


def make_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def bookable_dates(today: date) -> list[str]:
    return [(today + timedelta(days=i)).isoformat() for i in range(BOOKING_WINDOW_DAYS)]


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session, client, inflight: Optional[InflightRequests] = None):
        self.repo = BookingRepository(client)
        self.services_repo = ServiceRepository(client)
        self.transactions_repo = TransactionRepository(client)
        self.mirror = LocalMirror(db)
        self.fetcher = CachedListFetcher(self.repo, self.mirror, inflight)

    async def list_bookings(
        self,
        tab: str = "upcoming",
        page_size: int = 10,
        cursor: Optional[str] = None,
        refresh: bool = False,
        status: Optional[str] = None,
        today: Optional[date] = None,
        token: Optional[CancellationToken] = None,
    ) -> ListPage:
        """Upcoming or history tab, paginated"""
        list_query = self.repo.tab_query(tab, today or date.today(), status)
        return await self.fetcher.fetch(list_query, page_size, cursor, refresh, token)

    async def get_booking(self, booking_id: str) -> dict:
        booking = await self.repo.get(booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    async def create_booking(self, data: BookingCreate, status: str = "pending") -> dict:
        """Create a booking; new bookings start as pending"""
        logger.info(f"📥 New booking for {data.customerName} on {data.date} {data.time}")
        booking = await self.repo.add({**data.model_dump(), "status": status})
        self.mirror.invalidate_counts(self.repo.collection_name)
        return booking

    async def update_booking(self, booking_id: str, changes: dict) -> dict:
        """Apply a partial update; any status may move to any other"""
        booking = await self.get_booking(booking_id)
        try:
            applied = await self.repo.update(booking_id, changes)
        except gexc.NotFound:
            raise HTTPException(status_code=404, detail="Booking not found")
        self.mirror.forget(self.repo.collection_name, booking_id)
        return {**booking, **applied}

    async def patch_booking(self, booking_id: str, data: BookingUpdate) -> dict:
        return await self.update_booking(booking_id, data.model_dump(exclude_unset=True))

    async def set_status(self, booking_id: str, status: str) -> dict:
        logger.info(f"🔄 Booking {booking_id} -> {status}")
        return await self.update_booking(booking_id, {"status": status})

    async def assign_therapist(
        self, booking_id: str, therapist: str, therapist_id: Optional[str] = None
    ) -> dict:
        changes = {"therapist": therapist}
        if therapist_id:
            changes["therapistId"] = therapist_id
        return await self.update_booking(booking_id, changes)

    async def delete_booking(self, booking_id: str) -> dict:
        await self.get_booking(booking_id)
        await self.repo.delete(booking_id)
        self.mirror.forget(self.repo.collection_name, booking_id)
        return {"message": "Booking deleted"}

    async def confirm_booking(self, booking_id: str, data: ConfirmBookingRequest) -> dict:
        """
        Confirm a booking and record its payment. The amount is the booked
        service's price plus additional cost minus reduction.
        """
        booking = await self.get_booking(booking_id)
        service_name = booking.get("service") or ""

        service = await self.services_repo.find_by_name(service_name) if service_name else None
        if service is None:
            logger.warning(f"⚠️ No service named {service_name!r} for booking {booking_id}, base price 0")
        base_price = float((service or {}).get("price") or 0)
        amount = base_price + data.additionalCost - data.reduceCost

        confirmed = await self.update_booking(booking_id, {"status": "confirmed"})
        transaction = await self.transactions_repo.add(
            {
                "bookingId": booking_id,
                "date": utcnow(),
                "customerName": booking.get("customerName", ""),
                "serviceName": service_name,
                "amount": amount,
                "paymentMethod": data.paymentMethod,
                "status": "completed",
            }
        )
        self.mirror.invalidate_counts(self.transactions_repo.collection_name)
        logger.info(f"✅ Booking {booking_id} confirmed, transaction {transaction['id']} ({amount:.2f})")
        return {"booking": confirmed, "transaction": transaction}

    async def weekly_calendar(self, day: date) -> dict:
        """Bookings of the Sunday-started week containing `day`, grouped by date"""
        start, end = week_bounds(day)
        records = await self.repo.list_all(self.repo.week_query(day).filters)

        days = {(start + timedelta(days=i)).isoformat(): [] for i in range(7)}
        for booking in records:
            if booking.get("date") in days:
                days[booking["date"]].append(booking)
        for bookings in days.values():
            bookings.sort(key=lambda b: b.get("time") or "")

        return {"weekStart": start.isoformat(), "weekEnd": end.isoformat(), "days": days}

    async def count_for_day(self, day: date, refresh: bool = False) -> int:
        list_query = self.repo.day_query(day)
        return await self.fetcher.fetch_count(
            list_query.scope, lambda: self.repo.count(list_query.filters), refresh
        )

    # Public pages

    def booking_slots(self, today: Optional[date] = None) -> dict:
        return {
            "timeSlots": [{"time": t, "label": label} for t, label in TIME_SLOTS],
            "dates": bookable_dates(today or date.today()),
        }

    async def status_view(self, booking_id: Optional[str]) -> dict:
        """Read-only status page data with a QR code linking back to it"""
        if not booking_id:
            raise HTTPException(status_code=400, detail="No booking ID provided")

        booking = await self.get_booking(booking_id)
        url = booking_status_url(booking_id)
        qr_base64 = base64.b64encode(make_qr_png(url)).decode()
        return {
            "id": booking_id,
            "booking": booking,
            "statusUrl": url,
            "qrCode": f"data:image/png;base64,{qr_base64}",
        }

    async def status_qr_png(self, booking_id: Optional[str]) -> bytes:
        if not booking_id:
            raise HTTPException(status_code=400, detail="No booking ID provided")
        await self.get_booking(booking_id)
        return make_qr_png(booking_status_url(booking_id))
