"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ...shared.validators import reject_null, validate_iso_date, validate_time_of_day
from ..transactions.schemas import PaymentMethod, TransactionResponse

BookingStatus = Literal["confirmed", "pending", "canceled"]
BookingTab = Literal["upcoming", "history"]


class BookingCreate(BaseModel):
    """Schema for the public booking form and admin-created bookings"""

    customerName: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    date: str
    time: str
    service: str = Field(min_length=1)
    serviceId: Optional[str] = None
    duration: Optional[str] = None
    notes: str = ""

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return validate_iso_date(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_of_day(v)


class BookingUpdate(BaseModel):
    """Partial update; omitted fields are left untouched"""

    customerName: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    service: Optional[str] = None
    serviceId: Optional[str] = None
    duration: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[BookingStatus] = None
    therapist: Optional[str] = None

    @field_validator("customerName", "date", "status")
    @classmethod
    def required_fields_not_null(cls, v):
        return reject_null(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return validate_iso_date(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_of_day(v)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class TherapistAssignment(BaseModel):
    therapist: str = Field(min_length=1)
    therapistId: Optional[str] = None


class ConfirmBookingRequest(BaseModel):
    """Confirmation with price adjustments on top of the service price"""

    additionalCost: float = Field(default=0, ge=0)
    reduceCost: float = Field(default=0, ge=0)
    paymentMethod: PaymentMethod = "cash"


class BookingResponse(BaseModel):
    id: str
    serviceId: Optional[str] = None
    service: Optional[str] = None
    customerName: str
    email: Optional[str] = None
    phone: Optional[str] = None
    date: str
    time: Optional[str] = None
    duration: Optional[str] = None
    notes: Optional[str] = None
    status: str = "pending"
    therapist: Optional[str] = None
    therapistId: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class BookingListResponse(BaseModel):
    items: list[BookingResponse]
    lastCursor: Optional[str] = None
    totalCount: int
    fromCache: bool = False


class ConfirmBookingResponse(BaseModel):
    booking: BookingResponse
    transaction: TransactionResponse


class WeeklyCalendarResponse(BaseModel):
    weekStart: str
    weekEnd: str
    days: dict[str, list[BookingResponse]]


class TimeSlot(BaseModel):
    time: str
    label: str


class BookingSlotsResponse(BaseModel):
    timeSlots: list[TimeSlot]
    dates: list[str]


class PublicBooking(BaseModel):
    """What the public status page may show"""

    customerName: str
    email: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    date: str
    time: Optional[str] = None
    status: str


class BookingStatusView(BaseModel):
    id: str
    booking: PublicBooking
    statusUrl: str
    qrCode: str


class BookingReceipt(BaseModel):
    """Answer to the public booking form"""

    id: str
    status: str
    statusUrl: str
