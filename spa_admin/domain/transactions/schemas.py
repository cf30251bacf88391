"""Transaction domain schemas - Pydantic models for validation"""

import logging
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import reject_null

logger = logging.getLogger(__name__)

PaymentMethod = Literal["cash", "card", "gcash", "maya"]
TransactionStatus = Literal["completed", "pending", "failed"]


def parse_transaction_date(value: Any) -> Optional[datetime]:
    """
    Normalize a stored transaction date.

    Firestore yields datetimes, the mirror yields ISO strings and legacy rows
    may hold epoch millis. Anything else is logged and reported as None
    rather than replaced with the current time.
    """
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000).astimezone()
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    logger.warning(f"⚠️ Malformed transaction date {value!r}, reporting as unknown")
    return None


class TransactionCreate(BaseModel):
    customerName: str = Field(min_length=1)
    serviceName: str = Field(min_length=1)
    amount: float
    paymentMethod: PaymentMethod
    status: TransactionStatus = "pending"
    bookingId: Optional[str] = None
    date: Optional[datetime] = None


class TransactionUpdate(BaseModel):
    customerName: Optional[str] = None
    serviceName: Optional[str] = None
    amount: Optional[float] = None
    paymentMethod: Optional[PaymentMethod] = None
    status: Optional[TransactionStatus] = None
    bookingId: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("customerName", "amount", "status")
    @classmethod
    def required_fields_not_null(cls, v):
        return reject_null(v)


class TransactionStatusUpdate(BaseModel):
    status: TransactionStatus


class TransactionResponse(BaseModel):
    id: str
    bookingId: Optional[str] = None
    date: Optional[datetime] = None
    customerName: str
    serviceName: Optional[str] = None
    amount: float = 0
    paymentMethod: Optional[str] = None
    status: str = "pending"
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return parse_transaction_date(v)


class LinkedBooking(BaseModel):
    """Booking a transaction points at through bookingId"""

    id: str
    customerName: str
    service: Optional[str] = None
    date: str
    time: Optional[str] = None
    status: str


class TransactionDetailResponse(TransactionResponse):
    booking: Optional[LinkedBooking] = None


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    lastCursor: Optional[str] = None
    totalCount: int
    fromCache: bool = False
