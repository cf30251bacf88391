"""Supplier domain schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ...shared.validators import reject_null, validate_iso_date

SupplierCategory = Literal["Product", "Service", "Both"]
SupplierStatus = Literal["Active", "Inactive", "Pending"]
SupplierPaymentMethod = Literal["Cash", "Bank Transfer", "Check", "Credit Card"]


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1)
    contact: str = Field(min_length=1)
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    notes: Optional[str] = None
    category: Optional[SupplierCategory] = None
    status: SupplierStatus = "Active"
    paymentTerms: Optional[str] = None
    lastOrderDate: Optional[str] = None
    preferredPaymentMethod: Optional[SupplierPaymentMethod] = None

    @field_validator("lastOrderDate")
    @classmethod
    def validate_last_order(cls, v):
        return validate_iso_date(v)


class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    contact: Optional[str] = None
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    notes: Optional[str] = None
    category: Optional[SupplierCategory] = None
    status: Optional[SupplierStatus] = None
    paymentTerms: Optional[str] = None
    lastOrderDate: Optional[str] = None
    preferredPaymentMethod: Optional[SupplierPaymentMethod] = None

    @field_validator("name", "status")
    @classmethod
    def required_fields_not_null(cls, v):
        return reject_null(v)

    @field_validator("lastOrderDate")
    @classmethod
    def validate_last_order(cls, v):
        return validate_iso_date(v)


class SupplierResponse(BaseModel):
    id: str
    name: str
    contact: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    status: str = "Active"
    paymentTerms: Optional[str] = None
    lastOrderDate: Optional[str] = None
    preferredPaymentMethod: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class SupplierListResponse(BaseModel):
    items: list[SupplierResponse]
    lastCursor: Optional[str] = None
    totalCount: int
    fromCache: bool = False
