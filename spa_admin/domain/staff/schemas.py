"""Staff domain schemas - therapists and other staff"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ...shared.validators import reject_null

Availability = Literal["Full-time", "Part-time"]


class StaffCreate(BaseModel):
    name: str = Field(min_length=1)
    specialties: list[str] = Field(default_factory=list)
    availability: Availability = "Full-time"
    email: EmailStr
    phone: str = ""
    active: bool = True


class StaffUpdate(BaseModel):
    name: Optional[str] = None
    specialties: Optional[list[str]] = None
    availability: Optional[Availability] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    active: Optional[bool] = None

    @field_validator("name", "specialties", "active")
    @classmethod
    def required_fields_not_null(cls, v):
        return reject_null(v)


class StaffResponse(BaseModel):
    id: str
    name: str
    specialties: list[str] = Field(default_factory=list)
    availability: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    active: bool = True
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class StaffListResponse(BaseModel):
    items: list[StaffResponse]
    lastCursor: Optional[str] = None
    totalCount: int
    fromCache: bool = False
