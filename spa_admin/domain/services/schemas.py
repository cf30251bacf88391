"""Service domain schemas - treatments offered by the spa"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import reject_null

ServiceStatus = Literal["active", "inactive"]


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    price: float = Field(ge=0)
    status: ServiceStatus = "active"
    duration: int = Field(gt=0, description="Length in minutes")
    icon: Optional[str] = None


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    status: Optional[ServiceStatus] = None
    duration: Optional[int] = Field(default=None, gt=0)
    icon: Optional[str] = None

    @field_validator("name", "price", "status")
    @classmethod
    def required_fields_not_null(cls, v):
        return reject_null(v)


class ServiceResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float = 0
    status: str = "active"
    duration: Optional[int] = None
    icon: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ServiceListResponse(BaseModel):
    items: list[ServiceResponse]
    lastCursor: Optional[str] = None
    totalCount: int
    fromCache: bool = False
