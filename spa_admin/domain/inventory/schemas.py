"""Inventory domain schemas - stock items"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import reject_null, validate_iso_date

StockStatus = Literal["Low Stock", "In Stock"]


class InventoryItemCreate(BaseModel):
    name: str = Field(min_length=1)
    current: int = Field(ge=0)
    minimum: int = Field(ge=0)
    category: str = ""
    supplier: str = ""
    cost: float = Field(default=0, ge=0)
    price: float = Field(default=0, ge=0)
    expirationDate: Optional[str] = None
    reorderLevel: int = Field(default=0, ge=0)
    imageUrl: Optional[str] = None

    @field_validator("expirationDate")
    @classmethod
    def validate_expiration(cls, v):
        return validate_iso_date(v)


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = None
    current: Optional[int] = Field(default=None, ge=0)
    minimum: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None
    supplier: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0)
    expirationDate: Optional[str] = None
    reorderLevel: Optional[int] = Field(default=None, ge=0)
    imageUrl: Optional[str] = None

    @field_validator("name", "current", "minimum", "cost", "price", "reorderLevel")
    @classmethod
    def required_fields_not_null(cls, v):
        return reject_null(v)

    @field_validator("expirationDate")
    @classmethod
    def validate_expiration(cls, v):
        return validate_iso_date(v)


class InventoryItemResponse(BaseModel):
    id: str
    name: str
    current: int = 0
    minimum: int = 0
    category: Optional[str] = None
    supplier: Optional[str] = None
    cost: float = 0
    price: float = 0
    expirationDate: Optional[str] = None
    reorderLevel: int = 0
    imageUrl: Optional[str] = None
    stockStatus: StockStatus
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class InventoryListResponse(BaseModel):
    items: list[InventoryItemResponse]
    lastCursor: Optional[str] = None
    totalCount: int
    fromCache: bool = False


class LowStockCountResponse(BaseModel):
    lowStock: int
