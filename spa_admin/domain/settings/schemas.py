"""Settings domain schemas - application settings documents"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserRoles(BaseModel):
    admin: bool = False
    editor: bool = False
    viewer: bool = False


class UserRolesUpdate(BaseModel):
    admin: Optional[bool] = None
    editor: Optional[bool] = None
    viewer: Optional[bool] = None


class AppSettings(BaseModel):
    id: str
    googleSignInVisible: bool = True
    userRoles: UserRoles = Field(default_factory=UserRoles)
    updatedAt: Optional[datetime] = None


class AppSettingsUpdate(BaseModel):
    googleSignInVisible: Optional[bool] = None
    userRoles: Optional[UserRolesUpdate] = None
