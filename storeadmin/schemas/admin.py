from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from storeadmin.models.admin_user import AccessLevel, AdminStatus


class AdminOut(BaseModel):
    id: int
    name: str
    email: str
    access_level: AccessLevel
    status: AdminStatus
    active: bool
    email_verified: bool
    last_login: Optional[datetime] = None
    last_logout: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AdminStatusOut(BaseModel):
    id: int
    name: str
    email: str
    access_level: AccessLevel
    status: AdminStatus
    active: bool
    email_verified: bool

    class Config:
        from_attributes = True


# Request bodies keep every field optional so missing or malformed values reach
# the service validators and come back as the matching error kind.

class AdminInviteIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    access_level: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("access_level", "accessLevel")
    )


class AdminUpdateIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    access_level: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("access_level", "accessLevel")
    )
    password: Optional[str] = None


class AdminStatusIn(BaseModel):
    status: Optional[str] = None


class ActivationIn(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = None


class AdminLoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
