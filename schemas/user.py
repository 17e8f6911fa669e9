"""
Pydantic schemas for authentication and user management.
Wire format is camelCase; Python attributes stay snake_case.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from database.models import UserRole, UserStatus
from core.utils import local_now


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value.strip() if isinstance(value, str) else value


# --- Requests ---

class LoginRequest(CamelModel):
    """Login with username + password."""
    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., min_length=1, description="Plain text password")


class UserCreate(CamelModel):
    """Create user request (admin only). Role defaults to officer."""
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None
    role: UserRole = UserRole.OFFICER

    @field_validator("first_name", "last_name", "email", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise ValueError("Username must be at least 3 characters")
        return value


class UserUpdate(CamelModel):
    """Update user request. Omitted fields are left unchanged; passwords cannot be changed here."""
    username: Optional[str] = Field(default=None, min_length=3, max_length=100)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None

    @field_validator("username", "first_name", "last_name", "email", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class UserSuspend(CamelModel):
    """Suspend user request. The end of the suspension must lie in the future."""
    suspended_until: datetime
    suspended_reason: str = Field(..., min_length=1)

    @field_validator("suspended_reason")
    @classmethod
    def reason_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Suspension reason is required")
        return value

    @field_validator("suspended_until")
    @classmethod
    def until_in_future(cls, value: datetime) -> datetime:
        # Stored timestamps are naive server-local
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        if value <= local_now():
            raise ValueError("Suspension end must be in the future")
        return value


class UserSearch(CamelModel):
    """User directory filters; all optional."""
    username: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None

    @field_validator("username", "role", "status", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


# --- Responses ---

class UserResponse(CamelModel):
    """User projection. Never carries the password hash or session id."""
    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole
    status: UserStatus
    suspended_until: Optional[datetime] = None
    suspended_reason: Optional[str] = None
    profile_image_url: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class CurrentUserResponse(UserResponse):
    landing_view: str
    capabilities: List[str]


class LoginResponse(CamelModel):
    session_token: str
    expires_at: datetime
    user: CurrentUserResponse


class MessageResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
