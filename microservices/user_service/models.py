"""
User Service Data Models

Pydantic models for accounts, refresh-token sessions and auth payloads.
"""

from enum import Enum
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ====================
# Enum Types
# ====================

class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Role(str, Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


# ====================
# Core Models
# ====================

class User(BaseModel):
    """Stored account, including the password hash"""
    user_id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    email_verified: bool = False
    account_status: AccountStatus = AccountStatus.ACTIVE
    preferred_language: str = "en"
    marketing_consent: bool = False
    roles: List[Role] = Field(default_factory=lambda: [Role.CUSTOMER])
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.account_status == AccountStatus.ACTIVE

    @property
    def role_names(self) -> List[str]:
        return [r.value for r in self.roles]


class UserSession(BaseModel):
    """One refresh token held by one device"""
    session_id: str
    user_id: str
    refresh_token: str
    device_info: Optional[str] = None
    expires_at: datetime
    created_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


# ====================
# Request Models
# ====================

class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_email(v: str) -> str:
    v = v.strip().lower()
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError("must be a valid email address")
    return v


class RegisterRequest(_CamelRequest):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=32)
    marketing_consent: bool = False

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(_CamelRequest):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RefreshTokenRequest(_CamelRequest):
    refresh_token: str = Field(..., min_length=1)


class LogoutAllRequest(_CamelRequest):
    user_id: str = Field(..., min_length=1)


class UpdateProfileRequest(_CamelRequest):
    """Profile fields a user may change; omitted fields keep their value"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=32)
    date_of_birth: Optional[datetime] = None
    preferred_language: Optional[str] = Field(None, min_length=2, max_length=10)
    marketing_consent: Optional[bool] = None


class ChangePasswordRequest(_CamelRequest):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=128)


# ====================
# Response Models
# ====================

class UserProfile(BaseModel):
    """Account as shown to clients (no password hash)"""
    user_id: str
    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    email_verified: bool = False
    account_status: AccountStatus
    preferred_language: str = "en"
    marketing_consent: bool = False
    roles: List[Role]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(**user.model_dump(exclude={"password_hash"}))


class AuthResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_at: datetime
    user: UserProfile


class HealthResponse(BaseModel):
    status: str
    service: str
    port: int
    version: str
    dependencies: dict = Field(default_factory=dict)
