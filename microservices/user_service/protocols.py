"""
User Service Protocols

Defines interfaces for dependency injection and testing.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from core.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

from .models import User, UserSession


# ====================
# Custom Exceptions
# ====================


class InvalidCredentialsError(UnauthorizedError):
    """Wrong email/password, or the account cannot log in"""
    error_code = "INVALID_CREDENTIALS"


class InvalidTokenError(UnauthorizedError):
    """Refresh token is malformed, expired, revoked or already rotated"""
    error_code = "INVALID_TOKEN"


class EmailAlreadyExistsError(ConflictError):
    error_code = "EMAIL_ALREADY_EXISTS"


class UserNotFoundError(NotFoundError):
    error_code = "USER_NOT_FOUND"


class WeakPasswordError(ValidationError):
    error_code = "WEAK_PASSWORD"


# ====================
# Repository Protocols
# ====================


@runtime_checkable
class UserRepositoryProtocol(Protocol):
    """Users and their refresh-token sessions"""

    async def initialize(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def create_user(self, user: User) -> User:
        """Insert; EmailAlreadyExistsError if the email is taken"""
        ...

    async def get_user(self, user_id: str) -> Optional[User]:
        ...

    async def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    async def update_user(self, user: User) -> User:
        ...

    async def create_session(self, session: UserSession) -> UserSession:
        ...

    async def get_session_by_token(self, refresh_token: str) -> Optional[UserSession]:
        ...

    async def get_session_by_device(self, user_id: str, device_info: str) -> Optional[UserSession]:
        ...

    async def rotate_session(
        self,
        session_id: str,
        old_refresh_token: str,
        new_refresh_token: str,
        expires_at: datetime,
    ) -> Optional[UserSession]:
        """
        Swap the refresh token only if the session still holds ``old_refresh_token``.

        Returns None when another request rotated it first.
        """
        ...

    async def delete_session(self, session_id: str) -> bool:
        ...

    async def delete_user_sessions(self, user_id: str) -> int:
        ...

    async def delete_expired_sessions(self, now: datetime) -> int:
        ...

    async def list_user_sessions(self, user_id: str) -> List[UserSession]:
        ...


@runtime_checkable
class EventBusProtocol(Protocol):
    """Interface for Event Bus - no I/O imports"""

    async def publish(self, subject: str, data: Dict[str, Any]) -> Any:
        ...

    async def close(self) -> None:
        ...


__all__ = [
    "UserRepositoryProtocol",
    "EventBusProtocol",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "EmailAlreadyExistsError",
    "UserNotFoundError",
    "WeakPasswordError",
]
