"""
User Service Business Logic

Accounts, password checks, and the refresh-token session ledger that backs
login, rotation and revocation.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from core.config import AuthConfig
from core.jwt_manager import TokenType

from .models import (
    AccountStatus,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    User,
    UserProfile,
    UserSession,
)
from .password_utils import hash_password, is_password_strong, verify_password
from .protocols import (
    EmailAlreadyExistsError,
    EventBusProtocol,
    InvalidCredentialsError,
    InvalidTokenError,
    UserNotFoundError,
    UserRepositoryProtocol,
    WeakPasswordError,
)
from .token_issuer import AuthTokenIssuer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    """
    User management and authentication.

    Every refresh token lives in exactly one session row. Rotation swaps the
    row's token in place, so a rotated token no longer matches anything and
    its reuse fails. Revoking a user deletes all of their rows; access tokens
    already issued stay valid until they expire.
    """

    def __init__(
        self,
        repository: UserRepositoryProtocol,
        token_issuer: AuthTokenIssuer,
        event_bus: Optional[EventBusProtocol] = None,
        auth: Optional[AuthConfig] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.tokens = token_issuer
        self.event_bus = event_bus
        self.auth = auth or AuthConfig()
        self._now = clock
        logger.info("UserService initialized with dependency injection")

    # ====================
    # Authentication
    # ====================

    async def register(self, request: RegisterRequest, device_info: Optional[str] = None) -> AuthResponse:
        """
        Create a CUSTOMER account and log it in.

        Raises:
            WeakPasswordError: password fails the strength rule
            EmailAlreadyExistsError: email already registered
        """
        logger.info(f"Attempting to register user with email: {request.email}")

        ok, reason = is_password_strong(request.password, self.auth.password_min_length)
        if not ok:
            raise WeakPasswordError(reason)

        if await self.repository.get_user_by_email(request.email) is not None:
            raise EmailAlreadyExistsError(f"User with email {request.email} already exists")

        now = self._now()
        user = User(
            user_id=str(uuid.uuid4()),
            email=request.email,
            password_hash=hash_password(request.password, rounds=self.auth.bcrypt_rounds),
            first_name=request.first_name,
            last_name=request.last_name,
            phone_number=request.phone_number,
            marketing_consent=request.marketing_consent,
            account_status=AccountStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        user = await self.repository.create_user(user)
        logger.info(f"User registered successfully with ID: {user.user_id}")

        response = await self._start_session(user, device_info)
        await self._publish_event("user.registered", {"user_id": user.user_id, "email": user.email})
        return response

    async def login(self, request: LoginRequest, device_info: Optional[str] = None) -> AuthResponse:
        """
        Check credentials and open a session for the device.

        A second login from the same device replaces that device's session.
        """
        logger.info(f"Attempting login for email: {request.email}")

        user = await self.repository.get_user_by_email(request.email)
        if user is None:
            raise InvalidCredentialsError("Invalid email or password")

        if not verify_password(request.password, user.password_hash):
            logger.warning(f"Invalid password attempt for email: {request.email}")
            raise InvalidCredentialsError("Invalid email or password")

        if not user.is_active:
            raise InvalidCredentialsError("Account is not active")

        response = await self._start_session(user, device_info)
        logger.info(f"User logged in successfully with ID: {user.user_id}")
        await self._publish_event("user.logged_in", {"user_id": user.user_id})
        return response

    async def refresh(self, refresh_token: str) -> AuthResponse:
        """
        Exchange a refresh token for a new access/refresh pair.

        Raises:
            InvalidTokenError: token does not verify, is not a refresh token,
                has no live session, or was already rotated
        """
        claims = self.tokens.decode(refresh_token, expected_type=TokenType.REFRESH)
        if not claims["valid"]:
            raise InvalidTokenError("Invalid refresh token")

        session = await self.repository.get_session_by_token(refresh_token)
        if session is None:
            raise InvalidTokenError("Refresh token not found")

        now = self._now()
        if session.is_expired(now):
            await self.repository.delete_session(session.session_id)
            raise InvalidTokenError("Refresh token expired")

        user = await self.repository.get_user(session.user_id)
        if user is None:
            await self.repository.delete_session(session.session_id)
            raise InvalidTokenError("Refresh token not found")

        access_token = self.tokens.issue_access_token(user.user_id, user.email, user.role_names)
        new_refresh_token = self.tokens.issue_refresh_token(user.user_id, user.email)

        rotated = await self.repository.rotate_session(
            session.session_id,
            refresh_token,
            new_refresh_token,
            self.tokens.refresh_expires_at(now),
        )
        if rotated is None:
            raise InvalidTokenError("Refresh token has already been used")

        logger.info(f"Token refreshed successfully for user ID: {user.user_id}")
        return AuthResponse(
            access_token=access_token,
            refresh_token=new_refresh_token,
            expires_at=self.tokens.access_expires_at(now),
            user=UserProfile.from_user(user),
        )

    async def logout(self, refresh_token: str) -> bool:
        """Drop the session holding ``refresh_token``; unknown tokens are ignored"""
        session = await self.repository.get_session_by_token(refresh_token)
        if session is None:
            return False

        await self.repository.delete_session(session.session_id)
        logger.info(f"User logged out successfully, session deleted for user ID: {session.user_id}")
        await self._publish_event("user.logged_out", {"user_id": session.user_id})
        return True

    async def logout_all_devices(self, user_id: str) -> int:
        """Revoke every refresh token the user holds"""
        logger.info(f"Logging out user from all devices, user ID: {user_id}")
        return await self.repository.delete_user_sessions(user_id)

    def validate_token(self, token: str) -> bool:
        return self.tokens.validate(token)

    # ====================
    # Profile
    # ====================

    async def get_user(self, user_id: str) -> UserProfile:
        return UserProfile.from_user(await self._require_user(user_id))

    async def get_user_by_email(self, email: str) -> UserProfile:
        user = await self.repository.get_user_by_email(email.strip().lower())
        if user is None:
            raise UserNotFoundError(f"User not found with email: {email}")
        return UserProfile.from_user(user)

    async def update_profile(self, user_id: str, request: UpdateProfileRequest) -> UserProfile:
        user = await self._require_user(user_id)
        changes = request.model_dump(exclude_unset=True)
        updated = user.model_copy(update={**changes, "updated_at": self._now()})
        updated = await self.repository.update_user(updated)
        logger.info(f"User profile updated successfully for user ID: {user_id}")
        return UserProfile.from_user(updated)

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """
        Replace the password and force re-login everywhere.

        Raises:
            UserNotFoundError, InvalidCredentialsError, WeakPasswordError
        """
        user = await self._require_user(user_id)

        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        ok, reason = is_password_strong(new_password, self.auth.password_min_length)
        if not ok:
            raise WeakPasswordError(reason)

        await self.repository.update_user(user.model_copy(update={
            "password_hash": hash_password(new_password, rounds=self.auth.bcrypt_rounds),
            "updated_at": self._now(),
        }))
        await self.logout_all_devices(user_id)

        logger.info(f"Password changed successfully for user ID: {user_id}")
        await self._publish_event("user.password_changed", {"user_id": user_id})

    async def deactivate_account(self, user_id: str) -> None:
        user = await self._require_user(user_id)
        await self.repository.update_user(user.model_copy(update={
            "account_status": AccountStatus.INACTIVE,
            "updated_at": self._now(),
        }))
        await self.logout_all_devices(user_id)

        logger.info(f"Account deactivated successfully for user ID: {user_id}")
        await self._publish_event("user.deactivated", {"user_id": user_id})

    async def cleanup_expired_sessions(self, now: Optional[datetime] = None) -> int:
        removed = await self.repository.delete_expired_sessions(now or self._now())
        logger.info(f"Cleaned up {removed} expired sessions")
        return removed

    # ====================
    # Internal
    # ====================

    async def _require_user(self, user_id: str) -> User:
        user = await self.repository.get_user(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found with ID: {user_id}")
        return user

    async def _start_session(self, user: User, device_info: Optional[str]) -> AuthResponse:
        access_token = self.tokens.issue_access_token(user.user_id, user.email, user.role_names)
        refresh_token = self.tokens.issue_refresh_token(user.user_id, user.email)

        if device_info:
            existing = await self.repository.get_session_by_device(user.user_id, device_info)
            if existing is not None:
                await self.repository.delete_session(existing.session_id)

        now = self._now()
        await self.repository.create_session(UserSession(
            session_id=str(uuid.uuid4()),
            user_id=user.user_id,
            refresh_token=refresh_token,
            device_info=device_info,
            expires_at=self.tokens.refresh_expires_at(now),
            created_at=now,
            last_accessed_at=now,
        ))

        return AuthResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=self.tokens.access_expires_at(now),
            user=UserProfile.from_user(user),
        )

    async def _publish_event(self, subject: str, data: Dict[str, Any]) -> None:
        """Publish event to event bus"""
        if not self.event_bus:
            return

        try:
            await self.event_bus.publish(subject, {
                "event_type": subject.upper().replace(".", "_"),
                "source": "user_service",
                "data": {**data, "timestamp": self._now().isoformat()},
            })
        except Exception as e:
            logger.warning(f"Failed to publish event {subject}: {e}")


__all__ = ["UserService"]
