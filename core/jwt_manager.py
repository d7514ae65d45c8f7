"""
JWT Token Manager for the Shopster platform
Self-issued access and refresh tokens signed with a shared secret
"""

import jwt
import uuid
import secrets
import logging
from typing import Dict, Any, Optional, List
from datetime import datetime, timedelta, timezone
from enum import Enum
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token types"""
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass
class TokenClaims:
    """Claims carried by Shopster tokens"""
    user_id: str
    email: str
    roles: List[str] = field(default_factory=list)
    token_type: TokenType = TokenType.ACCESS


class JWTManager:
    """
    JWT Token Manager

    Features:
    - Access tokens carry user id, email and roles
    - Refresh tokens carry only user id and email
    - Every token gets a unique jti, so two tokens minted in the same second differ
    - Verification never raises; failures come back as {"valid": False, "error": ...}
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: str = "HS256",
        issuer: str = "shopster-user-service",
        access_token_expiry: int = 3600,  # 1 hour
        refresh_token_expiry: int = 604800,  # 7 days
    ):
        """
        Initialize JWT Manager

        Args:
            secret_key: Secret key for signing tokens (will auto-generate if not provided)
            algorithm: JWT algorithm (default: HS256)
            issuer: Token issuer identifier
            access_token_expiry: Access token expiry in seconds
            refresh_token_expiry: Refresh token expiry in seconds
        """
        self.secret_key = secret_key or self._generate_secret()
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_token_expiry = access_token_expiry
        self.refresh_token_expiry = refresh_token_expiry

        if not secret_key:
            logger.warning(
                "No JWT secret provided - using generated secret. "
                "Tokens will not survive a restart; set JWT_SECRET outside development."
            )

    def _generate_secret(self) -> str:
        """Generate a secure random secret"""
        return secrets.token_urlsafe(64)

    def _encode(self, payload: Dict[str, Any]) -> str:
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def access_expires_at(self, now: Optional[datetime] = None) -> datetime:
        now = now or datetime.now(tz=timezone.utc)
        return now + timedelta(seconds=self.access_token_expiry)

    def refresh_expires_at(self, now: Optional[datetime] = None) -> datetime:
        now = now or datetime.now(tz=timezone.utc)
        return now + timedelta(seconds=self.refresh_token_expiry)

    def create_access_token(
        self,
        claims: TokenClaims,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create an access token

        Args:
            claims: Token claims
            expires_delta: Custom expiration time (optional)

        Returns:
            JWT access token string
        """
        now = datetime.now(tz=timezone.utc)
        expires = now + (expires_delta or timedelta(seconds=self.access_token_expiry))

        payload = {
            "iss": self.issuer,
            "sub": claims.email,
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
            "jti": str(uuid.uuid4()),
            "user_id": claims.user_id,
            "email": claims.email,
            "roles": ",".join(claims.roles),
            "token_type": TokenType.ACCESS.value,
        }

        token = self._encode(payload)

        logger.debug(f"Created access token for user: {claims.user_id}, expires: {expires}")
        return token

    def create_refresh_token(
        self,
        claims: TokenClaims,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a refresh token

        Refresh tokens carry no roles; roles are re-read when the pair is rotated.
        """
        now = datetime.now(tz=timezone.utc)
        expires = now + (expires_delta or timedelta(seconds=self.refresh_token_expiry))

        payload = {
            "iss": self.issuer,
            "sub": claims.email,
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
            "jti": str(uuid.uuid4()),
            "user_id": claims.user_id,
            "email": claims.email,
            "token_type": TokenType.REFRESH.value,
        }

        token = self._encode(payload)

        logger.debug(f"Created refresh token for user: {claims.user_id}, expires: {expires}")
        return token

    def create_token_pair(self, claims: TokenClaims) -> Dict[str, Any]:
        """
        Create both access and refresh tokens

        Returns:
            Dictionary with 'access_token', 'refresh_token', 'token_type', 'expires_at'
        """
        access_token = self.create_access_token(claims)
        refresh_token = self.create_refresh_token(claims)

        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "Bearer",
            "expires_at": self.access_expires_at(),
        }

    def verify_token(
        self,
        token: str,
        expected_type: Optional[TokenType] = None,
    ) -> Dict[str, Any]:
        """
        Verify and decode a JWT token

        Args:
            token: JWT token string
            expected_type: Expected token type (optional)

        Returns:
            Dictionary with verification result and claims
        """
        if not token:
            return {"valid": False, "error": "Token is empty"}

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            return {"valid": False, "error": "Token has expired"}
        except jwt.InvalidIssuerError:
            return {"valid": False, "error": "Invalid token issuer"}
        except jwt.InvalidTokenError as e:
            return {"valid": False, "error": f"Invalid token: {str(e)}"}

        token_type = payload.get("token_type")
        if expected_type and token_type != expected_type.value:
            return {
                "valid": False,
                "error": f"Invalid token type. Expected {expected_type.value}, got {token_type}"
            }

        user_id = payload.get("user_id")
        if not user_id:
            return {"valid": False, "error": "Invalid token: missing user_id claim"}

        roles = payload.get("roles") or ""
        return {
            "valid": True,
            "payload": payload,
            "user_id": str(user_id),
            "email": payload.get("email") or payload.get("sub"),
            "roles": [r for r in roles.split(",") if r],
            "token_type": token_type,
            "expires_at": datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            "issued_at": datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            "jti": payload.get("jti"),
        }

    def is_valid(self, token: str) -> bool:
        return self.verify_token(token).get("valid", False)


__all__ = ["JWTManager", "TokenClaims", "TokenType"]
