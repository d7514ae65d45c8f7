"""
Auth Token Issuer

Thin user-service facade over the shared JWTManager.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.config import AuthConfig
from core.jwt_manager import JWTManager, TokenClaims, TokenType

logger = logging.getLogger(__name__)


class AuthTokenIssuer:
    """Issues and checks the access/refresh pair handed out at login"""

    def __init__(self, jwt_manager: Optional[JWTManager] = None, auth: Optional[AuthConfig] = None):
        if jwt_manager is None:
            auth = auth or AuthConfig.from_env()
            jwt_manager = JWTManager(
                secret_key=auth.jwt_secret,
                algorithm=auth.jwt_algorithm,
                issuer=auth.jwt_issuer,
                access_token_expiry=auth.access_token_expiry,
                refresh_token_expiry=auth.refresh_token_expiry,
            )
        self.jwt = jwt_manager

    @property
    def access_token_expiry(self) -> int:
        return self.jwt.access_token_expiry

    @property
    def refresh_token_expiry(self) -> int:
        return self.jwt.refresh_token_expiry

    def access_expires_at(self, now: Optional[datetime] = None) -> datetime:
        return self.jwt.access_expires_at(now)

    def refresh_expires_at(self, now: Optional[datetime] = None) -> datetime:
        return self.jwt.refresh_expires_at(now)

    def issue_access_token(self, user_id: str, email: str, roles: List[str]) -> str:
        return self.jwt.create_access_token(
            TokenClaims(user_id=user_id, email=email, roles=list(roles), token_type=TokenType.ACCESS)
        )

    def issue_refresh_token(self, user_id: str, email: str) -> str:
        return self.jwt.create_refresh_token(
            TokenClaims(user_id=user_id, email=email, token_type=TokenType.REFRESH)
        )

    def validate(self, token: str) -> bool:
        return self.jwt.is_valid(token)

    def decode(self, token: str, expected_type: Optional[TokenType] = None) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        Never raises; callers check ``result["valid"]`` and read ``result["error"]``
        on failure.
        """
        result = self.jwt.verify_token(token, expected_type=expected_type)
        if not result.get("valid"):
            logger.debug(f"Token rejected: {result.get('error')}")
        return result


__all__ = ["AuthTokenIssuer"]
