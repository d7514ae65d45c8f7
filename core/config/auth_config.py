#!/usr/bin/env python3
"""Authentication configuration (token signing and password hashing)"""
import os
from dataclasses import dataclass
from typing import Optional

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class AuthConfig:
    """JWT and password settings"""
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "shopster-user-service"

    # Seconds
    access_token_expiry: int = 3600
    refresh_token_expiry: int = 604800

    bcrypt_rounds: int = 12
    password_min_length: int = 8

    @classmethod
    def from_env(cls) -> 'AuthConfig':
        """Load auth config from environment"""
        return cls(
            jwt_secret=os.getenv("JWT_SECRET"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_issuer=os.getenv("JWT_ISSUER", "shopster-user-service"),
            access_token_expiry=_int(os.getenv("JWT_ACCESS_EXPIRY", "3600"), 3600),
            refresh_token_expiry=_int(os.getenv("JWT_REFRESH_EXPIRY", "604800"), 604800),
            bcrypt_rounds=_int(os.getenv("BCRYPT_ROUNDS", "12"), 12),
            password_min_length=_int(os.getenv("PASSWORD_MIN_LENGTH", "8"), 8),
        )
