"""
Password Utilities for the User Service

bcrypt hashing plus the registration strength rule.
"""

import logging
from typing import Optional

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 12


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password
        rounds: bcrypt work factor (tests use the minimum, 4)

    Returns:
        Bcrypt hash string
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """True if ``password`` matches ``password_hash``; malformed hashes never match"""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as e:
        logger.error(f"Password verification failed: {e}")
        return False


def is_password_strong(password: str, min_length: int = 8) -> tuple[bool, Optional[str]]:
    """
    Check the minimum password rule: length, upper, lower and a digit.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters"

    has_upper = any(c.isupper() for c in password)
    has_lower = any(c.islower() for c in password)
    has_digit = any(c.isdigit() for c in password)

    if not (has_upper and has_lower and has_digit):
        return False, "Password must contain uppercase, lowercase, and a number"

    return True, None


__all__ = ["hash_password", "verify_password", "is_password_strong", "DEFAULT_BCRYPT_ROUNDS"]
