#!/usr/bin/env python3
"""Resilience settings for cross-service calls (timeout, retry, breaker, cache)"""
import os
from dataclasses import dataclass

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class ResilienceConfig:
    """
    Policy for one downstream dependency.

    timeout is per attempt; max_retries counts total attempts.
    """
    timeout: float = 5.0
    max_retries: int = 3
    backoff_base: float = 0.5
    backoff_multiplier: float = 2.0
    backoff_max: float = 4.0

    # Circuit breaker
    failure_rate_threshold: float = 0.5
    window_size: int = 10
    minimum_calls: int = 5
    open_cooldown: float = 30.0

    # Response cache
    cache_ttl: float = 300.0

    @classmethod
    def from_env(cls, prefix: str = "RESILIENCE") -> 'ResilienceConfig':
        """Load resilience config from environment (RESILIENCE_TIMEOUT, ...)"""
        return cls(
            timeout=_float(os.getenv(f"{prefix}_TIMEOUT", "5.0"), 5.0),
            max_retries=_int(os.getenv(f"{prefix}_MAX_RETRIES", "3"), 3),
            backoff_base=_float(os.getenv(f"{prefix}_BACKOFF_BASE", "0.5"), 0.5),
            backoff_multiplier=_float(os.getenv(f"{prefix}_BACKOFF_MULTIPLIER", "2.0"), 2.0),
            backoff_max=_float(os.getenv(f"{prefix}_BACKOFF_MAX", "4.0"), 4.0),
            failure_rate_threshold=_float(os.getenv(f"{prefix}_FAILURE_RATE", "0.5"), 0.5),
            window_size=_int(os.getenv(f"{prefix}_WINDOW_SIZE", "10"), 10),
            minimum_calls=_int(os.getenv(f"{prefix}_MINIMUM_CALLS", "5"), 5),
            open_cooldown=_float(os.getenv(f"{prefix}_OPEN_COOLDOWN", "30.0"), 30.0),
            cache_ttl=_float(os.getenv(f"{prefix}_CACHE_TTL", "300.0"), 300.0),
        )
