"""
Resilient calls to downstream services

Composes, for one named downstream dependency:

    cache -> circuit breaker -> retry (tenacity) -> per-attempt timeout -> call
                                   \\-> fallback on exhaustion or open circuit

Callers of ResilientAggregator.execute never see a network exception; they get
either real data or the deterministic fallback, and the log line tells which.

Usage:
    aggregator = ResilientAggregator("product-service", ResilienceConfig())
    products = await aggregator.execute(
        "featured",
        client.fetch_featured,
        lambda: create_mock_products("Featured Product", 10),
        10,
    )
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, Hashable, Optional, Tuple, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from core.config import ResilienceConfig
from core.exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


class CircuitState(str, Enum):
    """Circuit breaker states"""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(UpstreamUnavailableError):
    """Raised inside the retry loop when the breaker refuses a call"""
    error_code = "CIRCUIT_OPEN"


def _is_retryable(error: BaseException) -> bool:
    # Cancellation is a BaseException and must propagate, not be retried
    return isinstance(error, Exception) and not isinstance(error, CircuitOpenError)


# ====================
# Circuit Breaker
# ====================


class CircuitBreaker:
    """
    Failure-rate circuit breaker over a rolling window of call outcomes.

    CLOSED records outcomes and opens once at least ``minimum_calls`` outcomes
    are in the window and the failure rate reaches the threshold. OPEN refuses
    every call until ``open_cooldown`` seconds have elapsed, then becomes
    HALF_OPEN and admits exactly one probe. The probe's outcome closes the
    circuit (with a fresh window) or re-opens it.
    """

    def __init__(self, name: str, config: ResilienceConfig, clock: Clock = time.monotonic):
        self.name = name
        self.config = config
        self._clock = clock
        self._outcomes: Deque[bool] = deque(maxlen=max(1, config.window_size))
        self._state = CircuitState.CLOSED
        self._opened_at: Optional[float] = None
        self._probe_in_flight = False
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_rate(self) -> float:
        if not self._outcomes:
            return 0.0
        failures = sum(1 for ok in self._outcomes if not ok)
        return failures / len(self._outcomes)

    async def allow_request(self) -> bool:
        """Whether a call may go to the network right now"""
        async with self._lock:
            if self._state == CircuitState.CLOSED:
                return True

            if self._state == CircuitState.OPEN:
                elapsed = self._clock() - (self._opened_at or 0.0)
                if elapsed < self.config.open_cooldown:
                    return False
                self._state = CircuitState.HALF_OPEN
                self._probe_in_flight = True
                logger.info(f"Circuit '{self.name}' half-open after {elapsed:.1f}s, probing")
                return True

            # HALF_OPEN: one probe at a time
            if self._probe_in_flight:
                return False
            self._probe_in_flight = True
            return True

    async def record_success(self) -> None:
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._close()
                return
            self._outcomes.append(True)

    async def record_failure(self) -> None:
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._open()
                return
            if self._state == CircuitState.OPEN:
                return

            self._outcomes.append(False)
            if (
                len(self._outcomes) >= self.config.minimum_calls
                and self.failure_rate >= self.config.failure_rate_threshold
            ):
                self._open()

    def release_half_open_slot(self) -> None:
        """
        Free the half-open slot without recording an outcome.

        Used when the admitted call is cancelled before it finishes; the next
        caller is admitted in its place.
        """
        if self._state == CircuitState.HALF_OPEN and self._probe_in_flight:
            self._probe_in_flight = False
            logger.info(f"Circuit '{self.name}' half-open call cancelled, slot released")

    async def reset(self) -> None:
        async with self._lock:
            self._close()

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        self._probe_in_flight = False
        logger.warning(
            f"Circuit '{self.name}' opened (failure rate {self.failure_rate:.0%} "
            f"over {len(self._outcomes)} calls)"
        )

    def _close(self) -> None:
        if self._state != CircuitState.CLOSED:
            logger.info(f"Circuit '{self.name}' closed")
        self._state = CircuitState.CLOSED
        self._opened_at = None
        self._probe_in_flight = False
        self._outcomes.clear()


# ====================
# Response Cache
# ====================


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    try:
        return len(value) == 0
    except TypeError:
        return False


class ResponseCache:
    """TTL cache keyed by (operation, arguments); empty results are never stored"""

    def __init__(self, ttl: float, clock: Clock = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    @staticmethod
    def make_key(operation: str, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Hashable:
        return (operation, args, tuple(sorted(kwargs.items())))

    def get(self, key: Hashable) -> Tuple[bool, Any]:
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return False, None
        return True, value

    def put(self, key: Hashable, value: Any) -> bool:
        if self.ttl <= 0 or _is_empty(value):
            return False
        self._entries[key] = (self._clock() + self.ttl, value)
        return True

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# ====================
# Aggregator
# ====================


@dataclass
class AggregatorStats:
    calls: int = 0
    cache_hits: int = 0
    fallbacks: int = 0
    failures: int = 0


class ResilientAggregator:
    """Timeout, retry, circuit breaker, cache and fallback around one downstream"""

    def __init__(
        self,
        name: str,
        config: Optional[ResilienceConfig] = None,
        clock: Clock = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.name = name
        self.config = config or ResilienceConfig()
        self.breaker = CircuitBreaker(name, self.config, clock=clock)
        self.cache = ResponseCache(self.config.cache_ttl, clock=clock)
        self.stats = AggregatorStats()
        self._sleep = sleep

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(max(1, self.config.max_retries)),
            wait=wait_exponential(
                multiplier=self.config.backoff_base,
                exp_base=self.config.backoff_multiplier,
                max=self.config.backoff_max,
            ),
            retry=retry_if_exception(_is_retryable),
            sleep=self._sleep,
            reraise=True,
        )

    async def _attempt(self, operation: str, call: Callable[..., Awaitable[T]], args, kwargs) -> T:
        if not await self.breaker.allow_request():
            raise CircuitOpenError(f"Circuit '{self.name}' is open")

        try:
            result = await asyncio.wait_for(call(*args, **kwargs), timeout=self.config.timeout)
        except asyncio.CancelledError:
            self.breaker.release_half_open_slot()
            raise
        except Exception as e:
            self.stats.failures += 1
            await self.breaker.record_failure()
            logger.debug(f"[{self.name}] {operation} attempt failed: {type(e).__name__}: {e}")
            raise

        await self.breaker.record_success()
        return result

    async def execute(
        self,
        operation: str,
        call: Callable[..., Awaitable[T]],
        fallback: Callable[[], T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Run ``call(*args, **kwargs)`` under the resilience policy.

        Args:
            operation: Name used for the cache key and log lines
            call: Coroutine function performing the downstream request
            fallback: Zero-argument function producing substitute data

        Returns:
            Real or fallback data; never raises for downstream failures
        """
        self.stats.calls += 1
        key = self.cache.make_key(operation, args, kwargs)

        hit, cached = self.cache.get(key)
        if hit:
            self.stats.cache_hits += 1
            logger.debug(f"[{self.name}] cache hit for {operation}{args}")
            return cached

        try:
            result = None
            async for attempt in self._retrying():
                with attempt:
                    result = await self._attempt(operation, call, args, kwargs)
        except CircuitOpenError:
            return self._serve_fallback(operation, fallback, "circuit open")
        except asyncio.TimeoutError:
            return self._serve_fallback(operation, fallback, f"timed out after {self.config.timeout}s")
        except Exception as e:
            return self._serve_fallback(operation, fallback, f"{type(e).__name__}: {e}")

        if self.cache.put(key, result):
            logger.debug(f"[{self.name}] cached {operation}{args} for {self.config.cache_ttl}s")
        return result

    def _serve_fallback(self, operation: str, fallback: Callable[[], T], reason: str) -> T:
        self.stats.fallbacks += 1
        logger.warning(f"[{self.name}] serving fallback data for {operation}: {reason}")
        return fallback()

    def snapshot(self) -> Dict[str, Any]:
        """Counters and breaker state for health endpoints"""
        return {
            "name": self.name,
            "state": self.breaker.state.value,
            "failure_rate": round(self.breaker.failure_rate, 3),
            "calls": self.stats.calls,
            "cache_hits": self.stats.cache_hits,
            "fallbacks": self.stats.fallbacks,
            "failures": self.stats.failures,
            "cached_entries": len(self.cache),
        }


__all__ = [
    "CircuitState",
    "CircuitOpenError",
    "CircuitBreaker",
    "ResponseCache",
    "AggregatorStats",
    "ResilientAggregator",
]
