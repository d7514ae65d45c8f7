"""
Cart Repository

Data access layer - Redis, one JSON document per user under ``cart:<user_id>``.
"""

import logging
from typing import Optional

import redis.asyncio as redis

from core.config_manager import ConfigManager

from .models import Cart

logger = logging.getLogger(__name__)

KEY_PREFIX = "cart:"
DEFAULT_TTL_SECONDS = 30 * 24 * 3600


class CartRepository:
    """Cart data repository - Redis (Async)"""

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        client: Optional[redis.Redis] = None,
        ttl_seconds: Optional[int] = DEFAULT_TTL_SECONDS,
    ):
        if config is None:
            config = ConfigManager("cart_service")

        infra = config.settings.infrastructure
        self.redis = client or redis.from_url(infra.redis_url, decode_responses=True)
        self.ttl_seconds = ttl_seconds

        logger.info(f"Cart repository using Redis at {infra.redis_host}:{infra.redis_port}")

    @staticmethod
    def _key(user_id: str) -> str:
        return f"{KEY_PREFIX}{user_id}"

    async def initialize(self):
        await self.redis.ping()
        logger.info("Cart repository initialized with Redis")

    async def close(self):
        await self.redis.aclose()
        logger.info("Cart repository Redis connection closed")

    async def get_cart(self, user_id: str) -> Optional[Cart]:
        raw = await self.redis.get(self._key(user_id))
        if raw is None:
            return None
        return Cart.model_validate_json(raw)

    async def save_cart(self, cart: Cart) -> Cart:
        await self.redis.set(self._key(cart.user_id), cart.model_dump_json(), ex=self.ttl_seconds)
        return cart

    async def delete_cart(self, user_id: str) -> bool:
        return await self.redis.delete(self._key(user_id)) > 0

    async def health_check(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.warning(f"Redis health check failed: {e}")
            return False


__all__ = ["CartRepository", "KEY_PREFIX"]
