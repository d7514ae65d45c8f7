"""
Cart Service Factory

Factory for creating CartService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.config_manager import ConfigManager

from .cart_repository import CartRepository
from .cart_service import CartService

logger = logging.getLogger(__name__)


def create_cart_service(
    config: Optional[ConfigManager] = None,
    event_bus=None,
) -> CartService:
    """
    Create CartService with a Redis-backed repository

    Args:
        config: Optional config manager (creates default if not provided)
        event_bus: Optional event bus for cart events
    """
    if config is None:
        config = ConfigManager("cart_service")

    repository = CartRepository(config=config)

    logger.info("CartService created with real dependencies")
    return CartService(repository=repository, event_bus=event_bus)


__all__ = ["create_cart_service"]
