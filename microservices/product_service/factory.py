"""
Product Service Factory

Factory for creating ProductService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.config_manager import ConfigManager

from .product_repository import ProductRepository
from .product_service import ProductService

logger = logging.getLogger(__name__)


def create_product_service(
    config: Optional[ConfigManager] = None,
    event_bus=None,
) -> ProductService:
    """
    Create ProductService with all real dependencies

    Args:
        config: Optional config manager (creates default if not provided)
        event_bus: Optional event bus for inventory events

    Returns:
        ProductService instance (repository not yet initialized)
    """
    if config is None:
        config = ConfigManager("product_service")

    repository = ProductRepository(config=config)

    logger.info("ProductService created with real dependencies")
    return ProductService(repository=repository, event_bus=event_bus)


__all__ = ["create_product_service"]
