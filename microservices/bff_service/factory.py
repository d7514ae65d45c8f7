"""
BFF Service Factory

Factory for creating HomepageService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.config import ResilienceConfig
from core.config_manager import ConfigManager

from .clients import ProductServiceClient
from .homepage_service import HomepageService

logger = logging.getLogger(__name__)


def create_homepage_service(
    config: Optional[ConfigManager] = None,
    resilience: Optional[ResilienceConfig] = None,
) -> HomepageService:
    """
    Create HomepageService backed by a resilient product_service client

    Args:
        config: Optional config manager (creates default if not provided)
        resilience: Policy for product_service calls (RESILIENCE_* env when omitted)
    """
    if config is None:
        config = ConfigManager("bff_service")

    product_url = config.get_service_url("product_service")
    client = ProductServiceClient(
        base_url=product_url,
        resilience=resilience or config.settings.resilience,
    )

    logger.info(f"HomepageService created; product_service at {product_url}")
    return HomepageService(product_client=client)


__all__ = ["create_homepage_service"]
