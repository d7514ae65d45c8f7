"""
Product Service Client

Every call goes through one ResilientAggregator named "product-service", so
the circuit state is shared by all product endpoints. When the product
service is slow, failing or tripped, callers get placeholder products instead
of an error.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from core.config import ResilienceConfig
from core.resilience import ResilientAggregator
from core.service_client_base import BaseServiceClient

from ..models import ProductSummary

logger = logging.getLogger(__name__)

MOCK_PRODUCT_LIMIT = 5
MOCK_PRICE = Decimal("99.99")


def create_mock_product(name: str) -> ProductSummary:
    """Placeholder card for ``name``"""
    return ProductSummary(
        id="mock-" + name.lower().replace(" ", "-"),
        name=name,
        price=MOCK_PRICE,
        image="https://via.placeholder.com/300x300?text=" + name.replace(" ", "+"),
        rating=4.5,
        review_count=150,
        in_stock=True,
        badge="featured",
    )


def create_mock_products(prefix: str, limit: int) -> List[ProductSummary]:
    """``min(limit, 5)`` cards named "{prefix} 1" .. "{prefix} N" """
    count = max(0, min(limit, MOCK_PRODUCT_LIMIT))
    return [create_mock_product(f"{prefix} {i}") for i in range(1, count + 1)]


class ProductServiceClient(BaseServiceClient):
    """Resilient client for product_service"""

    service_name = "product_service"
    default_port = 8082

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        aggregator: Optional[ResilientAggregator] = None,
        resilience: Optional[ResilienceConfig] = None,
    ):
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)
        self.aggregator = aggregator or ResilientAggregator(
            "product-service", resilience or ResilienceConfig.from_env()
        )

    # ====================
    # Listings
    # ====================

    async def get_featured_products(self, limit: int) -> List[ProductSummary]:
        return await self._listing("featured", "Featured Product", limit)

    async def get_trending_products(self, limit: int) -> List[ProductSummary]:
        return await self._listing("trending", "Trending Product", limit)

    async def get_recommended_products(self, limit: int) -> List[ProductSummary]:
        return await self._listing("recommended", "Recommended Product", limit)

    async def get_random_products(self, limit: int) -> List[ProductSummary]:
        return await self._listing("random", "Random Product", limit)

    async def get_product_by_id(self, product_id: str) -> ProductSummary:
        logger.info(f"Fetching product by id: {product_id}")
        return await self.aggregator.execute(
            "product",
            self._fetch_product,
            lambda: create_mock_product(f"Product {product_id}"),
            product_id,
        )

    async def _listing(self, kind: str, fallback_prefix: str, limit: int) -> List[ProductSummary]:
        logger.info(f"Fetching {kind} products with limit: {limit}")
        return await self.aggregator.execute(
            f"{kind}-products",
            self._fetch_listing,
            lambda: create_mock_products(fallback_prefix, limit),
            kind,
            limit,
        )

    # ====================
    # Raw downstream calls
    # ====================

    async def _fetch_listing(self, kind: str, limit: int) -> List[ProductSummary]:
        response = await self.get(f"/api/v1/products/{kind}", params={"limit": limit})
        response.raise_for_status()
        items = self._unwrap(response.json()) or []
        return [ProductSummary.from_product_service(item) for item in items]

    async def _fetch_product(self, product_id: str) -> ProductSummary:
        response = await self.get(f"/api/v1/products/{product_id}")
        response.raise_for_status()
        return ProductSummary.from_product_service(self._unwrap(response.json()))

    @staticmethod
    def _unwrap(body: Any) -> Any:
        """product_service wraps payloads in {data, message, status, timestamp}"""
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def stats(self) -> Dict[str, Any]:
        return self.aggregator.snapshot()


__all__ = [
    "ProductServiceClient",
    "create_mock_product",
    "create_mock_products",
    "MOCK_PRODUCT_LIMIT",
]
