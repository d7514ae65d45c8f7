"""
BFF Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Dict, List, Protocol, runtime_checkable

from core.exceptions import ValidationError

from .models import ProductSummary


class InvalidCarouselTypeError(ValidationError):
    """Carousel type is not one of featured, trending, recommended, random"""
    error_code = "INVALID_CAROUSEL_TYPE"


@runtime_checkable
class ProductClientProtocol(Protocol):
    """
    Product listings as the homepage needs them.

    Implementations never raise for downstream failures; they return
    placeholder products instead.
    """

    async def get_featured_products(self, limit: int) -> List[ProductSummary]:
        ...

    async def get_trending_products(self, limit: int) -> List[ProductSummary]:
        ...

    async def get_recommended_products(self, limit: int) -> List[ProductSummary]:
        ...

    async def get_random_products(self, limit: int) -> List[ProductSummary]:
        ...

    async def get_product_by_id(self, product_id: str) -> ProductSummary:
        ...

    def stats(self) -> Dict[str, Any]:
        ...

    async def close(self) -> None:
        ...


__all__ = ["ProductClientProtocol", "InvalidCarouselTypeError"]
