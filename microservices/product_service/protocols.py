"""
Product Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from core.exceptions import ConcurrentModificationError, NotFoundError

# Import only models (no I/O dependencies)
from .models import Inventory, Product


class ProductNotFoundError(NotFoundError):
    """Product not found error"""
    error_code = "PRODUCT_NOT_FOUND"


@runtime_checkable
class ProductRepositoryProtocol(Protocol):
    """
    Interface for Product Repository.

    Listing queries only return ACTIVE + PUBLIC products unless noted.
    """

    async def initialize(self) -> None:
        ...

    async def close(self) -> None:
        ...

    # ==================== Product Operations ====================

    async def get_product(self, product_id: str) -> Optional[Product]:
        """Get product by ID, whatever its status"""
        ...

    async def save_product(self, product: Product) -> Product:
        """Insert a product (seeding); existing ids are left untouched"""
        ...

    async def count_products(self) -> int:
        ...

    async def sample_products(self, limit: int) -> List[Product]:
        """Random listed products"""
        ...

    async def find_flagged(self, flag: str, limit: int) -> List[Product]:
        """Listed products with ``flag`` (featured / trending / recommended) set"""
        ...

    async def list_products(self, offset: int, limit: int) -> Tuple[List[Product], int]:
        """Every product, ordered by name, with the total count"""
        ...

    async def search_products(self, query: str, offset: int, limit: int) -> Tuple[List[Product], int]:
        """Listed products whose name, brand, description or tags match"""
        ...

    async def find_by_category(self, category: str, offset: int, limit: int) -> Tuple[List[Product], int]:
        ...

    # ==================== Inventory Operations ====================

    async def update_inventory(self, product_id: str, inventory: Inventory) -> Inventory:
        """
        Persist ``inventory`` if its version still matches the stored one.

        Returns the stored record with the bumped version.

        Raises:
            ConcurrentModificationError: the stored version moved on
            ProductNotFoundError: no such product
        """
        ...


@runtime_checkable
class EventBusProtocol(Protocol):
    """Interface for Event Bus - no I/O imports"""

    async def publish(self, subject: str, data: Dict[str, Any]) -> Any:
        ...

    async def close(self) -> None:
        ...


__all__ = [
    "ProductRepositoryProtocol",
    "EventBusProtocol",
    "ProductNotFoundError",
    "ConcurrentModificationError",
]
