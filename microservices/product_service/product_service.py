"""
Product Service Business Logic

Catalog queries and inventory adjustments. Adjustments to one product are
serialized by a per-item lock and persisted with a version check, so two
reservations can never both spend the same available unit.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from .inventory import Inventory, InventoryLocks, consume, release, reserve
from .models import InventoryView, Product, ProductPage, ProductSummary
from .protocols import EventBusProtocol, ProductNotFoundError, ProductRepositoryProtocol

logger = logging.getLogger(__name__)

InventoryOperation = Callable[[Inventory, int], Tuple[Inventory, bool]]


class ProductService:
    """Product catalog and inventory business logic"""

    def __init__(
        self,
        repository: ProductRepositoryProtocol,
        event_bus: Optional[EventBusProtocol] = None,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.locks = InventoryLocks()
        logger.info("ProductService initialized with dependency injection")

    # ====================
    # Homepage listings
    # ====================

    async def get_random_products(self, limit: int) -> List[ProductSummary]:
        products = await self.repository.sample_products(limit)
        return [ProductSummary.from_product(p) for p in products]

    async def get_featured_products(self, limit: int) -> List[ProductSummary]:
        return await self._flagged("featured", limit)

    async def get_trending_products(self, limit: int) -> List[ProductSummary]:
        return await self._flagged("trending", limit)

    async def get_recommended_products(self, limit: int) -> List[ProductSummary]:
        return await self._flagged("recommended", limit)

    async def _flagged(self, flag: str, limit: int) -> List[ProductSummary]:
        products = await self.repository.find_flagged(flag, limit)
        return [ProductSummary.from_product(p) for p in products if p.is_listed]

    # ====================
    # Catalog browsing
    # ====================

    async def get_product(self, product_id: str) -> ProductSummary:
        return ProductSummary.from_product(await self._get_product(product_id))

    async def list_products(self, page: int = 0, size: int = 20) -> ProductPage:
        products, total = await self.repository.list_products(page * size, size)
        return self._page(products, total, page, size)

    async def search_products(self, query: str, page: int = 0, size: int = 20) -> ProductPage:
        products, total = await self.repository.search_products(query.strip(), page * size, size)
        return self._page(products, total, page, size)

    async def get_products_by_category(self, category: str, page: int = 0, size: int = 20) -> ProductPage:
        products, total = await self.repository.find_by_category(category, page * size, size)
        return self._page(products, total, page, size)

    @staticmethod
    def _page(products: List[Product], total: int, page: int, size: int) -> ProductPage:
        return ProductPage(
            items=[ProductSummary.from_product(p) for p in products],
            page=page,
            size=size,
            total_items=total,
            total_pages=math.ceil(total / size) if size else 0,
        )

    # ====================
    # Inventory
    # ====================

    async def get_inventory(self, product_id: str) -> InventoryView:
        product = await self._get_product(product_id)
        return InventoryView.build(product_id, product.inventory)

    async def reserve_stock(self, product_id: str, amount: int) -> InventoryView:
        """Hold units for a pending order"""
        return await self._adjust(product_id, amount, reserve, "reserved")

    async def release_stock(self, product_id: str, amount: int) -> InventoryView:
        """Return held units"""
        return await self._adjust(product_id, amount, release, "released")

    async def consume_stock(self, product_id: str, amount: int) -> InventoryView:
        """Ship units, drawing down quantity and the reservation together"""
        return await self._adjust(product_id, amount, consume, "consumed")

    async def _adjust(
        self,
        product_id: str,
        amount: int,
        operation: InventoryOperation,
        verb: str,
    ) -> InventoryView:
        async with self.locks.lock_for(product_id):
            product = await self._get_product(product_id)
            before = product.inventory
            after, applied = operation(before, amount)

            if not applied:
                logger.info(
                    f"Inventory {verb} of {amount} ignored for {product_id} "
                    f"(quantity={before.quantity}, reserved={before.reserved_quantity})"
                )
                return InventoryView.build(product_id, before, applied=False)

            stored = await self.repository.update_inventory(product_id, after)

        logger.info(
            f"Inventory {verb} {amount} for {product_id}: "
            f"available {before.available_quantity} -> {stored.available_quantity}"
        )

        await self._publish_event(
            f"product.inventory.{verb}",
            {
                "product_id": product_id,
                "amount": amount,
                "quantity": stored.quantity,
                "reserved_quantity": stored.reserved_quantity,
                "available_quantity": stored.available_quantity,
            }
        )
        if stored.stock_status != before.stock_status:
            await self._publish_event(
                "product.stock_status.changed",
                {
                    "product_id": product_id,
                    "previous_status": before.stock_status.value,
                    "stock_status": stored.stock_status.value,
                }
            )

        return InventoryView.build(product_id, stored)

    # ====================
    # Helpers
    # ====================

    async def _get_product(self, product_id: str) -> Product:
        product = await self.repository.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product not found: {product_id}")
        return product

    async def _publish_event(self, subject: str, data: Dict[str, Any]) -> None:
        """Publish event to event bus"""
        if not self.event_bus:
            return

        try:
            await self.event_bus.publish(subject, {
                "event_type": subject.upper().replace(".", "_"),
                "source": "product_service",
                "data": {**data, "timestamp": datetime.now(timezone.utc).isoformat()},
            })
        except Exception as e:
            logger.warning(f"Failed to publish event {subject}: {e}")


__all__ = ["ProductService"]
