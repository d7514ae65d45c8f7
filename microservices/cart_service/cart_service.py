"""
Cart Service Business Logic

Read-modify-write of a user's cart document, serialized per user.
"""

import asyncio
import logging
import weakref
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .models import AddItemRequest, Cart, CartItem
from .protocols import CartItemNotFoundError, CartRepositoryProtocol, EventBusProtocol

logger = logging.getLogger(__name__)


class CartService:
    """Shopping cart business logic"""

    def __init__(
        self,
        repository: CartRepositoryProtocol,
        event_bus: Optional[EventBusProtocol] = None,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self._user_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()
        logger.info("CartService initialized with dependency injection")

    def _lock(self, user_id: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        return lock

    async def get_cart(self, user_id: str) -> Cart:
        cart = await self.repository.get_cart(user_id)
        return cart if cart is not None else Cart(user_id=user_id)

    async def add_item(self, user_id: str, request: AddItemRequest) -> Cart:
        """Add a product; adding one already in the cart increases its quantity"""
        async with self._lock(user_id):
            cart = await self.get_cart(user_id)
            existing = cart.find_item(request.product_id)
            if existing is not None:
                logger.debug(f"Updating existing item quantity for product ID: {request.product_id}")
                existing.quantity += request.quantity
            else:
                cart.items.append(CartItem(**request.model_dump()))
            saved = await self.repository.save_cart(cart)

        await self._publish_event(
            "cart.item.added",
            {"user_id": user_id, "product_id": request.product_id, "quantity": request.quantity},
        )
        return saved

    async def update_item(self, user_id: str, product_id: str, quantity: int) -> Cart:
        """
        Set an item's quantity.

        Raises:
            CartItemNotFoundError: product not in the cart
        """
        async with self._lock(user_id):
            cart = await self.get_cart(user_id)
            item = cart.find_item(product_id)
            if item is None:
                raise CartItemNotFoundError(f"Product {product_id} is not in the cart")
            item.quantity = quantity
            return await self.repository.save_cart(cart)

    async def remove_item(self, user_id: str, product_id: str) -> Cart:
        """Drop a product; removing an absent product leaves the cart as is"""
        async with self._lock(user_id):
            cart = await self.get_cart(user_id)
            cart.items = [item for item in cart.items if item.product_id != product_id]
            return await self.repository.save_cart(cart)

    async def clear_cart(self, user_id: str) -> bool:
        async with self._lock(user_id):
            existed = await self.repository.delete_cart(user_id)

        if existed:
            await self._publish_event("cart.cleared", {"user_id": user_id})
        return existed

    async def _publish_event(self, subject: str, data: Dict[str, Any]) -> None:
        """Publish event to event bus"""
        if not self.event_bus:
            return

        try:
            await self.event_bus.publish(subject, {
                "event_type": subject.upper().replace(".", "_"),
                "source": "cart_service",
                "data": {**data, "timestamp": datetime.now(timezone.utc).isoformat()},
            })
        except Exception as e:
            logger.warning(f"Failed to publish event {subject}: {e}")


__all__ = ["CartService"]
