"""
Cart Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from core.exceptions import NotFoundError

from .models import Cart


class CartItemNotFoundError(NotFoundError):
    """Product is not in the user's cart"""
    error_code = "CART_ITEM_NOT_FOUND"


@runtime_checkable
class CartRepositoryProtocol(Protocol):
    """One document per user"""

    async def initialize(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def get_cart(self, user_id: str) -> Optional[Cart]:
        ...

    async def save_cart(self, cart: Cart) -> Cart:
        ...

    async def delete_cart(self, user_id: str) -> bool:
        """True if a cart existed"""
        ...

    async def health_check(self) -> bool:
        ...


@runtime_checkable
class EventBusProtocol(Protocol):
    """Interface for Event Bus - no I/O imports"""

    async def publish(self, subject: str, data: Dict[str, Any]) -> Any:
        ...

    async def close(self) -> None:
        ...


__all__ = ["CartRepositoryProtocol", "EventBusProtocol", "CartItemNotFoundError"]
