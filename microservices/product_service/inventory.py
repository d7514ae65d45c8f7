"""
Inventory counter

Quantity / reserved / available arithmetic for one catalog item. Every
operation is pure: it returns a new Inventory plus whether it applied, and
leaves the input untouched. Callers serialize writers per item with
InventoryLocks.
"""

import asyncio
import weakref
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, Field, computed_field


class StockStatus(str, Enum):
    """Derived stock status"""
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    BACKORDER = "backorder"


def available_quantity(quantity: int, reserved_quantity: int) -> int:
    return max(0, quantity - reserved_quantity)


def is_low_stock(quantity: int, reserved_quantity: int, low_stock_threshold: int, in_stock: bool) -> bool:
    available = available_quantity(quantity, reserved_quantity)
    return in_stock and 0 < available <= low_stock_threshold


def derive_stock_status(
    quantity: int,
    reserved_quantity: int,
    low_stock_threshold: int,
    in_stock: bool,
    allow_backorders: bool,
) -> StockStatus:
    """
    Out-of-stock (or backorder) wins over low-stock, which wins over in-stock.
    """
    if not in_stock or available_quantity(quantity, reserved_quantity) <= 0:
        return StockStatus.BACKORDER if allow_backorders else StockStatus.OUT_OF_STOCK
    if is_low_stock(quantity, reserved_quantity, low_stock_threshold, in_stock):
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class Inventory(BaseModel):
    """Stock record owned by a catalog item"""
    quantity: int = Field(default=0, ge=0)
    reserved_quantity: int = Field(default=0, ge=0)
    in_stock: bool = False
    low_stock_threshold: int = Field(default=5, ge=0)
    track_quantity: bool = True
    allow_backorders: bool = False
    version: int = 0

    @computed_field
    @property
    def available_quantity(self) -> int:
        return available_quantity(self.quantity, self.reserved_quantity)

    @computed_field
    @property
    def stock_status(self) -> StockStatus:
        return derive_stock_status(
            self.quantity,
            self.reserved_quantity,
            self.low_stock_threshold,
            self.in_stock,
            self.allow_backorders,
        )

    @property
    def is_low_stock(self) -> bool:
        return is_low_stock(self.quantity, self.reserved_quantity, self.low_stock_threshold, self.in_stock)

    @property
    def is_out_of_stock(self) -> bool:
        return not self.in_stock or self.available_quantity <= 0


def reserve(inventory: Inventory, amount: int) -> Tuple[Inventory, bool]:
    """Hold ``amount`` units; no-op unless 0 < amount <= available"""
    if amount <= 0 or amount > inventory.available_quantity:
        return inventory, False
    return inventory.model_copy(update={"reserved_quantity": inventory.reserved_quantity + amount}), True


def release(inventory: Inventory, amount: int) -> Tuple[Inventory, bool]:
    """Return held units; no-op unless 0 < amount <= reserved"""
    if amount <= 0 or amount > inventory.reserved_quantity:
        return inventory, False
    return inventory.model_copy(update={"reserved_quantity": inventory.reserved_quantity - amount}), True


def consume(inventory: Inventory, amount: int) -> Tuple[Inventory, bool]:
    """
    Ship ``amount`` units: quantity drops and the reservation shrinks by the
    same amount, floored at zero. No-op unless 0 < amount <= quantity.
    """
    if amount <= 0 or amount > inventory.quantity:
        return inventory, False
    return inventory.model_copy(update={
        "quantity": inventory.quantity - amount,
        "reserved_quantity": max(0, inventory.reserved_quantity - amount),
    }), True


class InventoryLocks:
    """One asyncio.Lock per product id, dropped once nobody holds a reference"""

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, product_id: str) -> asyncio.Lock:
        lock = self._locks.get(product_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[product_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


__all__ = [
    "StockStatus",
    "Inventory",
    "InventoryLocks",
    "available_quantity",
    "is_low_stock",
    "derive_stock_status",
    "reserve",
    "release",
    "consume",
]
