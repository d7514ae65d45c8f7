"""
Cart Service Data Models
"""

from typing import List, Optional, Dict, Any
from decimal import Decimal
from pydantic import BaseModel, Field, computed_field, field_validator


class CartItem(BaseModel):
    """One product line in a cart"""
    product_id: str = Field(..., min_length=1)
    product_name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    image_url: str = ""
    brand: str = ""
    in_stock: bool = True

    @computed_field
    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart(BaseModel):
    """A user's cart; absent carts read as empty"""
    user_id: str
    items: List[CartItem] = Field(default_factory=list)

    @computed_field
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @computed_field
    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    def find_item(self, product_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None


# ====================
# Request Models
# ====================

class AddItemRequest(BaseModel):
    product_id: str = Field(..., min_length=1)
    product_name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    image_url: str = ""
    brand: str = ""
    in_stock: bool = True

    @field_validator("product_id", "product_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class UpdateItemRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "CartItem",
    "Cart",
    "AddItemRequest",
    "UpdateItemRequest",
    "HealthResponse",
]
