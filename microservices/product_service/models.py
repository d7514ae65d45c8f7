"""
Product Service Data Models

Catalog items, their inventory, and the summary shape served to the BFF.
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from decimal import Decimal
from pydantic import BaseModel, Field

from .inventory import Inventory, StockStatus


# ====================
# Enum Types
# ====================

class ProductStatus(str, Enum):
    """Catalog lifecycle"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCONTINUED = "discontinued"
    DRAFT = "draft"


class Visibility(str, Enum):
    """Who can see a product"""
    PUBLIC = "public"
    PRIVATE = "private"
    HIDDEN = "hidden"


class ProductBadge(str, Enum):
    FEATURED = "featured"
    TRENDING = "trending"
    SALE = "sale"


# ====================
# Core Models
# ====================

class ProductImage(BaseModel):
    url: str
    alt: Optional[str] = None
    is_primary: bool = False
    sort_order: int = 0


class Rating(BaseModel):
    average: Decimal = Decimal("0")
    count: int = 0

    @property
    def has_ratings(self) -> bool:
        return self.count > 0


class Product(BaseModel):
    """Catalog item"""
    id: str
    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    brand: str = Field(..., max_length=100)
    category: str
    subcategory: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    sku: str = Field(..., max_length=50)
    price: Decimal = Field(..., gt=0)
    sale_price: Optional[Decimal] = Field(None, gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    images: List[ProductImage] = Field(default_factory=list)
    inventory: Inventory = Field(default_factory=Inventory)
    rating: Rating = Field(default_factory=Rating)
    status: ProductStatus = ProductStatus.ACTIVE
    visibility: Visibility = Visibility.PUBLIC
    featured: bool = False
    trending: bool = False
    recommended: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @property
    def has_discount(self) -> bool:
        return self.sale_price is not None and self.sale_price < self.price

    @property
    def primary_image(self) -> Optional[ProductImage]:
        for image in self.images:
            if image.is_primary:
                return image
        return self.images[0] if self.images else None

    @property
    def is_in_stock(self) -> bool:
        return self.inventory.in_stock and self.inventory.quantity > 0

    @property
    def badge(self) -> Optional[ProductBadge]:
        if self.featured:
            return ProductBadge.FEATURED
        if self.trending:
            return ProductBadge.TRENDING
        if self.has_discount:
            return ProductBadge.SALE
        return None

    @property
    def is_listed(self) -> bool:
        return self.status == ProductStatus.ACTIVE and self.visibility == Visibility.PUBLIC


# ====================
# Request Models
# ====================

class InventoryAdjustmentRequest(BaseModel):
    """Units to reserve, release or consume"""
    quantity: int


# ====================
# Response Models
# ====================

class ProductSummary(BaseModel):
    """Card-sized view of a product"""
    id: str
    name: str
    brand: str
    category: str
    price: Decimal
    sale_price: Optional[Decimal] = None
    image_url: Optional[str] = None
    rating: Optional[Decimal] = None
    review_count: Optional[int] = None
    in_stock: bool = False
    badge: Optional[str] = None
    quantity: int = 0

    @classmethod
    def from_product(cls, product: Product) -> "ProductSummary":
        image = product.primary_image
        badge = product.badge
        return cls(
            id=product.id,
            name=product.name,
            brand=product.brand,
            category=product.category,
            price=product.price,
            sale_price=product.sale_price,
            image_url=image.url if image else None,
            rating=product.rating.average,
            review_count=product.rating.count,
            in_stock=product.is_in_stock,
            badge=badge.value if badge else None,
            quantity=product.inventory.quantity,
        )


class InventoryView(BaseModel):
    """Inventory after an adjustment; ``applied`` is False when the guard rejected it"""
    product_id: str
    quantity: int
    reserved_quantity: int
    available_quantity: int
    stock_status: StockStatus
    low_stock_threshold: int
    in_stock: bool
    allow_backorders: bool
    applied: bool = True
    version: int = 0

    @classmethod
    def build(cls, product_id: str, inventory: Inventory, applied: bool = True) -> "InventoryView":
        return cls(
            product_id=product_id,
            quantity=inventory.quantity,
            reserved_quantity=inventory.reserved_quantity,
            available_quantity=inventory.available_quantity,
            stock_status=inventory.stock_status,
            low_stock_threshold=inventory.low_stock_threshold,
            in_stock=inventory.in_stock,
            allow_backorders=inventory.allow_backorders,
            applied=applied,
            version=inventory.version,
        )


class ProductPage(BaseModel):
    """One page of summaries; pages are zero-based"""
    items: List[ProductSummary] = Field(default_factory=list)
    page: int = 0
    size: int = 20
    total_items: int = 0
    total_pages: int = 0


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "StockStatus",
    "Inventory",
    "ProductStatus",
    "Visibility",
    "ProductBadge",
    "ProductImage",
    "Rating",
    "Product",
    "InventoryAdjustmentRequest",
    "ProductSummary",
    "InventoryView",
    "ProductPage",
    "HealthResponse",
]
