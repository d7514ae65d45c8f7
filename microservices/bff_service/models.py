"""
BFF Service Data Models

Homepage payloads as the storefront consumes them (camelCase on the wire).
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FrontendModel(BaseModel):
    """Serializes camelCase, accepts either spelling"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ====================
# Enum Types
# ====================

class CarouselType(str, Enum):
    FEATURED = "featured"
    TRENDING = "trending"
    RECOMMENDED = "recommended"
    RANDOM = "random"

    @property
    def display_title(self) -> str:
        return f"{self.value.capitalize()} Products"

    @property
    def view_all_link(self) -> str:
        if self == CarouselType.RANDOM:
            return "/products"
        return f"/products?category={self.value}"


# ====================
# Product Models
# ====================

class ProductSummary(FrontendModel):
    """Product card"""
    id: str
    name: str
    price: Decimal
    sale_price: Optional[Decimal] = None
    image: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    in_stock: bool = False
    badge: Optional[str] = None

    @classmethod
    def from_product_service(cls, item: Dict[str, Any]) -> "ProductSummary":
        """Map product_service's summary (snake_case, image_url) onto the card"""
        rating = item.get("rating")
        return cls(
            id=item["id"],
            name=item["name"],
            price=Decimal(str(item["price"])),
            sale_price=Decimal(str(item["sale_price"])) if item.get("sale_price") is not None else None,
            image=item.get("image_url") or item.get("image"),
            rating=float(rating) if rating is not None else None,
            review_count=item.get("review_count"),
            in_stock=bool(item.get("in_stock")),
            badge=item.get("badge"),
        )


class ProductCarousel(FrontendModel):
    title: str
    products: List[ProductSummary] = Field(default_factory=list)
    view_all_link: str


# ====================
# Static Content Models
# ====================

class HeroCard(FrontendModel):
    id: str
    title: str
    subtitle: str
    background_image: str
    cta_text: str
    cta_link: str
    priority: int


class HeroContent(FrontendModel):
    cards: List[HeroCard] = Field(default_factory=list)


class BannerContent(FrontendModel):
    id: str
    type: str
    title: str
    message: str
    cta_text: str
    cta_link: str


class FooterBanners(FrontendModel):
    banners: List[BannerContent] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "FrontendModel",
    "CarouselType",
    "ProductSummary",
    "ProductCarousel",
    "HeroCard",
    "HeroContent",
    "BannerContent",
    "FooterBanners",
    "HealthResponse",
]
