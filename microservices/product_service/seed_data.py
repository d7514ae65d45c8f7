"""
Demo catalog seeded on first start
"""

import logging
from decimal import Decimal
from typing import List, Optional

from .models import Inventory, Product, ProductImage, Rating
from .protocols import ProductRepositoryProtocol

logger = logging.getLogger(__name__)


def _product(
    sku: str,
    name: str,
    brand: str,
    category: str,
    price: str,
    sale_price: Optional[str],
    description: str,
    tags: List[str],
    quantity: int,
    image_url: str,
    rating: Optional[str] = None,
    reviews: int = 0,
    **flags,
) -> Product:
    return Product(
        id=sku.lower(),
        name=name,
        brand=brand,
        category=category,
        sku=sku,
        price=Decimal(price),
        sale_price=Decimal(sale_price) if sale_price else None,
        description=description,
        tags=tags,
        images=[ProductImage(url=image_url, alt=f"{name} product image", is_primary=True)],
        inventory=Inventory(
            quantity=quantity,
            in_stock=quantity > 0,
            low_stock_threshold=10,
        ),
        rating=Rating(average=Decimal(rating), count=reviews) if rating else Rating(),
        **flags,
    )


_UNSPLASH = "https://images.unsplash.com/photo-{}?w=400&h=400&fit=crop"

DEFAULT_PRODUCTS: List[Product] = [
    _product(
        "IPHONE15PRO128", "iPhone 15 Pro", "Apple", "Electronics", "999.99", "949.99",
        "Latest iPhone with advanced camera system and A17 Pro chip",
        ["smartphone", "apple", "mobile", "5g"], 50,
        _UNSPLASH.format("1592750475338-74b7b21085ab"), "4.7", 182, featured=True,
    ),
    _product(
        "GALAXY-S24-256", "Samsung Galaxy S24", "Samsung", "Electronics", "799.99", None,
        "Powerful Android smartphone with AI features and excellent camera",
        ["smartphone", "samsung", "android", "ai"], 75,
        _UNSPLASH.format("1565849904461-04a58ad377e0"), "4.4", 96, trending=True,
    ),
    _product(
        "MBP14-M3PRO-512", "MacBook Pro 14\"", "Apple", "Electronics", "1999.99", None,
        "Professional laptop with M3 Pro chip for demanding workflows",
        ["laptop", "apple", "macbook", "professional"], 25,
        _UNSPLASH.format("1541807084-5c52b6b3adef"), "4.8", 143, featured=True, recommended=True,
    ),
    _product(
        "WH1000XM5-BK", "Sony WH-1000XM5", "Sony", "Electronics", "399.99", "349.99",
        "Industry-leading noise canceling wireless headphones",
        ["headphones", "sony", "wireless", "noise-canceling"], 60,
        _UNSPLASH.format("1583394838336-acd977736f90"), recommended=True,
    ),
    _product(
        "PS5-CONSOLE", "PlayStation 5", "Sony", "Electronics", "499.99", None,
        "Next-gen gaming console with lightning-fast SSD",
        ["gaming", "console", "sony", "playstation"], 8,
        _UNSPLASH.format("1607853202273-797f1c22a38e"), "4.9", 210, trending=True,
    ),
    _product(
        "AF1-WHT-SIZE10", "Nike Air Force 1", "Nike", "Clothing", "110.00", "89.99",
        "Classic white leather sneakers, timeless design",
        ["shoes", "sneakers", "nike", "casual"], 120,
        _UNSPLASH.format("1549298916-b41d501d3772"), "4.5", 77, trending=True,
    ),
    _product(
        "LEVI501-34X32", "Levi's 501 Original Jeans", "Levi's", "Clothing", "69.50", None,
        "The original blue jean since 1873, straight fit",
        ["jeans", "denim", "levis", "classic"], 95,
        _UNSPLASH.format("1542272604-787c3835535d"), recommended=True,
    ),
    _product(
        "PATAG-DOWN-M-BLU", "Patagonia Down Jacket", "Patagonia", "Clothing", "279.00", None,
        "Lightweight down insulation for cold weather adventures",
        ["jacket", "down", "patagonia", "outdoor"], 0,
        _UNSPLASH.format("1544966503-7cc5ac882d5d"), "4.6", 38,
    ),
]


async def seed_products(repository: ProductRepositoryProtocol) -> int:
    """Insert the demo catalog when empty; returns products inserted"""
    if await repository.count_products() > 0:
        return 0

    for product in DEFAULT_PRODUCTS:
        await repository.save_product(product.model_copy(deep=True))

    logger.info(f"Seeded {len(DEFAULT_PRODUCTS)} products")
    return len(DEFAULT_PRODUCTS)


__all__ = ["DEFAULT_PRODUCTS", "seed_products"]
