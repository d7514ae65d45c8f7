"""
Homepage Service

Composes the storefront homepage: static hero and footer content plus product
carousels fetched through the resilient product client.
"""

import logging
from typing import Awaitable, Callable, Dict, List

from .models import (
    BannerContent,
    CarouselType,
    FooterBanners,
    HeroCard,
    HeroContent,
    ProductCarousel,
    ProductSummary,
)
from .protocols import InvalidCarouselTypeError, ProductClientProtocol

logger = logging.getLogger(__name__)

INVALID_CAROUSEL_MESSAGE = "Invalid carousel type. Must be: featured, trending, recommended, or random"

HERO_CARDS = [
    HeroCard(
        id="hero-1",
        title="Summer Sale",
        subtitle="Up to 50% off selected items",
        background_image="https://via.placeholder.com/1200x400?text=Summer+Sale",
        cta_text="Shop Now",
        cta_link="/categories/sale",
        priority=1,
    ),
    HeroCard(
        id="hero-2",
        title="New Arrivals",
        subtitle="Check out our latest products",
        background_image="https://via.placeholder.com/1200x400?text=New+Arrivals",
        cta_text="Discover",
        cta_link="/categories/new",
        priority=2,
    ),
    HeroCard(
        id="hero-3",
        title="Free Shipping",
        subtitle="On orders over $50",
        background_image="https://via.placeholder.com/1200x400?text=Free+Shipping",
        cta_text="Learn More",
        cta_link="/shipping",
        priority=3,
    ),
]

FOOTER_BANNERS = [
    BannerContent(
        id="footer-1",
        type="promotion",
        title="Free Shipping",
        message="On orders over $50",
        cta_text="Learn More",
        cta_link="/shipping-info",
    ),
    BannerContent(
        id="footer-2",
        type="newsletter",
        title="Stay Updated",
        message="Subscribe to our newsletter for exclusive deals",
        cta_text="Subscribe",
        cta_link="/newsletter",
    ),
    BannerContent(
        id="footer-3",
        type="social",
        title="Follow Us",
        message="Join our community for the latest updates",
        cta_text="Follow",
        cta_link="/social",
    ),
]


def parse_carousel_type(value: str) -> CarouselType:
    """Case-insensitive lookup; unknown names raise InvalidCarouselTypeError"""
    try:
        return CarouselType(value.strip().lower())
    except ValueError:
        raise InvalidCarouselTypeError(INVALID_CAROUSEL_MESSAGE)


class HomepageService:
    """Homepage content aggregation"""

    def __init__(self, product_client: ProductClientProtocol):
        self.product_client = product_client
        self._loaders: Dict[CarouselType, Callable[[int], Awaitable[List[ProductSummary]]]] = {
            CarouselType.FEATURED: product_client.get_featured_products,
            CarouselType.TRENDING: product_client.get_trending_products,
            CarouselType.RECOMMENDED: product_client.get_recommended_products,
            CarouselType.RANDOM: product_client.get_random_products,
        }

    def get_hero_content(self) -> HeroContent:
        return HeroContent(cards=[card.model_copy() for card in HERO_CARDS])

    def get_footer_banners(self) -> FooterBanners:
        return FooterBanners(banners=[banner.model_copy() for banner in FOOTER_BANNERS])

    async def get_product_carousel(self, carousel_type: str, limit: int) -> ProductCarousel:
        """
        Build one carousel.

        Raises:
            InvalidCarouselTypeError: unknown carousel type
        """
        kind = parse_carousel_type(carousel_type)
        logger.info(f"Fetching product carousel: {kind.value} with limit: {limit}")

        products = await self._loaders[kind](limit)
        return ProductCarousel(
            title=kind.display_title,
            products=products,
            view_all_link=kind.view_all_link,
        )

    def stats(self) -> Dict:
        return self.product_client.stats()


__all__ = [
    "HomepageService",
    "parse_carousel_type",
    "HERO_CARDS",
    "FOOTER_BANNERS",
    "INVALID_CAROUSEL_MESSAGE",
]
