"""
Unit Tests for HomepageService
"""

from decimal import Decimal
from typing import List

import pytest

from microservices.bff_service.clients import create_mock_products
from microservices.bff_service.homepage_service import (
    FOOTER_BANNERS,
    HomepageService,
    INVALID_CAROUSEL_MESSAGE,
    parse_carousel_type,
)
from microservices.bff_service.models import CarouselType, ProductSummary
from microservices.bff_service.protocols import InvalidCarouselTypeError


class RecordingProductClient:
    """Returns placeholder cards and remembers which listing was asked for"""

    def __init__(self):
        self.calls = []

    async def _listing(self, kind: str, limit: int) -> List[ProductSummary]:
        self.calls.append((kind, limit))
        return create_mock_products(kind.capitalize(), limit)

    async def get_featured_products(self, limit):
        return await self._listing("featured", limit)

    async def get_trending_products(self, limit):
        return await self._listing("trending", limit)

    async def get_recommended_products(self, limit):
        return await self._listing("recommended", limit)

    async def get_random_products(self, limit):
        return await self._listing("random", limit)

    async def get_product_by_id(self, product_id):
        return ProductSummary(id=product_id, name=product_id, price=Decimal("1.00"))

    def stats(self):
        return {"name": "product-service", "state": "closed"}

    async def close(self):
        pass


@pytest.fixture
def product_client():
    return RecordingProductClient()


@pytest.fixture
def homepage(product_client):
    return HomepageService(product_client)


class TestCarouselType:

    @pytest.mark.parametrize("value,expected", [
        ("featured", CarouselType.FEATURED),
        ("TRENDING", CarouselType.TRENDING),
        (" Recommended ", CarouselType.RECOMMENDED),
        ("random", CarouselType.RANDOM),
    ])
    def test_parse(self, value, expected):
        assert parse_carousel_type(value) == expected

    def test_unknown(self):
        with pytest.raises(InvalidCarouselTypeError) as exc_info:
            parse_carousel_type("bestsellers")

        assert exc_info.value.message == INVALID_CAROUSEL_MESSAGE

    def test_titles_and_links(self):
        assert CarouselType.FEATURED.display_title == "Featured Products"
        assert CarouselType.TRENDING.view_all_link == "/products?category=trending"
        assert CarouselType.RANDOM.view_all_link == "/products"


class TestCarousel:

    @pytest.mark.asyncio
    async def test_builds_carousel(self, homepage, product_client):
        carousel = await homepage.get_product_carousel("Trending", 3)

        assert carousel.title == "Trending Products"
        assert carousel.view_all_link == "/products?category=trending"
        assert len(carousel.products) == 3
        assert product_client.calls == [("trending", 3)]

    @pytest.mark.asyncio
    async def test_invalid_type_does_not_call_downstream(self, homepage, product_client):
        with pytest.raises(InvalidCarouselTypeError):
            await homepage.get_product_carousel("nope", 3)

        assert product_client.calls == []

    @pytest.mark.asyncio
    async def test_wire_format_is_camel_case(self, homepage):
        carousel = await homepage.get_product_carousel("featured", 1)

        body = carousel.model_dump(by_alias=True)
        assert "viewAllLink" in body
        assert "reviewCount" in body["products"][0]
        assert "inStock" in body["products"][0]


class TestStaticContent:

    def test_hero_cards_in_priority_order(self, homepage):
        hero = homepage.get_hero_content()

        assert [c.priority for c in hero.cards] == [1, 2, 3]
        assert hero.cards[0].title == "Summer Sale"
        assert "backgroundImage" in hero.model_dump(by_alias=True)["cards"][0]

    def test_footer_is_a_copy(self, homepage):
        footer = homepage.get_footer_banners()
        footer.banners[0].title = "changed"

        assert FOOTER_BANNERS[0].title == "Free Shipping"
        assert [b.type for b in homepage.get_footer_banners().banners] == ["promotion", "newsletter", "social"]

    def test_stats_come_from_client(self, homepage):
        assert homepage.stats()["state"] == "closed"
