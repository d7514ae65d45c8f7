"""
Unit Tests for ProductService

Homepage listings, catalog browsing and serialized inventory adjustments.
"""

import asyncio
from decimal import Decimal

import pytest

from microservices.product_service.inventory import StockStatus
from microservices.product_service.models import ProductSummary
from microservices.product_service.protocols import ProductNotFoundError
from microservices.product_service.seed_data import DEFAULT_PRODUCTS, seed_products
from tests.component.mocks import MockProductRepository, make_product


class TestHomepageListings:

    @pytest.mark.asyncio
    async def test_featured_skips_unlisted(self, product_service):
        featured = await product_service.get_featured_products(10)

        assert [p.id for p in featured] == ["p1"]
        assert featured[0].badge == "featured"

    @pytest.mark.asyncio
    async def test_trending_and_recommended(self, product_service):
        assert [p.id for p in await product_service.get_trending_products(10)] == ["p2"]
        assert [p.id for p in await product_service.get_recommended_products(10)] == ["p3"]

    @pytest.mark.asyncio
    async def test_random_respects_limit(self, product_service):
        products = await product_service.get_random_products(2)

        assert len(products) == 2
        assert "p4" not in [p.id for p in products]


class TestProductSummary:

    def test_summary_fields(self):
        product = make_product("p9", sale_price=Decimal("80.00"))

        summary = ProductSummary.from_product(product)

        assert summary.image_url == "https://img.example.com/p9.jpg"
        assert summary.rating == Decimal("4.2")
        assert summary.review_count == 12
        assert summary.in_stock is True
        assert summary.badge == "sale"
        assert summary.quantity == 20

    def test_out_of_stock_summary(self):
        assert ProductSummary.from_product(make_product("p9", quantity=0)).in_stock is False


class TestBrowsing:

    @pytest.mark.asyncio
    async def test_get_product(self, product_service):
        product = await product_service.get_product("p2")

        assert product.name == "Bravo Laptop"

    @pytest.mark.asyncio
    async def test_get_missing_product(self, product_service):
        with pytest.raises(ProductNotFoundError, match="Product not found: nope"):
            await product_service.get_product("nope")

    @pytest.mark.asyncio
    async def test_list_pages(self, product_service):
        page = await product_service.list_products(page=1, size=3)

        assert page.total_items == 4
        assert page.total_pages == 2
        assert [p.id for p in page.items] == ["p4"]

    @pytest.mark.asyncio
    async def test_search_matches_tags(self, product_service):
        page = await product_service.search_products("  smartphone ")

        assert [p.id for p in page.items] == ["p1"]
        assert page.total_pages == 1

    @pytest.mark.asyncio
    async def test_category_is_case_insensitive(self, product_service):
        page = await product_service.get_products_by_category("clothing")

        assert [p.id for p in page.items] == ["p3"]

    @pytest.mark.asyncio
    async def test_empty_search(self, product_service):
        page = await product_service.search_products("zzz")

        assert page.items == []
        assert page.total_pages == 0


class TestInventoryAdjustments:

    @pytest.mark.asyncio
    async def test_reserve(self, product_service, product_repository, event_bus):
        view = await product_service.reserve_stock("p1", 5)

        assert view.applied is True
        assert view.reserved_quantity == 5
        assert view.available_quantity == 15
        assert view.version == 1
        assert product_repository.products["p1"].inventory.reserved_quantity == 5
        event_bus.assert_event_published(
            "product.inventory.reserved", {"product_id": "p1", "amount": 5, "available_quantity": 15}
        )
        event_bus.assert_no_events_published("product.stock_status.changed")

    @pytest.mark.asyncio
    async def test_guard_failure_is_not_an_error(self, product_service, product_repository, event_bus):
        view = await product_service.reserve_stock("p1", 21)

        assert view.applied is False
        assert view.reserved_quantity == 0
        assert product_repository.inventory_writes == 0
        event_bus.assert_no_events_published()

    @pytest.mark.asyncio
    async def test_release_and_consume(self, product_service):
        await product_service.reserve_stock("p1", 6)
        released = await product_service.release_stock("p1", 2)
        consumed = await product_service.consume_stock("p1", 4)

        assert released.reserved_quantity == 4
        assert consumed.quantity == 16
        assert consumed.reserved_quantity == 0

    @pytest.mark.asyncio
    async def test_stock_status_change_is_published(self, product_service, event_bus):
        await product_service.reserve_stock("p2", 4)

        event_bus.assert_event_published(
            "product.stock_status.changed",
            {"product_id": "p2", "previous_status": "in_stock", "stock_status": "low_stock"},
        )

    @pytest.mark.asyncio
    async def test_missing_product(self, product_service):
        with pytest.raises(ProductNotFoundError):
            await product_service.reserve_stock("nope", 1)

    @pytest.mark.asyncio
    async def test_concurrent_reservations_never_oversell(self, product_service, product_repository):
        views = await asyncio.gather(*[product_service.reserve_stock("p1", 1) for _ in range(25)])

        assert sum(1 for v in views if v.applied) == 20
        inventory = product_repository.products["p1"].inventory
        assert inventory.reserved_quantity == 20
        assert inventory.stock_status == StockStatus.OUT_OF_STOCK
        assert product_repository.inventory_writes == 20

    @pytest.mark.asyncio
    async def test_event_bus_failure_is_tolerated(self, product_service, event_bus):
        event_bus.set_error(ConnectionError("nats down"))

        view = await product_service.reserve_stock("p1", 1)

        assert view.applied is True


class TestSeedProducts:

    @pytest.mark.asyncio
    async def test_seeds_once(self):
        repo = MockProductRepository()

        assert await seed_products(repo) == len(DEFAULT_PRODUCTS)
        assert await seed_products(repo) == 0

    def test_demo_catalog_has_homepage_flags(self):
        assert any(p.featured for p in DEFAULT_PRODUCTS)
        assert any(p.trending for p in DEFAULT_PRODUCTS)
        assert any(p.recommended for p in DEFAULT_PRODUCTS)
