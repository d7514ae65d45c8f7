"""
Unit Tests for ProductServiceClient

Real responses are mapped onto homepage cards; any downstream failure turns
into placeholder products.
"""

from decimal import Decimal

import pytest

from microservices.bff_service.clients import create_mock_product, create_mock_products


class TestMockProducts:

    def test_mock_product_shape(self):
        product = create_mock_product("Featured Product 1")

        assert product.id == "mock-featured-product-1"
        assert product.price == Decimal("99.99")
        assert product.image == "https://via.placeholder.com/300x300?text=Featured+Product+1"
        assert product.rating == 4.5
        assert product.review_count == 150
        assert product.in_stock is True
        assert product.badge == "featured"

    @pytest.mark.parametrize("limit,expected", [(0, 0), (3, 3), (5, 5), (20, 5)])
    def test_mock_listing_is_capped(self, limit, expected):
        products = create_mock_products("Trending Product", limit)

        assert len(products) == expected
        if products:
            assert products[-1].name == f"Trending Product {expected}"


class TestRealResponses:

    @pytest.mark.asyncio
    async def test_featured_products(self, product_client, downstream):
        products = await product_client.get_featured_products(10)

        assert [p.id for p in products] == ["p1"]
        assert products[0].image == "https://img.example.com/p1.jpg"
        assert products[0].sale_price == Decimal("80.00")
        assert products[0].rating == 4.2
        request = downstream.requests[0]
        assert request.url.path == "/api/v1/products/featured"
        assert request.url.params["limit"] == "10"

    @pytest.mark.asyncio
    async def test_product_by_id(self, product_client, downstream):
        product = await product_client.get_product_by_id("p1")

        assert product.name == "Alpha Phone"
        assert downstream.requests[0].url.path == "/api/v1/products/p1"

    @pytest.mark.asyncio
    async def test_repeat_calls_are_cached(self, product_client, downstream):
        await product_client.get_trending_products(4)
        await product_client.get_trending_products(4)
        await product_client.get_trending_products(8)

        assert len(downstream.requests) == 2
        assert product_client.stats()["cache_hits"] == 1


class TestFallbacks:

    @pytest.mark.asyncio
    async def test_server_error_serves_placeholders(self, product_client, downstream, sleeps):
        downstream.status_code = 503

        products = await product_client.get_recommended_products(10)

        assert [p.name for p in products][:2] == ["Recommended Product 1", "Recommended Product 2"]
        assert len(products) == 5
        assert len(downstream.requests) == 3
        assert sleeps == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_missing_product_falls_back(self, product_client, downstream):
        downstream.status_code = 404

        product = await product_client.get_product_by_id("p404")

        assert product.id == "mock-product-p404"

    @pytest.mark.asyncio
    async def test_open_circuit_skips_network(self, product_client, downstream):
        downstream.status_code = 500
        # the fifth consecutive failure opens the circuit
        await product_client.get_random_products(3)
        await product_client.get_random_products(3)
        assert product_client.stats()["state"] == "open"

        sent = len(downstream.requests)
        downstream.status_code = 200
        products = await product_client.get_random_products(3)

        assert len(downstream.requests) == sent
        assert [p.name for p in products] == ["Random Product 1", "Random Product 2", "Random Product 3"]

    @pytest.mark.asyncio
    async def test_fallbacks_are_not_cached(self, product_client, downstream):
        downstream.status_code = 502
        await product_client.get_featured_products(2)

        downstream.status_code = 200
        products = await product_client.get_featured_products(2)

        assert [p.id for p in products] == ["p1"]
