"""
Component Test Fixtures for BFF Service

HomepageService over a real ProductServiceClient whose HTTP transport is an
in-process fake of product_service.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from core.config import ResilienceConfig
from core.resilience import ResilientAggregator
from microservices.bff_service.clients import ProductServiceClient
from microservices.bff_service.homepage_service import HomepageService
from microservices.bff_service.main import app, get_homepage_service


class FakeProductService:
    def __init__(self):
        self.healthy = True
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if not self.healthy:
            raise httpx.ConnectError("connection refused", request=request)

        limit = int(request.url.params.get("limit", "10"))
        items = [
            {
                "id": f"real-{i}",
                "name": f"Real Product {i}",
                "price": "25.00",
                "image_url": f"https://img.example.com/{i}.jpg",
                "rating": "4.0",
                "review_count": 3,
                "in_stock": True,
            }
            for i in range(1, min(limit, 3) + 1)
        ]
        return httpx.Response(200, json={"data": items, "message": "Success", "status": 200})


@pytest.fixture
def product_service():
    return FakeProductService()


@pytest.fixture
def client(product_service):
    async def no_sleep(seconds):
        return None

    product_client = ProductServiceClient(
        base_url="http://product.test",
        transport=httpx.MockTransport(product_service),
        aggregator=ResilientAggregator(
            "product-service",
            ResilienceConfig(timeout=1.0, max_retries=3, minimum_calls=5, cache_ttl=0),
            sleep=no_sleep,
        ),
    )
    homepage = HomepageService(product_client)
    app.dependency_overrides[get_homepage_service] = lambda: homepage
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
