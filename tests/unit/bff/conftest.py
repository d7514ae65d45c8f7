"""
BFF unit test fixtures

A ProductServiceClient wired to an httpx.MockTransport and an aggregator that
never sleeps between retries.
"""

import httpx
import pytest

from core.config import ResilienceConfig
from core.resilience import ResilientAggregator
from microservices.bff_service.clients import ProductServiceClient


class ProductServiceStub:
    """Answers like product_service until told to fail"""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.items = [
            {
                "id": "p1",
                "name": "Alpha Phone",
                "brand": "Acme",
                "category": "Electronics",
                "price": "100.00",
                "sale_price": "80.00",
                "image_url": "https://img.example.com/p1.jpg",
                "rating": "4.2",
                "review_count": 12,
                "in_stock": True,
                "badge": "featured",
                "quantity": 20,
            },
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"detail": "boom"})

        if request.url.path.endswith(("featured", "trending", "recommended", "random")):
            data = self.items
        else:
            data = self.items[0]
        return httpx.Response(200, json={"data": data, "message": "Success", "status": 200})


@pytest.fixture
def downstream():
    return ProductServiceStub()


@pytest.fixture
def resilience():
    return ResilienceConfig(
        timeout=1.0,
        max_retries=3,
        backoff_base=0.5,
        minimum_calls=5,
        open_cooldown=30.0,
        cache_ttl=300.0,
    )


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
async def product_client(downstream, resilience, sleeps):
    async def no_sleep(seconds):
        sleeps.append(seconds)

    client = ProductServiceClient(
        base_url="http://product.test",
        transport=httpx.MockTransport(downstream),
        aggregator=ResilientAggregator("product-service", resilience, sleep=no_sleep),
    )
    yield client
    await client.close()
