"""
Component Test Fixtures for Cart Service
"""

import pytest
from fastapi.testclient import TestClient

from microservices.cart_service.cart_service import CartService
from microservices.cart_service.main import app, get_cart_service
from tests.component.mocks import MockCartRepository


@pytest.fixture
def mock_repository():
    return MockCartRepository()


@pytest.fixture
def client(mock_repository, event_bus):
    service = CartService(repository=mock_repository, event_bus=event_bus)
    app.dependency_overrides[get_cart_service] = lambda: service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def item():
    return {
        "product_id": "p1",
        "product_name": "Alpha Phone",
        "quantity": 2,
        "price": "19.99",
        "image_url": "https://img.example.com/p1.jpg",
        "brand": "Acme",
    }
