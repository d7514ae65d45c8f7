"""
Component Test Fixtures for Product Service
"""

import pytest
from fastapi.testclient import TestClient

from microservices.product_service.main import app, get_product_service
from microservices.product_service.product_service import ProductService
from tests.component.mocks import MockProductRepository, make_product, unlisted


@pytest.fixture
def mock_repository():
    return MockProductRepository([
        make_product("p1", quantity=20, name="Alpha Phone", featured=True, tags=["smartphone"]),
        make_product("p2", quantity=3, name="Bravo Cable", trending=True),
        unlisted(make_product("p3", name="Charlie Draft", featured=True)),
    ])


@pytest.fixture
def client(mock_repository, event_bus):
    service = ProductService(repository=mock_repository, event_bus=event_bus)
    app.dependency_overrides[get_product_service] = lambda: service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
