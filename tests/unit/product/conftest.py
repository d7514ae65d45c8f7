"""
Product unit test fixtures
"""

import pytest

from microservices.product_service.product_service import ProductService
from tests.component.mocks import MockProductRepository, make_product, unlisted


@pytest.fixture
def product_repository():
    return MockProductRepository([
        make_product("p1", quantity=20, name="Alpha Phone", featured=True, tags=["smartphone"]),
        make_product("p2", quantity=8, name="Bravo Laptop", trending=True),
        make_product("p3", quantity=0, name="Charlie Jacket", category="Clothing", recommended=True),
        unlisted(make_product("p4", name="Delta Draft", featured=True)),
    ])


@pytest.fixture
def product_service(product_repository, event_bus):
    return ProductService(repository=product_repository, event_bus=event_bus)
