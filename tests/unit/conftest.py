"""
Unit Test Layer Configuration

Structure:
    tests/unit/
    ├── core/        Shared primitives (resilience, JWT, config)
    ├── membership/  Billing dates, payment stub, subscription lifecycle
    ├── product/     Inventory counter and catalog service
    ├── bff/         Product client fallbacks and homepage assembly
    ├── cart/        Cart service and Redis repository
    └── user/        Passwords, token issuer, auth flows

Usage:
    pytest tests/unit -v
    pytest tests/unit/product -v
"""
import pytest

from tests.component.mocks import MockEventBus


def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


@pytest.fixture
def event_bus() -> MockEventBus:
    return MockEventBus()
