"""
Component Test Layer Configuration

Each service app runs under TestClient with its service dependency
overridden, so the lifespan (database, Redis, NATS) never starts.

Usage:
    pytest tests/component -v
    pytest tests/component/membership -v
"""
import pytest

from tests.component.mocks import MockEventBus


def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


@pytest.fixture
def event_bus() -> MockEventBus:
    return MockEventBus()
