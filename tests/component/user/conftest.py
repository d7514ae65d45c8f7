"""
Component Test Fixtures for User Service
"""

import pytest
from fastapi.testclient import TestClient

from core.config import AuthConfig
from microservices.user_service.main import app, get_user_service
from microservices.user_service.token_issuer import AuthTokenIssuer
from microservices.user_service.user_service import UserService
from tests.component.mocks import MockUserRepository


@pytest.fixture
def mock_repository():
    return MockUserRepository()


@pytest.fixture
def client(mock_repository, event_bus):
    auth = AuthConfig(jwt_secret="component-test-secret-0123456789abcdef", bcrypt_rounds=4)
    service = UserService(
        repository=mock_repository,
        token_issuer=AuthTokenIssuer(auth=auth),
        event_bus=event_bus,
        auth=auth,
    )
    app.dependency_overrides[get_user_service] = lambda: service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def registered(client):
    """Register Ada and return the response data"""
    response = client.post("/api/v1/auth/register", json={
        "email": "ada@example.com",
        "password": "Secret123",
        "firstName": "Ada",
        "lastName": "Lovelace",
    })
    assert response.status_code == 200
    return response.json()["data"]
