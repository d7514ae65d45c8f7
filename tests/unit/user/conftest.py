"""
User unit test fixtures

bcrypt at its minimum work factor and a clock the tests can move.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.config import AuthConfig
from microservices.user_service.token_issuer import AuthTokenIssuer
from microservices.user_service.user_service import UserService
from tests.component.mocks import MockUserRepository


class MovableClock:
    def __init__(self):
        self.now = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def auth_config():
    return AuthConfig(jwt_secret="user-unit-test-secret-0123456789abcdef", bcrypt_rounds=4)


@pytest.fixture
def token_issuer(auth_config):
    return AuthTokenIssuer(auth=auth_config)


@pytest.fixture
def clock():
    return MovableClock()


@pytest.fixture
def user_repository():
    return MockUserRepository()


@pytest.fixture
def user_service(user_repository, token_issuer, event_bus, auth_config, clock):
    return UserService(
        repository=user_repository,
        token_issuer=token_issuer,
        event_bus=event_bus,
        auth=auth_config,
        clock=clock,
    )
