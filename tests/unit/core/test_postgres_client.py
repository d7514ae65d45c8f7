"""
Unit Tests for the PostgreSQL client wrapper

Pool creation is faked; nothing here opens a real connection.
"""

import asyncio

import pytest

from core import postgres_client
from core.config import InfraConfig, ShopsterConfig
from core.config_manager import ConfigManager
from core.postgres_client import PostgresClientWrapper
from microservices.membership_service.membership_repository import MembershipRepository
from microservices.product_service.product_repository import ProductRepository
from microservices.user_service.user_repository import UserRepository


class FakePool:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def no_postgres_env(monkeypatch):
    for key in ("POSTGRES_HOST", "POSTGRES_PORT", "POSTGRES_SERVICE_HOST", "POSTGRES_SERVICE_PORT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def created_pools(monkeypatch):
    pools = []

    async def fake_create_pool(**kwargs):
        await asyncio.sleep(0.01)
        pool = FakePool()
        pools.append(pool)
        return pool

    monkeypatch.setattr(postgres_client.asyncpg, "create_pool", fake_create_pool)
    return pools


@pytest.fixture
def config():
    settings = ShopsterConfig(
        infrastructure=InfraConfig(postgres_host="db.internal", postgres_port=6543, postgres_db="shopster_test")
    )
    return ConfigManager("membership_service", settings=settings)


class TestConnect:
    """Lazy pool creation"""

    @pytest.mark.asyncio
    async def test_concurrent_first_use_opens_one_pool(self, created_pools, config):
        db = PostgresClientWrapper("membership_service", config=config)

        pools = await asyncio.gather(*(db.connect() for _ in range(5)))

        assert len(created_pools) == 1
        assert all(pool is created_pools[0] for pool in pools)

    @pytest.mark.asyncio
    async def test_close_then_connect_opens_fresh_pool(self, created_pools, config):
        db = PostgresClientWrapper("membership_service", config=config)
        first = await db.connect()

        await db.close()
        second = await db.connect()

        assert first.closed is True
        assert second is not first
        assert len(created_pools) == 2


class TestDiscovery:
    """Connection settings come from the supplied ConfigManager"""

    def test_uses_config_infrastructure(self, config):
        db = PostgresClientWrapper("membership_service", config=config)

        assert (db.host, db.port, db.database) == ("db.internal", 6543, "shopster_test")

    def test_environment_overrides_host(self, monkeypatch, config):
        monkeypatch.setenv("POSTGRES_HOST", "pg.override")

        db = PostgresClientWrapper("membership_service", config=config)

        assert db.host == "pg.override"

    @pytest.mark.parametrize("repository_cls", [MembershipRepository, ProductRepository, UserRepository])
    def test_repositories_pass_config_through(self, repository_cls, config):
        repository = repository_cls(config=config)

        assert repository.db.host == "db.internal"
        assert repository.db.database == "shopster_test"
