"""
Component Test Mocks

Shared mock implementations for unit and component testing.
These mocks replace real I/O dependencies (PostgreSQL, Redis, NATS).
"""

from .nats_mock import MockEventBus
from .membership_mocks import NOW, PAY_AS_YOU_GO, DecliningPaymentProcessor, MockMembershipRepository
from .product_mocks import MockProductRepository, make_product, unlisted
from .cart_mocks import FakeRedis, MockCartRepository
from .user_mocks import MockUserRepository

__all__ = [
    'MockEventBus',
    'MockMembershipRepository',
    'DecliningPaymentProcessor',
    'NOW',
    'PAY_AS_YOU_GO',
    'MockProductRepository',
    'make_product',
    'unlisted',
    'MockCartRepository',
    'FakeRedis',
    'MockUserRepository',
]
