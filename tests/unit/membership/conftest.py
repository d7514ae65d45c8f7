"""
Membership unit test fixtures

A MembershipService over the in-memory repository, a zero-latency payment
stub and a fixed clock.
"""

import pytest

from microservices.membership_service.clients import PaymentStub
from microservices.membership_service.membership_service import MembershipService
from microservices.membership_service.models import PaymentMethodType
from microservices.membership_service.seed_data import DEFAULT_PLANS
from tests.component.mocks import NOW, PAY_AS_YOU_GO, MockMembershipRepository


@pytest.fixture
def repository():
    repo = MockMembershipRepository()
    for plan in DEFAULT_PLANS + [PAY_AS_YOU_GO]:
        repo.plans[plan.plan_code] = plan.model_copy(deep=True)
    return repo


@pytest.fixture
def payment_stub():
    return PaymentStub(latency_seconds=0)


@pytest.fixture
def membership_service(repository, payment_stub, event_bus):
    return MembershipService(
        repository=repository,
        payment_processor=payment_stub,
        event_bus=event_bus,
        clock=lambda: NOW,
    )


@pytest.fixture
def card():
    return {"payment_method_id": "pm_card_4242", "payment_method_type": PaymentMethodType.CREDIT_CARD}
