"""
Component Test Fixtures for Membership Service

The FastAPI app under TestClient with MembershipService built over the
in-memory repository. The lifespan does not run.
"""

import pytest
from fastapi.testclient import TestClient

from microservices.membership_service.clients import PaymentStub
from microservices.membership_service.main import app, get_membership_service
from microservices.membership_service.membership_service import MembershipService
from microservices.membership_service.seed_data import DEFAULT_PLANS
from tests.component.mocks import NOW, PAY_AS_YOU_GO, MockMembershipRepository


@pytest.fixture
def mock_repository():
    repo = MockMembershipRepository()
    for plan in DEFAULT_PLANS + [PAY_AS_YOU_GO]:
        repo.plans[plan.plan_code] = plan.model_copy(deep=True)
    return repo


@pytest.fixture
def service(mock_repository, event_bus):
    return MembershipService(
        repository=mock_repository,
        payment_processor=PaymentStub(latency_seconds=0),
        event_bus=event_bus,
        clock=lambda: NOW,
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_membership_service] = lambda: service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def subscribe(client):
    """POST a subscription and return the response"""
    def _subscribe(user_id="user_1", plan_code="SHOPSTER_PLUS_MONTHLY", **overrides):
        body = {
            "userId": user_id,
            "planCode": plan_code,
            "paymentMethodId": "pm_card_4242",
            "paymentMethodType": "credit_card",
        }
        body.update(overrides)
        return client.post("/api/membership/subscriptions", json=body)
    return _subscribe
