"""
Unit Tests for membership queries

Plan catalog, plan presentation, seeding, history and the billing-run queries.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from microservices.membership_service.models import (
    BillingCycle,
    MembershipPlanResponse,
    PlanType,
    SubscriptionStatus,
)
from microservices.membership_service.seed_data import DEFAULT_PLANS, seed_plans
from tests.component.mocks import NOW, PAY_AS_YOU_GO, MockMembershipRepository


class TestPlanCatalog:

    @pytest.mark.asyncio
    async def test_paid_plans_exclude_trials_in_display_order(self, membership_service):
        plans = await membership_service.list_active_paid_plans()

        assert [p.plan_code for p in plans] == [
            "SHOPSTER_PLUS_MONTHLY",
            "SHOPSTER_PLUS_ANNUAL",
            "SHOPSTER_PLUS_NO_TRIAL",
        ]

    @pytest.mark.asyncio
    async def test_trial_plans(self, membership_service):
        plans = await membership_service.list_active_trial_plans()

        assert [p.plan_code for p in plans] == ["SHOPSTER_PLUS_TRIAL"]

    @pytest.mark.asyncio
    async def test_inactive_plans_are_hidden(self, membership_service, repository):
        repository.plans["SHOPSTER_PLUS_ANNUAL"].active = False

        plans = await membership_service.list_active_paid_plans()

        assert "SHOPSTER_PLUS_ANNUAL" not in [p.plan_code for p in plans]

    @pytest.mark.asyncio
    async def test_get_plan(self, membership_service):
        plan = await membership_service.get_plan("SHOPSTER_PLUS_ANNUAL")

        assert plan.price == Decimal("99.00")
        assert plan.billing_cycle == BillingCycle.ANNUALLY
        assert plan.plan_type == PlanType.PREMIUM


class TestPlanPresentation:

    def test_monthly_plan(self):
        monthly = next(p for p in DEFAULT_PLANS if p.plan_code == "SHOPSTER_PLUS_MONTHLY")

        response = MembershipPlanResponse.from_plan(monthly)

        assert response.formatted_price == "$9.99"
        assert response.billing_cycle_display == "Monthly"
        assert response.trial_description == "7-day free trial"

    def test_plan_without_trial_has_no_trial_description(self):
        assert PAY_AS_YOU_GO.has_trial is False
        assert MembershipPlanResponse.from_plan(PAY_AS_YOU_GO).trial_description is None

    def test_free_trial_price(self):
        trial = next(p for p in DEFAULT_PLANS if p.plan_type == PlanType.TRIAL)

        assert trial.formatted_price == "$0.00"


class TestSeedPlans:

    @pytest.mark.asyncio
    async def test_seeds_empty_catalog_once(self):
        repo = MockMembershipRepository()

        assert await seed_plans(repo) == len(DEFAULT_PLANS)
        assert await seed_plans(repo) == 0
        assert set(repo.plans) == {p.plan_code for p in DEFAULT_PLANS}

    @pytest.mark.asyncio
    async def test_does_not_mutate_defaults(self):
        repo = MockMembershipRepository()
        await seed_plans(repo)

        repo.plans["SHOPSTER_PLUS_MONTHLY"].price = Decimal("1.00")

        monthly = next(p for p in DEFAULT_PLANS if p.plan_code == "SHOPSTER_PLUS_MONTHLY")
        assert monthly.price == Decimal("9.99")


class TestMembershipStatus:

    @pytest.mark.asyncio
    async def test_non_member(self, membership_service):
        status = await membership_service.get_membership_status("user_1")

        assert status.is_member is False
        assert status.subscription is None

    @pytest.mark.asyncio
    async def test_trialing_counts_as_member(self, membership_service, card):
        sub = await membership_service.create_subscription("user_1", "SHOPSTER_PLUS_MONTHLY", **card)

        status = await membership_service.get_membership_status("user_1")

        assert status.is_member is True
        assert status.subscription.subscription_id == sub.subscription_id


class TestHistory:

    @pytest.mark.asyncio
    async def test_history_is_newest_first(self, membership_service, card):
        first = await membership_service.create_subscription("user_1", "SHOPSTER_PLUS_MONTHLY", **card)
        await membership_service.cancel_subscription(first.subscription_id, "switching")
        second = await membership_service.create_subscription("user_1", "SHOPSTER_PLUS_ANNUAL", **card)

        history = await membership_service.get_subscription_history("user_1")

        assert [s.subscription_id for s in history] == [second.subscription_id, first.subscription_id]

    @pytest.mark.asyncio
    async def test_history_omits_suspended(self, membership_service, card):
        sub = await membership_service.create_subscription("user_1", "SHOPSTER_PLUS_MONTHLY", **card)
        await membership_service.suspend_subscription(sub.subscription_id, "review")

        assert await membership_service.get_subscription_history("user_1") == []


class TestBillingRunQueries:

    @pytest.mark.asyncio
    async def test_ready_for_billing(self, membership_service, card):
        sub = await membership_service.create_subscription("user_1", "SHOPSTER_PLUS_NO_TRIAL", **card)

        assert await membership_service.find_subscriptions_ready_for_billing() == []

        due = await membership_service.find_subscriptions_ready_for_billing(sub.next_billing_date)
        assert [s.subscription_id for s in due] == [sub.subscription_id]

    @pytest.mark.asyncio
    async def test_auto_renew_off_is_not_billed(self, membership_service, card):
        sub = await membership_service.create_subscription(
            "user_1", "SHOPSTER_PLUS_NO_TRIAL", auto_renew=False, **card
        )

        due = await membership_service.find_subscriptions_ready_for_billing(
            sub.next_billing_date + timedelta(days=1)
        )
        assert due == []

    @pytest.mark.asyncio
    async def test_expired_trials(self, membership_service, card):
        sub = await membership_service.create_subscription("user_1", "SHOPSTER_PLUS_MONTHLY", **card)

        assert await membership_service.find_expired_trials() == []

        expired = await membership_service.find_expired_trials(NOW + timedelta(days=8))
        assert [s.subscription_id for s in expired] == [sub.subscription_id]
        assert expired[0].status == SubscriptionStatus.TRIALING


class TestStats:

    @pytest.mark.asyncio
    async def test_counts_by_status(self, membership_service, card):
        await membership_service.create_subscription("user_1", "SHOPSTER_PLUS_MONTHLY", **card)
        await membership_service.create_subscription("user_2", "SHOPSTER_PLUS_NO_TRIAL", **card)
        await membership_service.create_subscription("user_3", "SHOPSTER_PLUS_NO_TRIAL", **card)

        stats = await membership_service.get_stats()

        assert stats.active_subscriptions == 2
        assert stats.trial_subscriptions == 1
