"""
Shopster+ plan catalog seeded on first start
"""

import logging
from decimal import Decimal
from typing import List

from .models import BillingCycle, MembershipPlan, PlanType
from .protocols import MembershipRepositoryProtocol

logger = logging.getLogger(__name__)

_CORE_FEATURES = [
    "Free shipping on all orders",
    "Early access to sales",
    "Exclusive member-only deals",
    "Priority customer support",
]

DEFAULT_PLANS: List[MembershipPlan] = [
    MembershipPlan(
        plan_code="SHOPSTER_PLUS_TRIAL",
        name="Shopster+ Free Trial",
        description="Try Shopster+ for free for 7 days",
        price=Decimal("0.00"),
        billing_cycle=BillingCycle.WEEKLY,
        trial_days=7,
        plan_type=PlanType.TRIAL,
        display_order=0,
        features=list(_CORE_FEATURES),
    ),
    MembershipPlan(
        plan_code="SHOPSTER_PLUS_MONTHLY",
        name="Shopster+ Monthly",
        description="Monthly Shopster+ membership with 1-week free trial",
        price=Decimal("9.99"),
        billing_cycle=BillingCycle.MONTHLY,
        trial_days=7,
        plan_type=PlanType.STANDARD,
        display_order=1,
        features=_CORE_FEATURES + [
            "Monthly surprise box",
            "Cancel anytime",
        ],
    ),
    MembershipPlan(
        plan_code="SHOPSTER_PLUS_ANNUAL",
        name="Shopster+ Annual",
        description="Annual Shopster+ membership with 1-week free trial - Best Value!",
        price=Decimal("99.00"),
        billing_cycle=BillingCycle.ANNUALLY,
        trial_days=7,
        plan_type=PlanType.PREMIUM,
        display_order=2,
        features=_CORE_FEATURES + [
            "Monthly surprise box",
            "Best value - save over monthly",
            "Annual member-exclusive events",
            "Extended return policy",
        ],
    ),
]


async def seed_plans(repository: MembershipRepositoryProtocol) -> int:
    """Insert the default plans when the catalog is empty; returns plans inserted"""
    if await repository.count_plans() > 0:
        return 0

    for plan in DEFAULT_PLANS:
        await repository.save_plan(plan.model_copy(deep=True))

    logger.info(f"Seeded {len(DEFAULT_PLANS)} Shopster+ membership plans")
    return len(DEFAULT_PLANS)


__all__ = ["DEFAULT_PLANS", "seed_plans"]
