"""
Membership Service Data Models

Pydantic models for Shopster Plus plans, subscriptions and payments.
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ====================
# Enum Types
# ====================

class BillingCycle(str, Enum):
    """How often a plan bills"""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ANNUALLY = "annually"

    @property
    def display_name(self) -> str:
        return _BILLING_CYCLE_DISPLAY[self]


_BILLING_CYCLE_DISPLAY = {
    BillingCycle.WEEKLY: "Weekly",
    BillingCycle.MONTHLY: "Monthly",
    BillingCycle.ANNUALLY: "Annually",
}


class PlanType(str, Enum):
    """Plan tiers"""
    TRIAL = "trial"
    STANDARD = "standard"
    PREMIUM = "premium"


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle states"""
    PENDING = "pending"
    TRIALING = "trialing"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


# A user holds at most one subscription in these states
LIVE_STATUSES = (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING)

# Statuses shown in a user's subscription history
HISTORY_STATUSES = (
    SubscriptionStatus.ACTIVE,
    SubscriptionStatus.TRIALING,
    SubscriptionStatus.CANCELLED,
)


class PaymentMethodType(str, Enum):
    """Accepted payment methods"""
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    APPLE_PAY = "apple_pay"
    GOOGLE_PAY = "google_pay"


# ====================
# Core Data Models
# ====================

class MembershipPlan(BaseModel):
    """Membership plan (read-only after seeding)"""
    id: Optional[int] = None
    plan_code: str = Field(..., min_length=1, max_length=50)
    name: str
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    billing_cycle: BillingCycle
    trial_days: int = Field(default=0, ge=0)
    plan_type: PlanType
    active: bool = True
    display_order: int = 0
    features: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_trial(self) -> bool:
        return self.trial_days > 0

    @property
    def formatted_price(self) -> str:
        return f"${self.price:.2f}"

    @property
    def trial_description(self) -> Optional[str]:
        if not self.has_trial:
            return None
        return f"{self.trial_days}-day free trial"


class MembershipSubscription(BaseModel):
    """A user's subscription to one plan"""
    id: Optional[int] = None
    subscription_id: str = Field(..., description="Unique subscription ID")
    user_id: str = Field(..., description="User ID")
    plan_code: str

    status: SubscriptionStatus = SubscriptionStatus.PENDING

    # Trial window
    trial_start_date: Optional[datetime] = None
    trial_end_date: Optional[datetime] = None

    # Paid period
    subscription_start_date: Optional[datetime] = None
    subscription_end_date: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    last_billing_date: Optional[datetime] = None

    amount: Decimal = Field(default=Decimal("0.00"), ge=0)
    payment_method_id: Optional[str] = None
    payment_method_type: Optional[PaymentMethodType] = None
    auto_renew: bool = True

    cancellation_date: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    # Optimistic concurrency token, bumped on every write
    version: int = 0

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES


class PaymentResult(BaseModel):
    """Outcome of a payment attempt"""
    success: bool
    transaction_id: Optional[str] = None
    message: str = ""
    amount: Decimal = Decimal("0.00")
    metadata: Dict[str, Any] = Field(default_factory=dict)


# ====================
# Request Models
# ====================

class CreateSubscriptionRequest(BaseModel):
    """Subscribe a user to a plan (accepts snake_case or camelCase keys)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    plan_code: str = Field(..., min_length=1, max_length=50)
    payment_method_id: str = Field(..., description="Payment method token")
    payment_method_type: PaymentMethodType
    auto_renew: bool = True

    @field_validator("user_id", "plan_code")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class SuspendSubscriptionRequest(BaseModel):
    """Suspend a live subscription"""
    reason: str = Field(..., min_length=1, max_length=500)


# ====================
# Response Models
# ====================

class MembershipPlanResponse(BaseModel):
    """Plan as shown to clients"""
    plan_code: str
    name: str
    description: Optional[str] = None
    price: Decimal
    formatted_price: str
    billing_cycle: BillingCycle
    billing_cycle_display: str
    trial_days: int
    trial_description: Optional[str] = None
    plan_type: PlanType
    display_order: int
    features: List[str] = Field(default_factory=list)

    @classmethod
    def from_plan(cls, plan: MembershipPlan) -> "MembershipPlanResponse":
        return cls(
            plan_code=plan.plan_code,
            name=plan.name,
            description=plan.description,
            price=plan.price,
            formatted_price=plan.formatted_price,
            billing_cycle=plan.billing_cycle,
            billing_cycle_display=plan.billing_cycle.display_name,
            trial_days=plan.trial_days,
            trial_description=plan.trial_description,
            plan_type=plan.plan_type,
            display_order=plan.display_order,
            features=list(plan.features),
        )


class MembershipStatusResponse(BaseModel):
    """Whether a user is a Shopster Plus member"""
    user_id: str
    is_member: bool
    subscription: Optional[MembershipSubscription] = None


class MembershipStats(BaseModel):
    """Subscription counts"""
    active_subscriptions: int = 0
    trial_subscriptions: int = 0


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


__all__ = [
    "BillingCycle",
    "PlanType",
    "SubscriptionStatus",
    "PaymentMethodType",
    "LIVE_STATUSES",
    "HISTORY_STATUSES",
    "MembershipPlan",
    "MembershipSubscription",
    "PaymentResult",
    "CreateSubscriptionRequest",
    "SuspendSubscriptionRequest",
    "MembershipPlanResponse",
    "MembershipStatusResponse",
    "MembershipStats",
    "HealthResponse",
]
