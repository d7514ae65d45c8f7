"""
Membership Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol

from core.exceptions import (
    ConcurrentModificationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

from .models import (
    MembershipPlan,
    MembershipSubscription,
    PaymentMethodType,
    PaymentResult,
    SubscriptionStatus,
)


# ====================
# Repository Protocol
# ====================


class MembershipRepositoryProtocol(Protocol):
    """Protocol for membership data repository"""

    async def initialize(self) -> None:
        """Initialize repository connection"""
        ...

    async def close(self) -> None:
        """Close repository connection"""
        ...

    # Plans
    async def get_plan(self, plan_code: str) -> Optional[MembershipPlan]:
        """Get plan by code"""
        ...

    async def list_plans(self, active_only: bool = True) -> List[MembershipPlan]:
        """List plans ordered by display order"""
        ...

    async def save_plan(self, plan: MembershipPlan) -> MembershipPlan:
        """Insert plan (seeding)"""
        ...

    async def count_plans(self) -> int:
        ...

    # Subscriptions
    async def create_subscription(self, subscription: MembershipSubscription) -> MembershipSubscription:
        """Persist a new subscription; DuplicateSubscriptionError if the user already has a live one"""
        ...

    async def get_subscription(self, subscription_id: str) -> Optional[MembershipSubscription]:
        ...

    async def update_subscription(self, subscription: MembershipSubscription) -> MembershipSubscription:
        """
        Write back a subscription read earlier.

        Matches on ``subscription.version``; raises ConcurrentModificationError
        if another writer got there first. Returns the stored row with the
        bumped version.
        """
        ...

    async def find_by_user_and_statuses(
        self,
        user_id: str,
        statuses: List[SubscriptionStatus],
    ) -> List[MembershipSubscription]:
        """User's subscriptions in any of the statuses, newest first"""
        ...

    async def find_ready_for_billing(self, as_of: datetime) -> List[MembershipSubscription]:
        """ACTIVE, auto-renewing, next billing date on or before as_of"""
        ...

    async def find_expired_trials(self, as_of: datetime) -> List[MembershipSubscription]:
        """TRIALING with trial end on or before as_of"""
        ...

    async def count_by_status(self, status: SubscriptionStatus) -> int:
        ...


# ====================
# Collaborator Protocols
# ====================


class PaymentProcessorProtocol(Protocol):
    """Payment gateway used for charges and recurring-billing control"""

    async def process_payment(
        self,
        amount: Decimal,
        payment_method_id: str,
        payment_method_type: PaymentMethodType,
    ) -> PaymentResult:
        ...

    async def validate_payment_method(
        self,
        payment_method_id: str,
        payment_method_type: PaymentMethodType,
    ) -> bool:
        ...

    async def cancel_recurring_payment(self, subscription_id: str) -> bool:
        ...


class EventBusProtocol(Protocol):
    """Protocol for event bus"""

    async def publish(self, subject: str, data: Dict[str, Any]) -> None:
        """Publish event"""
        ...

    async def close(self) -> None:
        """Close event bus connection"""
        ...


# ====================
# Exceptions
# ====================


class PlanNotFoundError(NotFoundError):
    """Plan does not exist"""
    error_code = "PLAN_NOT_FOUND"


class SubscriptionNotFoundError(NotFoundError):
    """Subscription does not exist"""
    error_code = "SUBSCRIPTION_NOT_FOUND"


class DuplicateSubscriptionError(ConflictError):
    """User already holds an ACTIVE or TRIALING subscription"""
    error_code = "DUPLICATE_SUBSCRIPTION"


class PaymentMethodInvalidError(ValidationError):
    """Payment method failed validation"""
    error_code = "PAYMENT_METHOD_INVALID"


class PaymentFailedError(ValidationError):
    """Payment processor declined or errored"""
    error_code = "PAYMENT_FAILED"


class InvalidStatusTransitionError(ConflictError):
    """Requested transition is not allowed from the current status"""
    error_code = "INVALID_STATUS_TRANSITION"


__all__ = [
    "MembershipRepositoryProtocol",
    "PaymentProcessorProtocol",
    "EventBusProtocol",
    "PlanNotFoundError",
    "SubscriptionNotFoundError",
    "DuplicateSubscriptionError",
    "PaymentMethodInvalidError",
    "PaymentFailedError",
    "InvalidStatusTransitionError",
    "ConcurrentModificationError",
]
