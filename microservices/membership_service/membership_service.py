"""
Membership Service Business Logic

Shopster+ plan catalog and the subscription lifecycle:
trial -> active -> cancelled, with billing-date computation.
"""

import asyncio
import logging
import uuid
import weakref
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .billing import add_billing_cycle, trial_end
from .events.models import MembershipEventType
from .models import (
    HISTORY_STATUSES,
    LIVE_STATUSES,
    MembershipPlan,
    MembershipStats,
    MembershipStatusResponse,
    MembershipSubscription,
    PaymentMethodType,
    PlanType,
    SubscriptionStatus,
)
from .protocols import (
    DuplicateSubscriptionError,
    EventBusProtocol,
    InvalidStatusTransitionError,
    MembershipRepositoryProtocol,
    PaymentFailedError,
    PaymentMethodInvalidError,
    PaymentProcessorProtocol,
    PlanNotFoundError,
    SubscriptionNotFoundError,
)

logger = logging.getLogger(__name__)


# Allowed status transitions; CANCELLED and EXPIRED are terminal
STATUS_TRANSITIONS: Dict[SubscriptionStatus, frozenset] = {
    SubscriptionStatus.PENDING: frozenset({
        SubscriptionStatus.TRIALING,
        SubscriptionStatus.ACTIVE,
        SubscriptionStatus.CANCELLED,
    }),
    SubscriptionStatus.TRIALING: frozenset({
        SubscriptionStatus.ACTIVE,
        SubscriptionStatus.CANCELLED,
        SubscriptionStatus.EXPIRED,
        SubscriptionStatus.SUSPENDED,
    }),
    SubscriptionStatus.ACTIVE: frozenset({
        SubscriptionStatus.CANCELLED,
        SubscriptionStatus.EXPIRED,
        SubscriptionStatus.SUSPENDED,
    }),
    SubscriptionStatus.SUSPENDED: frozenset({
        SubscriptionStatus.ACTIVE,
        SubscriptionStatus.CANCELLED,
    }),
    SubscriptionStatus.CANCELLED: frozenset(),
    SubscriptionStatus.EXPIRED: frozenset(),
}


def can_transition(current: SubscriptionStatus, target: SubscriptionStatus) -> bool:
    return target in STATUS_TRANSITIONS[current]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MembershipService:
    """Membership service core business logic"""

    def __init__(
        self,
        repository: MembershipRepositoryProtocol,
        payment_processor: PaymentProcessorProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize membership service with injected dependencies

        Args:
            repository: Repository for data access
            payment_processor: Gateway used to charge and cancel recurring billing
            event_bus: Optional event bus for publishing events
            clock: Source of "now" (UTC)
        """
        self.repository = repository
        self.payment_processor = payment_processor
        self.event_bus = event_bus
        self._now = clock

        # One lock per user while a subscription is being created for them
        self._user_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

        logger.info("MembershipService initialized with dependency injection")

    def _user_lock(self, user_id: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        return lock

    # ====================
    # Plan Catalog
    # ====================

    async def get_plan(self, plan_code: str) -> MembershipPlan:
        """Get plan by code"""
        plan = await self.repository.get_plan(plan_code)
        if plan is None:
            raise PlanNotFoundError(f"Plan not found: {plan_code}")
        return plan

    async def list_active_paid_plans(self) -> List[MembershipPlan]:
        """Active non-trial plans, ascending display order"""
        plans = await self.repository.list_plans(active_only=True)
        paid = [p for p in plans if p.plan_type != PlanType.TRIAL]
        return sorted(paid, key=lambda p: p.display_order)

    async def list_active_trial_plans(self) -> List[MembershipPlan]:
        plans = await self.repository.list_plans(active_only=True)
        trials = [p for p in plans if p.plan_type == PlanType.TRIAL]
        return sorted(trials, key=lambda p: p.display_order)

    # ====================
    # Subscription Lifecycle
    # ====================

    async def create_subscription(
        self,
        user_id: str,
        plan_code: str,
        payment_method_id: str,
        payment_method_type: PaymentMethodType,
        auto_renew: bool = True,
    ) -> MembershipSubscription:
        """
        Subscribe a user to a plan.

        Plans with a trial start TRIALING and charge nothing yet; plans without
        one are charged immediately and start ACTIVE.

        Raises:
            PlanNotFoundError: unknown plan code
            DuplicateSubscriptionError: user already has an ACTIVE/TRIALING subscription
            PaymentMethodInvalidError: payment method failed validation
            PaymentFailedError: the charge was declined
        """
        plan = await self.get_plan(plan_code)

        async with self._user_lock(user_id):
            live = await self.repository.find_by_user_and_statuses(user_id, list(LIVE_STATUSES))
            if live:
                raise DuplicateSubscriptionError("User already has an active subscription")

            valid = await self.payment_processor.validate_payment_method(
                payment_method_id, payment_method_type
            )
            if not valid:
                raise PaymentMethodInvalidError("Invalid payment method")

            now = self._now()
            subscription = MembershipSubscription(
                subscription_id=f"sub_{uuid.uuid4().hex[:16]}",
                user_id=user_id,
                plan_code=plan.plan_code,
                amount=plan.price,
                payment_method_id=payment_method_id,
                payment_method_type=payment_method_type,
                auto_renew=auto_renew,
            )

            if plan.has_trial:
                subscription.status = SubscriptionStatus.TRIALING
                subscription.trial_start_date = now
                subscription.trial_end_date = trial_end(now, plan.trial_days)
                subscription.next_billing_date = subscription.trial_end_date
            else:
                payment = await self.payment_processor.process_payment(
                    plan.price, payment_method_id, payment_method_type
                )
                if not payment.success:
                    raise PaymentFailedError(f"Payment failed: {payment.message}")

                subscription.status = SubscriptionStatus.ACTIVE
                subscription.subscription_start_date = now
                subscription.last_billing_date = now
                subscription.next_billing_date = add_billing_cycle(now, plan.billing_cycle)

            created = await self.repository.create_subscription(subscription)

        logger.info(
            f"Created subscription {created.subscription_id} for user {user_id} "
            f"on {plan.plan_code} ({created.status.value})"
        )

        await self._publish_event(
            MembershipEventType.SUBSCRIPTION_CREATED,
            {
                "subscription_id": created.subscription_id,
                "user_id": user_id,
                "plan_code": plan.plan_code,
                "status": created.status.value,
                "amount": str(created.amount),
                "next_billing_date": created.next_billing_date.isoformat() if created.next_billing_date else None,
            }
        )

        return created

    async def cancel_subscription(self, subscription_id: str, reason: str) -> MembershipSubscription:
        """
        Cancel a subscription and stop recurring billing.

        Raises:
            SubscriptionNotFoundError: no such subscription
            InvalidStatusTransitionError: already cancelled or expired
        """
        subscription = await self._get_subscription(subscription_id)
        self._ensure_transition(subscription, SubscriptionStatus.CANCELLED)

        subscription.status = SubscriptionStatus.CANCELLED
        subscription.cancellation_date = self._now()
        subscription.cancellation_reason = reason
        subscription.auto_renew = False

        updated = await self.repository.update_subscription(subscription)

        # Always succeeds with the stub gateway; nothing to compensate
        await self.payment_processor.cancel_recurring_payment(subscription_id)

        logger.info(f"Cancelled subscription {subscription_id}: {reason}")

        await self._publish_event(
            MembershipEventType.SUBSCRIPTION_CANCELLED,
            {
                "subscription_id": subscription_id,
                "user_id": updated.user_id,
                "reason": reason,
            }
        )

        return updated

    async def suspend_subscription(self, subscription_id: str, reason: str) -> MembershipSubscription:
        """Suspend a TRIALING or ACTIVE subscription"""
        subscription = await self._get_subscription(subscription_id)
        self._ensure_transition(subscription, SubscriptionStatus.SUSPENDED)

        subscription.status = SubscriptionStatus.SUSPENDED
        updated = await self.repository.update_subscription(subscription)

        logger.info(f"Suspended subscription {subscription_id}: {reason}")
        await self._publish_event(
            MembershipEventType.SUBSCRIPTION_SUSPENDED,
            {"subscription_id": subscription_id, "user_id": updated.user_id, "reason": reason}
        )
        return updated

    async def reactivate_subscription(self, subscription_id: str) -> MembershipSubscription:
        """
        Bring a SUSPENDED subscription back to ACTIVE.

        Fails with DuplicateSubscriptionError if the user has since started
        another live subscription.
        """
        subscription = await self._get_subscription(subscription_id)
        self._ensure_transition(subscription, SubscriptionStatus.ACTIVE)

        async with self._user_lock(subscription.user_id):
            live = await self.repository.find_by_user_and_statuses(
                subscription.user_id, list(LIVE_STATUSES)
            )
            if any(s.subscription_id != subscription_id for s in live):
                raise DuplicateSubscriptionError("User already has an active subscription")

            subscription.status = SubscriptionStatus.ACTIVE
            if subscription.subscription_start_date is None:
                subscription.subscription_start_date = self._now()
            updated = await self.repository.update_subscription(subscription)

        logger.info(f"Reactivated subscription {subscription_id}")
        await self._publish_event(
            MembershipEventType.SUBSCRIPTION_REACTIVATED,
            {"subscription_id": subscription_id, "user_id": updated.user_id}
        )
        return updated

    async def cancel_user_subscriptions(self, user_id: str, reason: str) -> int:
        """Cancel every non-terminal subscription a user holds; returns how many"""
        open_statuses = [
            SubscriptionStatus.PENDING,
            SubscriptionStatus.TRIALING,
            SubscriptionStatus.ACTIVE,
            SubscriptionStatus.SUSPENDED,
        ]
        subscriptions = await self.repository.find_by_user_and_statuses(user_id, open_statuses)
        for subscription in subscriptions:
            await self.cancel_subscription(subscription.subscription_id, reason)
        return len(subscriptions)

    # ====================
    # Queries
    # ====================

    async def get_subscription(self, subscription_id: str) -> MembershipSubscription:
        return await self._get_subscription(subscription_id)

    async def is_active_member(self, user_id: str) -> bool:
        """True iff the user has an ACTIVE or TRIALING subscription"""
        return await self.get_active_subscription(user_id) is not None

    async def get_active_subscription(self, user_id: str) -> Optional[MembershipSubscription]:
        live = await self.repository.find_by_user_and_statuses(user_id, list(LIVE_STATUSES))
        return live[0] if live else None

    async def get_subscription_history(self, user_id: str) -> List[MembershipSubscription]:
        """ACTIVE, TRIALING and CANCELLED subscriptions, newest first"""
        return await self.repository.find_by_user_and_statuses(user_id, list(HISTORY_STATUSES))

    async def get_membership_status(self, user_id: str) -> MembershipStatusResponse:
        subscription = await self.get_active_subscription(user_id)
        return MembershipStatusResponse(
            user_id=user_id,
            is_member=subscription is not None,
            subscription=subscription,
        )

    async def find_subscriptions_ready_for_billing(
        self, as_of: Optional[datetime] = None
    ) -> List[MembershipSubscription]:
        """Subscriptions a billing run would charge at ``as_of`` (default now)"""
        return await self.repository.find_ready_for_billing(as_of or self._now())

    async def find_expired_trials(self, as_of: Optional[datetime] = None) -> List[MembershipSubscription]:
        """Trials whose end date has passed at ``as_of`` (default now)"""
        return await self.repository.find_expired_trials(as_of or self._now())

    async def get_stats(self) -> MembershipStats:
        return MembershipStats(
            active_subscriptions=await self.repository.count_by_status(SubscriptionStatus.ACTIVE),
            trial_subscriptions=await self.repository.count_by_status(SubscriptionStatus.TRIALING),
        )

    # ====================
    # Helpers
    # ====================

    async def _get_subscription(self, subscription_id: str) -> MembershipSubscription:
        subscription = await self.repository.get_subscription(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(f"Subscription not found: {subscription_id}")
        return subscription

    @staticmethod
    def _ensure_transition(subscription: MembershipSubscription, target: SubscriptionStatus) -> None:
        if not can_transition(subscription.status, target):
            raise InvalidStatusTransitionError(
                f"Cannot change subscription {subscription.subscription_id} "
                f"from {subscription.status.value} to {target.value}"
            )

    async def _publish_event(self, event_type: MembershipEventType, data: Dict[str, Any]) -> None:
        """Publish event to event bus"""
        if not self.event_bus:
            return

        subject = event_type.value
        try:
            event_data = {
                "event_type": subject.upper().replace(".", "_"),
                "source": "membership_service",
                "data": {
                    **data,
                    "timestamp": self._now().isoformat()
                }
            }
            await self.event_bus.publish(subject, event_data)
        except Exception as e:
            logger.warning(f"Failed to publish event {subject}: {e}")


__all__ = ["MembershipService", "STATUS_TRANSITIONS", "can_transition"]
