"""
Membership Service Data Repository

Data access layer - PostgreSQL (asyncpg)
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import asyncpg

from core.config_manager import ConfigManager
from core.exceptions import ConcurrentModificationError
from core.postgres_client import PostgresClientWrapper

from .models import (
    BillingCycle,
    MembershipPlan,
    MembershipSubscription,
    PaymentMethodType,
    PlanType,
    SubscriptionStatus,
)
from .protocols import DuplicateSubscriptionError

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE SCHEMA IF NOT EXISTS membership;

CREATE TABLE IF NOT EXISTS membership.plans (
    id SERIAL PRIMARY KEY,
    plan_code VARCHAR(50) NOT NULL UNIQUE,
    name VARCHAR(255) NOT NULL,
    description TEXT,
    price NUMERIC(10, 2) NOT NULL,
    billing_cycle VARCHAR(20) NOT NULL,
    trial_days INTEGER NOT NULL DEFAULT 0,
    plan_type VARCHAR(20) NOT NULL,
    active BOOLEAN NOT NULL DEFAULT TRUE,
    display_order INTEGER NOT NULL DEFAULT 0,
    features JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS membership.subscriptions (
    id SERIAL PRIMARY KEY,
    subscription_id VARCHAR(64) NOT NULL UNIQUE,
    user_id VARCHAR(64) NOT NULL,
    plan_code VARCHAR(50) NOT NULL REFERENCES membership.plans (plan_code),
    status VARCHAR(20) NOT NULL,
    trial_start_date TIMESTAMPTZ,
    trial_end_date TIMESTAMPTZ,
    subscription_start_date TIMESTAMPTZ,
    subscription_end_date TIMESTAMPTZ,
    next_billing_date TIMESTAMPTZ,
    last_billing_date TIMESTAMPTZ,
    amount NUMERIC(10, 2) NOT NULL DEFAULT 0,
    payment_method_id VARCHAR(255),
    payment_method_type VARCHAR(20),
    auto_renew BOOLEAN NOT NULL DEFAULT TRUE,
    cancellation_date TIMESTAMPTZ,
    cancellation_reason TEXT,
    version INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_subscriptions_user ON membership.subscriptions (user_id);

-- At most one ACTIVE/TRIALING subscription per user
CREATE UNIQUE INDEX IF NOT EXISTS uq_subscriptions_live_user
    ON membership.subscriptions (user_id)
    WHERE status IN ('active', 'trialing');
"""

_SUBSCRIPTION_COLUMNS = """
    subscription_id, user_id, plan_code, status,
    trial_start_date, trial_end_date, subscription_start_date, subscription_end_date,
    next_billing_date, last_billing_date, amount, payment_method_id, payment_method_type,
    auto_renew, cancellation_date, cancellation_reason
"""


class MembershipRepository:
    """Membership service data repository - PostgreSQL (Async)"""

    def __init__(self, config: Optional[ConfigManager] = None, db: Optional[PostgresClientWrapper] = None):
        if config is None:
            config = ConfigManager("membership_service")

        self.db = db or PostgresClientWrapper(config.service_name, config=config)
        self.schema = "membership"
        self.plans_table = "plans"
        self.subscriptions_table = "subscriptions"

    async def initialize(self):
        """Open the pool and make sure the tables exist"""
        async with self.db:
            await self.db.execute_script(SCHEMA_SQL)
        logger.info("Membership repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Membership repository database connection closed")

    # ====================
    # Plans
    # ====================

    async def get_plan(self, plan_code: str) -> Optional[MembershipPlan]:
        query = f"SELECT * FROM {self.schema}.{self.plans_table} WHERE plan_code = $1"
        async with self.db:
            row = await self.db.query_row(query, [plan_code])
        return self._row_to_plan(row) if row else None

    async def list_plans(self, active_only: bool = True) -> List[MembershipPlan]:
        query = f"SELECT * FROM {self.schema}.{self.plans_table}"
        if active_only:
            query += " WHERE active = TRUE"
        query += " ORDER BY display_order ASC"
        async with self.db:
            rows = await self.db.query(query)
        return [self._row_to_plan(r) for r in rows]

    async def save_plan(self, plan: MembershipPlan) -> MembershipPlan:
        query = f'''
            INSERT INTO {self.schema}.{self.plans_table} (
                plan_code, name, description, price, billing_cycle, trial_days,
                plan_type, active, display_order, features
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10::jsonb)
            ON CONFLICT (plan_code) DO NOTHING
            RETURNING *
        '''
        params = [
            plan.plan_code,
            plan.name,
            plan.description,
            plan.price,
            plan.billing_cycle.value,
            plan.trial_days,
            plan.plan_type.value,
            plan.active,
            plan.display_order,
            json.dumps(plan.features),
        ]
        async with self.db:
            row = await self.db.query_row(query, params)
        if row is None:
            existing = await self.get_plan(plan.plan_code)
            return existing or plan
        return self._row_to_plan(row)

    async def count_plans(self) -> int:
        async with self.db:
            row = await self.db.query_row(f"SELECT COUNT(*) AS n FROM {self.schema}.{self.plans_table}")
        return int(row["n"]) if row else 0

    # ====================
    # Subscriptions
    # ====================

    async def create_subscription(self, subscription: MembershipSubscription) -> MembershipSubscription:
        query = f'''
            INSERT INTO {self.schema}.{self.subscriptions_table} ({_SUBSCRIPTION_COLUMNS}, version)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16, 0)
            RETURNING *
        '''
        try:
            async with self.db:
                row = await self.db.query_row(query, self._subscription_params(subscription))
        except asyncpg.UniqueViolationError:
            raise DuplicateSubscriptionError("User already has an active subscription")
        return self._row_to_subscription(row)

    async def get_subscription(self, subscription_id: str) -> Optional[MembershipSubscription]:
        query = f"SELECT * FROM {self.schema}.{self.subscriptions_table} WHERE subscription_id = $1"
        async with self.db:
            row = await self.db.query_row(query, [subscription_id])
        return self._row_to_subscription(row) if row else None

    async def update_subscription(self, subscription: MembershipSubscription) -> MembershipSubscription:
        """Version-checked write; stale versions raise ConcurrentModificationError"""
        query = f'''
            UPDATE {self.schema}.{self.subscriptions_table} SET
                status = $4,
                trial_start_date = $5, trial_end_date = $6,
                subscription_start_date = $7, subscription_end_date = $8,
                next_billing_date = $9, last_billing_date = $10,
                amount = $11, payment_method_id = $12, payment_method_type = $13,
                auto_renew = $14, cancellation_date = $15, cancellation_reason = $16,
                version = version + 1,
                updated_at = NOW()
            WHERE subscription_id = $1 AND user_id = $2 AND plan_code = $3 AND version = $17
            RETURNING *
        '''
        params = self._subscription_params(subscription) + [subscription.version]
        try:
            async with self.db:
                row = await self.db.query_row(query, params)
        except asyncpg.UniqueViolationError:
            raise DuplicateSubscriptionError("User already has an active subscription")

        if row is None:
            raise ConcurrentModificationError(
                f"Subscription {subscription.subscription_id} was modified concurrently"
            )
        return self._row_to_subscription(row)

    async def find_by_user_and_statuses(
        self,
        user_id: str,
        statuses: List[SubscriptionStatus],
    ) -> List[MembershipSubscription]:
        query = f'''
            SELECT * FROM {self.schema}.{self.subscriptions_table}
            WHERE user_id = $1 AND status = ANY($2::text[])
            ORDER BY created_at DESC, id DESC
        '''
        async with self.db:
            rows = await self.db.query(query, [user_id, [s.value for s in statuses]])
        return [self._row_to_subscription(r) for r in rows]

    async def find_ready_for_billing(self, as_of: datetime) -> List[MembershipSubscription]:
        query = f'''
            SELECT * FROM {self.schema}.{self.subscriptions_table}
            WHERE status = $1 AND auto_renew = TRUE AND next_billing_date <= $2
            ORDER BY next_billing_date ASC
        '''
        async with self.db:
            rows = await self.db.query(query, [SubscriptionStatus.ACTIVE.value, as_of])
        return [self._row_to_subscription(r) for r in rows]

    async def find_expired_trials(self, as_of: datetime) -> List[MembershipSubscription]:
        query = f'''
            SELECT * FROM {self.schema}.{self.subscriptions_table}
            WHERE status = $1 AND trial_end_date <= $2
            ORDER BY trial_end_date ASC
        '''
        async with self.db:
            rows = await self.db.query(query, [SubscriptionStatus.TRIALING.value, as_of])
        return [self._row_to_subscription(r) for r in rows]

    async def count_by_status(self, status: SubscriptionStatus) -> int:
        query = f"SELECT COUNT(*) AS n FROM {self.schema}.{self.subscriptions_table} WHERE status = $1"
        async with self.db:
            row = await self.db.query_row(query, [status.value])
        return int(row["n"]) if row else 0

    # ====================
    # Row mapping
    # ====================

    @staticmethod
    def _subscription_params(s: MembershipSubscription) -> List[Any]:
        return [
            s.subscription_id,
            s.user_id,
            s.plan_code,
            s.status.value,
            s.trial_start_date,
            s.trial_end_date,
            s.subscription_start_date,
            s.subscription_end_date,
            s.next_billing_date,
            s.last_billing_date,
            s.amount,
            s.payment_method_id,
            s.payment_method_type.value if s.payment_method_type else None,
            s.auto_renew,
            s.cancellation_date,
            s.cancellation_reason,
        ]

    @staticmethod
    def _row_to_plan(row: Dict[str, Any]) -> MembershipPlan:
        features = row.get("features") or []
        if isinstance(features, str):
            features = json.loads(features)
        return MembershipPlan(
            id=row.get("id"),
            plan_code=row["plan_code"],
            name=row["name"],
            description=row.get("description"),
            price=Decimal(str(row["price"])),
            billing_cycle=BillingCycle(row["billing_cycle"]),
            trial_days=row.get("trial_days") or 0,
            plan_type=PlanType(row["plan_type"]),
            active=row.get("active", True),
            display_order=row.get("display_order") or 0,
            features=features,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @staticmethod
    def _row_to_subscription(row: Dict[str, Any]) -> MembershipSubscription:
        method_type = row.get("payment_method_type")
        return MembershipSubscription(
            id=row.get("id"),
            subscription_id=row["subscription_id"],
            user_id=row["user_id"],
            plan_code=row["plan_code"],
            status=SubscriptionStatus(row["status"]),
            trial_start_date=row.get("trial_start_date"),
            trial_end_date=row.get("trial_end_date"),
            subscription_start_date=row.get("subscription_start_date"),
            subscription_end_date=row.get("subscription_end_date"),
            next_billing_date=row.get("next_billing_date"),
            last_billing_date=row.get("last_billing_date"),
            amount=Decimal(str(row.get("amount") or "0")),
            payment_method_id=row.get("payment_method_id"),
            payment_method_type=PaymentMethodType(method_type) if method_type else None,
            auto_renew=row.get("auto_renew", True),
            cancellation_date=row.get("cancellation_date"),
            cancellation_reason=row.get("cancellation_reason"),
            version=row.get("version") or 0,
            created_at=row.get("created_at") or datetime.now(timezone.utc),
            updated_at=row.get("updated_at"),
        )


__all__ = ["MembershipRepository", "SCHEMA_SQL"]
