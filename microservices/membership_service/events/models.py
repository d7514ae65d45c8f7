"""
Membership Service Event Models

Event data models for membership_service.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# Event Type Definitions (Service-Specific)
# =============================================================================

class MembershipEventType(str, Enum):
    """
    Events published by membership_service.

    Subjects: membership.subscription.*
    """
    SUBSCRIPTION_CREATED = "membership.subscription.created"
    SUBSCRIPTION_CANCELLED = "membership.subscription.cancelled"
    SUBSCRIPTION_SUSPENDED = "membership.subscription.suspended"
    SUBSCRIPTION_REACTIVATED = "membership.subscription.reactivated"


class MembershipSubscribedEventType(str, Enum):
    """Events that membership_service subscribes to from other services."""
    USER_DELETED = "user.deleted"
    USER_DEACTIVATED = "user.deactivated"


# =============================================================================
# Event Data Models
# =============================================================================

class UserDeletedEventData(BaseModel):
    """Payload of user.deleted and user.deactivated as published by user_service"""
    user_id: str
    email: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def parse_user_deleted(event_data: dict) -> Optional[UserDeletedEventData]:
    """Accept both enveloped ({"data": {...}}) and flat payloads"""
    payload = event_data.get("data") if isinstance(event_data.get("data"), dict) else event_data
    if not payload.get("user_id"):
        return None
    return UserDeletedEventData(
        user_id=payload["user_id"],
        email=payload.get("email"),
    )


__all__ = [
    "MembershipEventType",
    "MembershipSubscribedEventType",
    "UserDeletedEventData",
    "parse_user_deleted",
]
