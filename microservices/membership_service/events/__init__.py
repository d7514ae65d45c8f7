"""
Membership Service Event Handlers

NATS event subscription handlers.
"""

import logging
from typing import Callable, Dict

from .models import MembershipEventType, MembershipSubscribedEventType, parse_user_deleted

logger = logging.getLogger(__name__)


class MembershipEventHandlers:
    """Membership service event handlers"""

    def __init__(self, membership_service, event_bus):
        self.service = membership_service
        self.event_bus = event_bus

    def get_event_handler_map(self) -> Dict[str, Callable]:
        return {
            MembershipSubscribedEventType.USER_DELETED.value: self.handle_user_deleted,
            MembershipSubscribedEventType.USER_DEACTIVATED.value: self.handle_user_deactivated,
        }

    async def handle_user_deleted(self, event_data: dict):
        """Cancel whatever the deleted user still has open"""
        await self._cancel_for_user(event_data, "Account deleted")

    async def handle_user_deactivated(self, event_data: dict):
        await self._cancel_for_user(event_data, "Account deactivated")

    async def _cancel_for_user(self, event_data: dict, reason: str):
        event = parse_user_deleted(event_data)
        if event is None:
            logger.warning(f"Ignoring user event without user_id ({reason})")
            return

        cancelled = await self.service.cancel_user_subscriptions(event.user_id, reason)
        logger.info(f"Cancelled {cancelled} subscriptions for user {event.user_id}: {reason}")


def get_event_handlers(membership_service, event_bus) -> Dict[str, Callable]:
    """Get event handler map"""
    handlers = MembershipEventHandlers(membership_service, event_bus)
    return handlers.get_event_handler_map()


__all__ = ["MembershipEventHandlers", "MembershipEventType", "get_event_handlers"]
