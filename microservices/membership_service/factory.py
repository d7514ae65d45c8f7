"""
Membership Service Factory

Factory for creating MembershipService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
import os
from typing import Optional

from core.config_manager import ConfigManager

from .clients import PaymentStub
from .membership_repository import MembershipRepository
from .membership_service import MembershipService

logger = logging.getLogger(__name__)


def create_membership_service(
    config: Optional[ConfigManager] = None,
    event_bus=None,
) -> MembershipService:
    """
    Create MembershipService with all real dependencies

    Args:
        config: Optional config manager (creates default if not provided)
        event_bus: Optional event bus for event publishing

    Returns:
        Fully initialized MembershipService instance
    """
    if config is None:
        config = ConfigManager("membership_service")

    repository = MembershipRepository(config=config)

    latency = float(os.getenv("PAYMENT_STUB_LATENCY", "0.5"))
    payment_processor = PaymentStub(latency_seconds=latency)

    logger.info("MembershipService created with real dependencies")

    return MembershipService(
        repository=repository,
        payment_processor=payment_processor,
        event_bus=event_bus,
    )


__all__ = ["create_membership_service"]
