"""
User Service Factory

Factory for creating UserService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.config_manager import ConfigManager

from .token_issuer import AuthTokenIssuer
from .user_repository import UserRepository
from .user_service import UserService

logger = logging.getLogger(__name__)


def create_user_service(
    config: Optional[ConfigManager] = None,
    event_bus=None,
) -> UserService:
    """
    Create UserService with a PostgreSQL repository and a JWT issuer

    Args:
        config: Optional config manager (creates default if not provided)
        event_bus: Optional event bus for user events
    """
    if config is None:
        config = ConfigManager("user_service")

    auth = config.settings.auth
    repository = UserRepository(config=config)
    token_issuer = AuthTokenIssuer(auth=auth)

    logger.info("UserService created with real dependencies")
    return UserService(
        repository=repository,
        token_issuer=token_issuer,
        event_bus=event_bus,
        auth=auth,
    )


__all__ = ["create_user_service"]
