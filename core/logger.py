"""
Service logger setup

    from core.logger import setup_service_logger
    logger = setup_service_logger("cart_service", level="INFO")
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig


def setup_service_logger(
    service_name: str,
    level: str = "INFO",
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure and return the logger for a service.

    Calling it twice for the same service does not stack handlers.
    """
    config = config or LoggingConfig.from_env()

    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    if logger.handlers:
        return logger

    formatter = logging.Formatter(config.log_format)

    if config.enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        logger.addHandler(console)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Module loggers (microservices.<name>.*) share the same level
    logging.getLogger(f"microservices.{service_name}").setLevel(logger.level)

    return logger


__all__ = ["setup_service_logger"]
