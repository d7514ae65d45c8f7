"""
Configuration Manager for Shopster Microservices

Single entry point every service uses to read its own settings and to locate
the services and stores it depends on.

Usage:
    from core.config_manager import ConfigManager

    config_manager = ConfigManager("membership_service")
    config = config_manager.get_service_config()

    host, port = config_manager.discover_service(
        service_name="postgres_service",
        default_host="localhost",
        default_port=5432,
        env_host_key="POSTGRES_HOST",
        env_port_key="POSTGRES_PORT",
    )
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from core.config import ShopsterConfig, get_settings

logger = logging.getLogger(__name__)


# Default ports per service (overridable with <SERVICE_NAME>_PORT)
SERVICE_PORTS: Dict[str, int] = {
    "bff_service": 8080,
    "user_service": 8081,
    "product_service": 8082,
    "cart_service": 8083,
    "membership_service": 8084,
}


def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class ServiceSettings:
    """Settings for a single running service"""
    service_name: str
    service_host: str = "0.0.0.0"
    service_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"
    event_bus_enabled: bool = True


class ConfigManager:
    """Per-service view over the platform configuration"""

    def __init__(self, service_name: str, settings: Optional[ShopsterConfig] = None):
        self.service_name = service_name
        self.settings = settings or get_settings()

    def get_service_config(self) -> ServiceSettings:
        """Build the settings for this service from the environment"""
        env_prefix = self.service_name.upper()
        default_port = SERVICE_PORTS.get(self.service_name, self.settings.default_port)

        port_value = os.getenv(f"{env_prefix}_PORT")
        try:
            port = int(port_value) if port_value else default_port
        except ValueError:
            logger.warning(f"Invalid {env_prefix}_PORT={port_value!r}, using {default_port}")
            port = default_port

        return ServiceSettings(
            service_name=self.service_name,
            service_host=os.getenv(f"{env_prefix}_HOST", self.settings.default_host),
            service_port=port,
            debug=self.settings.debug,
            log_level=os.getenv(f"{env_prefix}_LOG_LEVEL", self.settings.logging.log_level),
            environment=self.settings.environment,
            event_bus_enabled=_bool(os.getenv("EVENT_BUS_ENABLED", "true")),
        )

    def discover_service(
        self,
        service_name: str,
        default_host: str = "localhost",
        default_port: int = 8000,
        env_host_key: Optional[str] = None,
        env_port_key: Optional[str] = None,
    ) -> Tuple[str, int]:
        """
        Resolve host and port of a dependency.

        Priority: explicit environment keys, then <SERVICE_NAME>_HOST/_PORT,
        then the supplied defaults.
        """
        prefix = service_name.upper()
        host = (
            (os.getenv(env_host_key) if env_host_key else None)
            or os.getenv(f"{prefix}_HOST")
            or default_host
        )

        raw_port = (
            (os.getenv(env_port_key) if env_port_key else None)
            or os.getenv(f"{prefix}_PORT")
        )
        try:
            port = int(raw_port) if raw_port else default_port
        except ValueError:
            logger.warning(f"Invalid port for {service_name}: {raw_port!r}, using {default_port}")
            port = default_port

        logger.debug(f"Discovered {service_name} at {host}:{port}")
        return host, port

    def get_service_url(self, service_name: str) -> str:
        """Base URL of another Shopster service (<SERVICE_NAME>_URL wins)"""
        explicit = os.getenv(f"{service_name.upper()}_URL")
        if explicit:
            return explicit.rstrip("/")

        host, port = self.discover_service(
            service_name=service_name,
            default_host="localhost",
            default_port=SERVICE_PORTS.get(service_name, 8000),
        )
        return f"http://{host}:{port}"

    def summary(self, show_secrets: bool = False) -> Dict[str, Any]:
        service = self.get_service_config()
        infra = self.settings.infrastructure
        auth = self.settings.auth
        return {
            "service": service.service_name,
            "environment": service.environment,
            "port": service.service_port,
            "debug": service.debug,
            "log_level": service.log_level,
            "postgres": f"{infra.postgres_host}:{infra.postgres_port}/{infra.postgres_db}",
            "redis": f"{infra.redis_host}:{infra.redis_port}/{infra.redis_db}",
            "nats": infra.nats_servers,
            "jwt_secret": (auth.jwt_secret or "<generated>") if show_secrets else "***",
        }

    def print_config_summary(self, show_secrets: bool = False) -> None:
        """Log a summary of the effective configuration"""
        logger.info(f"Configuration for {self.service_name}:")
        for key, value in self.summary(show_secrets=show_secrets).items():
            logger.info(f"  {key}: {value}")


__all__ = ["ConfigManager", "ServiceSettings", "SERVICE_PORTS"]
