#!/usr/bin/env python3
"""Top-level platform configuration"""
import os
from dataclasses import dataclass, field

from .auth_config import AuthConfig
from .infra_config import InfraConfig
from .logging_config import LoggingConfig
from .resilience_config import ResilienceConfig

def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class ShopsterConfig:
    """Main platform configuration with all sub-configs"""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Default service settings (each microservice overrides the port)
    default_host: str = "0.0.0.0"
    default_port: int = 8000

    # Sub-configurations
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    infrastructure: InfraConfig = field(default_factory=InfraConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    resilience: ResilienceConfig = field(default_factory=ResilienceConfig)

    @classmethod
    def from_env(cls) -> 'ShopsterConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),
            default_host=os.getenv("HOST", "0.0.0.0"),
            default_port=_int(os.getenv("PORT", "8000"), 8000),
            logging=LoggingConfig.from_env(),
            infrastructure=InfraConfig.from_env(),
            auth=AuthConfig.from_env(),
            resilience=ResilienceConfig.from_env(),
        )
