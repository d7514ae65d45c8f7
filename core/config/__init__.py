#!/usr/bin/env python3
"""Modular configuration system for the Shopster services

Configuration hierarchy:
- infra_config: Backing stores (PostgreSQL, Redis, NATS)
- auth_config: Token signing and password hashing
- resilience_config: Timeout/retry/breaker/cache policy for cross-service calls
- logging_config: Logging configuration
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .auth_config import AuthConfig
from .resilience_config import ResilienceConfig
from .shopster_config import ShopsterConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = ShopsterConfig.from_env()

def get_settings() -> ShopsterConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> ShopsterConfig:
    """Reload settings from environment"""
    global settings
    settings = ShopsterConfig.from_env()
    return settings

__all__ = [
    'ShopsterConfig',
    'get_settings',
    'reload_settings',
    'settings',
    'LoggingConfig',
    'InfraConfig',
    'AuthConfig',
    'ResilienceConfig',
]
