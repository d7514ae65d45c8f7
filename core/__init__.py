#!/usr/bin/env python3
"""
Core Module for the Shopster microservices

Shared infrastructure used by every service.

COMPONENTS:
    - config/ + config_manager.py: environment-driven configuration and service discovery
    - logger.py: service logger setup
    - exceptions.py + api_response.py: error taxonomy and the {data, message, status, timestamp} envelope
    - jwt_manager.py: signed access/refresh tokens
    - resilience.py: timeout/retry/circuit-breaker/cache/fallback for cross-service calls
    - service_client_base.py: httpx base client for service-to-service calls
    - postgres_client.py: asyncpg pool wrapper
    - nats_client.py: NATS event bus

USAGE:
    from core.config_manager import ConfigManager

    config = ConfigManager("membership_service")
"""

__version__ = "1.0.0"
