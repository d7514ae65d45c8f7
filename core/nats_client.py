"""
NATS Client for Python Microservices
Provides event-driven communication between the Shopster services

Events are JSON documents published on dotted subjects ("membership.subscription.created").
Publishing is best-effort: a failed publish is logged by the caller and never
fails the business operation that produced the event.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TYPE_CHECKING

import nats
from nats.aio.client import Client as NATS
from nats.aio.msg import Msg

if TYPE_CHECKING:
    from core.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal, datetime and Enum values"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


EventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class NATSEventBus:
    """NATS event bus (nats-py)"""

    def __init__(
        self,
        service_name: str,
        config: Optional["ConfigManager"] = None,
    ):
        """
        Initialize NATS Event Bus.

        Args:
            service_name: Name of the service (used as the connection name)
            config: Optional ConfigManager instance for service discovery
        """
        from core.config_manager import ConfigManager

        self.service_name = service_name

        if config is None:
            config = ConfigManager(service_name)

        infra = config.settings.infrastructure
        if infra.nats_url:
            self.servers = infra.nats_url
        else:
            host, port = config.discover_service(
                service_name="nats_service",
                default_host=infra.nats_host,
                default_port=infra.nats_port,
                env_host_key="NATS_HOST",
                env_port_key="NATS_PORT",
            )
            self.servers = f"nats://{host}:{port}"

        self._client: Optional[NATS] = None
        self._subscriptions: Dict[str, Any] = {}

        logger.info(f"NATS EventBus initialized: {self.servers}")

    async def connect(self):
        """Connect to NATS"""
        try:
            self._client = await nats.connect(
                servers=[self.servers],
                name=self.service_name,
                connect_timeout=2,
                max_reconnect_attempts=5,
            )
            logger.info(f"Connected to NATS as {self.service_name}")
        except Exception as e:
            logger.error(f"Failed to connect to NATS at {self.servers}: {e}")
            raise

    async def publish(self, subject: str, data: Dict[str, Any]) -> bool:
        """Publish a raw JSON payload on a subject"""
        if not self.is_connected:
            logger.warning(f"NATS not connected, dropping event {subject}")
            return False

        payload = json.dumps(data, cls=DecimalEncoder).encode("utf-8")
        await self._client.publish(subject, payload)
        logger.debug(f"Published {subject} ({len(payload)} bytes)")
        return True

    async def subscribe_to_events(
        self,
        pattern: str,
        handler: EventHandler,
        durable: Optional[str] = None,
    ) -> bool:
        """
        Subscribe a handler to a subject pattern ("user.*", "membership.>").

        ``durable`` becomes the queue group, so replicas of one service share
        the work instead of each handling every event.
        """
        if not self.is_connected:
            logger.warning(f"NATS not connected, cannot subscribe to {pattern}")
            return False

        async def _on_message(msg: Msg):
            try:
                event_data = json.loads(msg.data.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.error(f"Discarding malformed event on {msg.subject}: {e}")
                return
            try:
                await handler(event_data)
            except Exception as e:
                logger.error(f"Handler for {msg.subject} failed: {e}", exc_info=True)

        subscription = await self._client.subscribe(pattern, queue=durable or "", cb=_on_message)
        self._subscriptions[pattern] = subscription
        logger.info(f"Subscribed to {pattern}" + (f" (queue {durable})" if durable else ""))
        return True

    async def close(self):
        """Drain subscriptions and close the connection"""
        global _event_bus

        self._subscriptions.clear()
        if self._client is not None:
            if self._client.is_connected:
                await self._client.drain()
            self._client = None
        if _event_bus is self:
            _event_bus = None
        logger.info("Disconnected from NATS")

    @property
    def is_connected(self) -> bool:
        """Check if connected to NATS"""
        return self._client is not None and self._client.is_connected


# Singleton per process
_event_bus: Optional[NATSEventBus] = None


async def get_event_bus(
    service_name: str,
    config: Optional["ConfigManager"] = None,
) -> NATSEventBus:
    """
    Get or create the event bus instance.

    Args:
        service_name: Name of the service using the event bus
        config: Optional ConfigManager instance for service discovery

    Returns:
        Connected NATSEventBus instance
    """
    global _event_bus

    if _event_bus is None or not _event_bus.is_connected:
        bus = NATSEventBus(service_name=service_name, config=config)
        await bus.connect()
        _event_bus = bus

    return _event_bus


__all__ = [
    "NATSEventBus",
    "get_event_bus",
    "DecimalEncoder",
]
