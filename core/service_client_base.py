"""
Base Service Client for Internal Microservice Communication

Base class for clients one Shopster service uses to call another over HTTP.
"""

import httpx
import logging
from typing import Optional, Dict, Any
from abc import ABC

logger = logging.getLogger(__name__)


class BaseServiceClient(ABC):
    """
    Microservice client base

    Handles:
    1. Service discovery (<SERVICE_NAME>_URL, then host/port discovery)
    2. HTTP client lifecycle
    3. Timeouts

    Example:
        class ProductServiceClient(BaseServiceClient):
            service_name = "product_service"
            default_port = 8082

            async def get_product(self, product_id: str):
                response = await self.get(f"/api/v1/products/{product_id}")
                return response.json()
    """

    # Subclasses define these
    service_name: str = None
    default_port: int = None

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the service client

        Args:
            base_url: Service base URL (service discovery when omitted)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        if not self.service_name:
            raise ValueError(f"{self.__class__.__name__} must define 'service_name'")

        if base_url:
            self.base_url = base_url.rstrip('/')
        else:
            self.base_url = self._discover_service()

        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers=self._build_default_headers(),
            transport=transport,
        )

        logger.debug(f"Initialized {self.service_name} client: {self.base_url}")

    def _discover_service(self) -> str:
        """
        Resolve the service URL through the config manager

        Returns:
            Base URL of the service
        """
        try:
            from core.config_manager import ConfigManager
            url = ConfigManager(self.service_name).get_service_url(self.service_name)
            logger.debug(f"Discovered {self.service_name} at {url}")
            return url
        except Exception as e:
            default_url = f"http://localhost:{self.default_port}" if self.default_port else "http://localhost:8000"
            logger.warning(
                f"Service discovery failed for {self.service_name}, "
                f"using default: {default_url}. Error: {e}"
            )
            return default_url

    def _build_default_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": f"shopster-internal-client/{self.service_name}"
        }

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()
        logger.debug(f"Closed {self.service_name} client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================
    # HTTP methods
    # ========================================

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """GET request"""
        url = f"{self.base_url}{path}"
        response = await self.client.get(url, params=params, headers=headers)
        return response

    async def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """POST request"""
        url = f"{self.base_url}{path}"
        response = await self.client.post(url, json=json, headers=headers)
        return response

    async def put(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """PUT request"""
        url = f"{self.base_url}{path}"
        response = await self.client.put(url, json=json, headers=headers)
        return response

    async def delete(
        self,
        path: str,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """DELETE request"""
        url = f"{self.base_url}{path}"
        response = await self.client.delete(url, headers=headers)
        return response

    async def health_check(self) -> bool:
        """
        Health check

        Returns:
            Whether the service answered /health with 200
        """
        try:
            response = await self.get("/health")
            return response.status_code == 200
        except Exception as e:
            logger.warning(f"{self.service_name} health check failed: {e}")
            return False


__all__ = ["BaseServiceClient"]
