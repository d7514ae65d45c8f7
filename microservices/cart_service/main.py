"""
Cart Microservice API

Per-user shopping carts stored in Redis.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException

from core.api_response import ApiResponse, register_exception_handlers
from core.config_manager import ConfigManager
from core.logger import setup_service_logger
from core.nats_client import get_event_bus

from .cart_service import CartService
from .factory import create_cart_service
from .models import AddItemRequest, HealthResponse, UpdateItemRequest
from .routes_registry import SERVICE_METADATA, get_route_summary

# Initialize config manager
config_manager = ConfigManager("cart_service")
config = config_manager.get_service_config()

# Configure logger
logger = setup_service_logger("cart_service", level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

# Global variables
cart_service: Optional[CartService] = None
event_bus = None
SERVICE_PORT = config.service_port


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global cart_service, event_bus

    try:
        if config.event_bus_enabled:
            try:
                event_bus = await get_event_bus("cart_service", config=config_manager)
                logger.info("Event bus initialized successfully")
            except Exception as e:
                logger.warning(f"Failed to initialize event bus: {e}. Continuing without events.")
                event_bus = None

        cart_service = create_cart_service(config=config_manager, event_bus=event_bus)
        await cart_service.repository.initialize()

        logger.info(f"Cart service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize cart service: {e}")
        raise
    finally:
        if event_bus:
            try:
                await event_bus.close()
            except Exception as e:
                logger.error(f"Error closing event bus: {e}")

        if cart_service:
            await cart_service.repository.close()


app = FastAPI(
    title="Cart Service",
    description="Per-user shopping carts",
    version=SERVICE_METADATA["version"],
    lifespan=lifespan,
)
register_exception_handlers(app)


async def get_cart_service() -> CartService:
    """Get cart service instance"""
    if not cart_service:
        raise HTTPException(status_code=503, detail="Cart service not initialized")
    return cart_service


# ====================
# Health Check and Service Info
# ====================


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    redis_status = "unhealthy"
    if cart_service and await cart_service.repository.health_check():
        redis_status = "healthy"

    return HealthResponse(
        status="healthy" if redis_status == "healthy" else "degraded",
        service="cart_service",
        port=SERVICE_PORT,
        version=SERVICE_METADATA["version"],
        dependencies={"redis": redis_status},
    )


@app.get("/api/v1/cart/info")
async def get_service_info():
    return ApiResponse.ok({**SERVICE_METADATA, **get_route_summary()})


# ====================
# Cart API
# ====================


@app.get("/api/v1/cart/{user_id}")
async def get_cart(user_id: str, service: CartService = Depends(get_cart_service)):
    """Get a user's cart (empty when none exists)"""
    return ApiResponse.ok(await service.get_cart(user_id))


@app.post("/api/v1/cart/{user_id}/items")
async def add_item(
    user_id: str,
    request: AddItemRequest,
    service: CartService = Depends(get_cart_service),
):
    cart = await service.add_item(user_id, request)
    return ApiResponse.ok(cart, message="Item added to cart")


@app.put("/api/v1/cart/{user_id}/items/{product_id}")
async def update_item(
    user_id: str,
    product_id: str,
    request: UpdateItemRequest,
    service: CartService = Depends(get_cart_service),
):
    cart = await service.update_item(user_id, product_id, request.quantity)
    return ApiResponse.ok(cart, message="Cart item updated")


@app.delete("/api/v1/cart/{user_id}/items/{product_id}")
async def remove_item(
    user_id: str,
    product_id: str,
    service: CartService = Depends(get_cart_service),
):
    cart = await service.remove_item(user_id, product_id)
    return ApiResponse.ok(cart, message="Item removed from cart")


@app.delete("/api/v1/cart/{user_id}")
async def clear_cart(user_id: str, service: CartService = Depends(get_cart_service)):
    await service.clear_cart(user_id)
    return ApiResponse.ok(None, message="Cart cleared")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.service_host, port=SERVICE_PORT)
