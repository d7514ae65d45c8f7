"""
Product Microservice API

Catalog listings for the homepage and per-item inventory counters.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from core.api_response import ApiResponse, register_exception_handlers
from core.config_manager import ConfigManager
from core.logger import setup_service_logger
from core.nats_client import get_event_bus

from .factory import create_product_service
from .models import HealthResponse, InventoryAdjustmentRequest
from .product_service import ProductService
from .routes_registry import SERVICE_METADATA, get_route_summary
from .seed_data import seed_products

# Initialize config manager
config_manager = ConfigManager("product_service")
config = config_manager.get_service_config()

# Configure logger
logger = setup_service_logger("product_service", level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

# Global variables
product_service: Optional[ProductService] = None
event_bus = None
SERVICE_PORT = config.service_port


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global product_service, event_bus

    try:
        if config.event_bus_enabled:
            try:
                event_bus = await get_event_bus("product_service", config=config_manager)
                logger.info("Event bus initialized successfully")
            except Exception as e:
                logger.warning(f"Failed to initialize event bus: {e}. Continuing without events.")
                event_bus = None

        product_service = create_product_service(config=config_manager, event_bus=event_bus)
        await product_service.repository.initialize()
        await seed_products(product_service.repository)

        logger.info(f"Product service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize product service: {e}")
        raise
    finally:
        if event_bus:
            try:
                await event_bus.close()
            except Exception as e:
                logger.error(f"Error closing event bus: {e}")

        if product_service:
            await product_service.repository.close()
            logger.info("Product service database connections closed")


app = FastAPI(
    title="Product Service",
    description="Product catalog and inventory",
    version=SERVICE_METADATA["version"],
    lifespan=lifespan,
)
register_exception_handlers(app)


async def get_product_service() -> ProductService:
    """Get product service instance"""
    if not product_service:
        raise HTTPException(status_code=503, detail="Product service not initialized")
    return product_service


# ====================
# Health Check and Service Info
# ====================


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    database = "unhealthy"
    if product_service:
        try:
            if await product_service.repository.db.health_check():
                database = "healthy"
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")

    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        service="product_service",
        port=SERVICE_PORT,
        version=SERVICE_METADATA["version"],
        dependencies={"database": database},
    )


@app.get("/api/v1/products/info")
async def get_service_info():
    return ApiResponse.ok({**SERVICE_METADATA, **get_route_summary()})


# ====================
# Homepage Listings
# ====================


@app.get("/api/v1/products/random")
async def get_random_products(
    limit: int = Query(default=10, ge=1, le=50),
    service: ProductService = Depends(get_product_service),
):
    return ApiResponse.ok(await service.get_random_products(limit))


@app.get("/api/v1/products/featured")
async def get_featured_products(
    limit: int = Query(default=10, ge=1, le=50),
    service: ProductService = Depends(get_product_service),
):
    return ApiResponse.ok(await service.get_featured_products(limit))


@app.get("/api/v1/products/trending")
async def get_trending_products(
    limit: int = Query(default=10, ge=1, le=50),
    service: ProductService = Depends(get_product_service),
):
    return ApiResponse.ok(await service.get_trending_products(limit))


@app.get("/api/v1/products/recommended")
async def get_recommended_products(
    limit: int = Query(default=10, ge=1, le=50),
    service: ProductService = Depends(get_product_service),
):
    return ApiResponse.ok(await service.get_recommended_products(limit))


# ====================
# Catalog Browsing
# ====================


@app.get("/api/v1/products")
async def list_products(
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1, le=100),
    service: ProductService = Depends(get_product_service),
):
    """All products, zero-based pages"""
    return ApiResponse.ok(await service.list_products(page, size))


@app.get("/api/v1/products/search")
async def search_products(
    q: str = Query(..., min_length=1),
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1, le=100),
    service: ProductService = Depends(get_product_service),
):
    return ApiResponse.ok(await service.search_products(q, page, size))


@app.get("/api/v1/products/category/{category}")
async def get_products_by_category(
    category: str,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1, le=100),
    service: ProductService = Depends(get_product_service),
):
    return ApiResponse.ok(await service.get_products_by_category(category, page, size))


@app.get("/api/v1/products/{product_id}")
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return ApiResponse.ok(await service.get_product(product_id))


# ====================
# Inventory
# ====================


@app.get("/api/v1/products/{product_id}/inventory")
async def get_inventory(product_id: str, service: ProductService = Depends(get_product_service)):
    return ApiResponse.ok(await service.get_inventory(product_id))


@app.post("/api/v1/products/{product_id}/inventory/reserve")
async def reserve_stock(
    product_id: str,
    request: InventoryAdjustmentRequest,
    service: ProductService = Depends(get_product_service),
):
    """Reserve stock; ``applied`` is false when not enough is available"""
    view = await service.reserve_stock(product_id, request.quantity)
    return ApiResponse.ok(view, message="Stock reserved" if view.applied else "Reservation not applied")


@app.post("/api/v1/products/{product_id}/inventory/release")
async def release_stock(
    product_id: str,
    request: InventoryAdjustmentRequest,
    service: ProductService = Depends(get_product_service),
):
    view = await service.release_stock(product_id, request.quantity)
    return ApiResponse.ok(view, message="Stock released" if view.applied else "Release not applied")


@app.post("/api/v1/products/{product_id}/inventory/consume")
async def consume_stock(
    product_id: str,
    request: InventoryAdjustmentRequest,
    service: ProductService = Depends(get_product_service),
):
    view = await service.consume_stock(product_id, request.quantity)
    return ApiResponse.ok(view, message="Stock consumed" if view.applied else "Consumption not applied")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.service_host, port=SERVICE_PORT)
