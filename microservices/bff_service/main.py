"""
BFF Microservice API

Backend-for-frontend for the storefront homepage. Downstream failures never
reach the client: product carousels degrade to placeholder products.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from core.api_response import ApiResponse, register_exception_handlers
from core.config_manager import ConfigManager
from core.logger import setup_service_logger

from .factory import create_homepage_service
from .homepage_service import HomepageService
from .models import HealthResponse
from .routes_registry import SERVICE_METADATA, get_route_summary

# Initialize config manager
config_manager = ConfigManager("bff_service")
config = config_manager.get_service_config()

# Configure logger
logger = setup_service_logger("bff_service", level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

# Global variables
homepage_service: Optional[HomepageService] = None
SERVICE_PORT = config.service_port


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global homepage_service

    try:
        homepage_service = create_homepage_service(config=config_manager)
        logger.info(f"BFF service started on port {SERVICE_PORT}")
        yield
    except Exception as e:
        logger.error(f"Failed to initialize BFF service: {e}")
        raise
    finally:
        if homepage_service:
            await homepage_service.product_client.close()
            logger.info("BFF downstream clients closed")


app = FastAPI(
    title="BFF Service",
    description="Homepage aggregation over the product service",
    version=SERVICE_METADATA["version"],
    lifespan=lifespan,
)
register_exception_handlers(app)


async def get_homepage_service() -> HomepageService:
    """Get homepage service instance"""
    if not homepage_service:
        raise HTTPException(status_code=503, detail="BFF service not initialized")
    return homepage_service


# ====================
# Health Check and Service Info
# ====================


@app.get("/api/v1/homepage/health", response_model=HealthResponse)
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check; reports the product-service circuit without calling it"""
    dependencies = {}
    status = "healthy"

    if homepage_service:
        breaker = homepage_service.stats()
        dependencies["product_service"] = breaker
        if breaker.get("state") != "closed":
            status = "degraded"
    else:
        status = "starting"

    return HealthResponse(
        status=status,
        service="bff_service",
        port=SERVICE_PORT,
        version=SERVICE_METADATA["version"],
        dependencies=dependencies,
    )


@app.get("/api/v1/homepage/info")
async def get_service_info():
    return ApiResponse.ok({**SERVICE_METADATA, **get_route_summary()})


# ====================
# Homepage Content
# ====================


@app.get("/api/v1/homepage/hero-content")
async def get_hero_content(service: HomepageService = Depends(get_homepage_service)):
    logger.info("Fetching hero content")
    return ApiResponse.ok(service.get_hero_content())


@app.get("/api/v1/homepage/product-carousel/{carousel_type}")
async def get_product_carousel(
    carousel_type: str,
    limit: int = Query(default=10, ge=1, le=50),
    service: HomepageService = Depends(get_homepage_service),
):
    """Carousel by type; always 200 for valid input, placeholder products when degraded"""
    carousel = await service.get_product_carousel(carousel_type, limit)
    return ApiResponse.ok(carousel)


@app.get("/api/v1/homepage/footer-banners")
async def get_footer_banners(service: HomepageService = Depends(get_homepage_service)):
    logger.info("Fetching footer banners")
    return ApiResponse.ok(service.get_footer_banners())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.service_host, port=SERVICE_PORT)
