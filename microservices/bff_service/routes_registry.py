"""
BFF Service Routes Registry

Service metadata and route table, served from /api/v1/homepage/info.
"""

SERVICE_METADATA = {
    "service_name": "bff_service",
    "version": "1.0.0",
    "tags": ["v1", "bff", "homepage", "aggregation"],
    "capabilities": [
        "hero_content",
        "product_carousels",
        "footer_banners",
        "resilient_aggregation",
    ],
}

BASE_PATH = "/api/v1/homepage"

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check with circuit state"},
    {"path": f"{BASE_PATH}/health", "methods": ["GET"], "description": "Health check (API v1)"},
    {"path": f"{BASE_PATH}/info", "methods": ["GET"], "description": "Service information"},
    {"path": f"{BASE_PATH}/hero-content", "methods": ["GET"], "description": "Hero banner cards"},
    {"path": f"{BASE_PATH}/product-carousel/{{carousel_type}}", "methods": ["GET"], "description": "Product carousel"},
    {"path": f"{BASE_PATH}/footer-banners", "methods": ["GET"], "description": "Footer banners"},
]


def get_route_summary():
    """Route metadata for the service info endpoint"""
    return {
        "route_count": len(ROUTES),
        "routes": [r["path"] for r in ROUTES],
        "api_version": "v1",
        "base_path": BASE_PATH,
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "BASE_PATH", "get_route_summary"]
