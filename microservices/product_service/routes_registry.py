"""
Product Service Routes Registry

Service metadata and route table, served from /api/v1/products/info.
"""

SERVICE_METADATA = {
    "service_name": "product_service",
    "version": "1.0.0",
    "tags": ["v1", "product", "catalog", "inventory"],
    "capabilities": [
        "homepage_listings",
        "catalog_browsing",
        "product_search",
        "inventory_reservation",
    ],
}

BASE_PATH = "/api/v1/products"

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": f"{BASE_PATH}/info", "methods": ["GET"], "description": "Service information"},

    # Homepage listings
    {"path": f"{BASE_PATH}/random", "methods": ["GET"], "description": "Random products"},
    {"path": f"{BASE_PATH}/featured", "methods": ["GET"], "description": "Featured products"},
    {"path": f"{BASE_PATH}/trending", "methods": ["GET"], "description": "Trending products"},
    {"path": f"{BASE_PATH}/recommended", "methods": ["GET"], "description": "Recommended products"},

    # Catalog
    {"path": BASE_PATH, "methods": ["GET"], "description": "All products (paged)"},
    {"path": f"{BASE_PATH}/search", "methods": ["GET"], "description": "Text search (paged)"},
    {"path": f"{BASE_PATH}/category/{{category}}", "methods": ["GET"], "description": "Products in a category (paged)"},
    {"path": f"{BASE_PATH}/{{product_id}}", "methods": ["GET"], "description": "Product summary"},

    # Inventory
    {"path": f"{BASE_PATH}/{{product_id}}/inventory", "methods": ["GET"], "description": "Inventory view"},
    {"path": f"{BASE_PATH}/{{product_id}}/inventory/reserve", "methods": ["POST"], "description": "Reserve stock"},
    {"path": f"{BASE_PATH}/{{product_id}}/inventory/release", "methods": ["POST"], "description": "Release reserved stock"},
    {"path": f"{BASE_PATH}/{{product_id}}/inventory/consume", "methods": ["POST"], "description": "Consume stock"},
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
