"""
Cart Service Routes Registry

Service metadata and route table, served from /api/v1/cart/info.
"""

SERVICE_METADATA = {
    "service_name": "cart_service",
    "version": "1.0.0",
    "tags": ["v1", "cart", "microservice"],
    "capabilities": ["cart_management"],
}

BASE_PATH = "/api/v1/cart"

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": f"{BASE_PATH}/info", "methods": ["GET"], "description": "Service information"},
    {"path": f"{BASE_PATH}/{{user_id}}", "methods": ["GET"], "description": "Get cart"},
    {"path": f"{BASE_PATH}/{{user_id}}", "methods": ["DELETE"], "description": "Clear cart"},
    {"path": f"{BASE_PATH}/{{user_id}}/items", "methods": ["POST"], "description": "Add item"},
    {"path": f"{BASE_PATH}/{{user_id}}/items/{{product_id}}", "methods": ["PUT"], "description": "Update item quantity"},
    {"path": f"{BASE_PATH}/{{user_id}}/items/{{product_id}}", "methods": ["DELETE"], "description": "Remove item"},
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
