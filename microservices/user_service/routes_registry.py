"""
User Service Routes Registry

Service metadata and route table, served from /api/v1/users/info.
"""

SERVICE_METADATA = {
    "service_name": "user_service",
    "version": "1.0.0",
    "tags": ["v1", "user", "auth", "microservice"],
    "capabilities": ["registration", "authentication", "token_refresh", "profile_management"],
}

AUTH_BASE_PATH = "/api/v1/auth"
BASE_PATH = "/api/v1/users"

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": f"{BASE_PATH}/info", "methods": ["GET"], "description": "Service information"},
    {"path": f"{AUTH_BASE_PATH}/register", "methods": ["POST"], "description": "Register and log in"},
    {"path": f"{AUTH_BASE_PATH}/login", "methods": ["POST"], "description": "Log in"},
    {"path": f"{AUTH_BASE_PATH}/refresh", "methods": ["POST"], "description": "Rotate refresh token"},
    {"path": f"{AUTH_BASE_PATH}/logout", "methods": ["POST"], "description": "Revoke one session"},
    {"path": f"{AUTH_BASE_PATH}/logout-all", "methods": ["POST"], "description": "Revoke all sessions"},
    {"path": f"{BASE_PATH}/email/{{email}}", "methods": ["GET"], "description": "Get profile by email"},
    {"path": f"{BASE_PATH}/{{user_id}}", "methods": ["GET", "PUT"], "description": "Get or update profile"},
    {"path": f"{BASE_PATH}/{{user_id}}/change-password", "methods": ["POST"], "description": "Change password"},
    {"path": f"{BASE_PATH}/{{user_id}}/deactivate", "methods": ["POST"], "description": "Deactivate account"},
]


def get_route_summary():
    """Route metadata for the service info endpoint"""
    return {
        "route_count": len(ROUTES),
        "routes": [r["path"] for r in ROUTES],
        "api_version": "v1",
        "base_path": BASE_PATH,
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "BASE_PATH", "AUTH_BASE_PATH", "get_route_summary"]
