"""
Membership Service Routes Registry

Service metadata and route table, served from /api/membership/info.
"""

SERVICE_METADATA = {
    "service_name": "membership_service",
    "version": "1.0.0",
    "tags": ["v1", "membership", "subscription", "microservice"],
    "capabilities": [
        "plan_catalog",
        "subscription_lifecycle",
        "trial_management",
        "billing_queries",
    ],
}

BASE_PATH = "/api/membership"

ROUTES = [
    # Health
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": f"{BASE_PATH}/info", "methods": ["GET"], "description": "Service information"},

    # Plan catalog
    {"path": f"{BASE_PATH}/plans", "methods": ["GET"], "description": "Active paid plans"},
    {"path": f"{BASE_PATH}/plans/trial", "methods": ["GET"], "description": "Active trial plans"},
    {"path": f"{BASE_PATH}/plans/{{plan_code}}", "methods": ["GET"], "description": "Plan by code"},

    # Subscriptions
    {"path": f"{BASE_PATH}/subscriptions", "methods": ["POST"], "description": "Create subscription"},
    {"path": f"{BASE_PATH}/subscriptions/user/{{user_id}}", "methods": ["GET"], "description": "Active subscription"},
    {"path": f"{BASE_PATH}/subscriptions/user/{{user_id}}/history", "methods": ["GET"], "description": "Subscription history"},
    {"path": f"{BASE_PATH}/subscriptions/{{subscription_id}}/cancel", "methods": ["PUT"], "description": "Cancel subscription"},
    {"path": f"{BASE_PATH}/subscriptions/{{subscription_id}}/suspend", "methods": ["PUT"], "description": "Suspend subscription"},
    {"path": f"{BASE_PATH}/subscriptions/{{subscription_id}}/reactivate", "methods": ["PUT"], "description": "Reactivate subscription"},

    # Membership status & stats
    {"path": f"{BASE_PATH}/users/{{user_id}}/status", "methods": ["GET"], "description": "Membership status"},
    {"path": f"{BASE_PATH}/stats", "methods": ["GET"], "description": "Subscription counts"},
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
