"""
Membership Microservice API

Shopster+ plan catalog and subscription lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from core.api_response import ApiResponse, error_response, register_exception_handlers
from core.config_manager import ConfigManager
from core.exceptions import ConflictError, ShopsterError
from core.logger import setup_service_logger
from core.nats_client import get_event_bus

from .factory import create_membership_service
from .membership_service import MembershipService
from .models import (
    CreateSubscriptionRequest,
    HealthResponse,
    MembershipPlanResponse,
    SuspendSubscriptionRequest,
)
from .protocols import SubscriptionNotFoundError
from .routes_registry import SERVICE_METADATA, get_route_summary
from .seed_data import seed_plans

# Initialize config manager
config_manager = ConfigManager("membership_service")
config = config_manager.get_service_config()

# Configure logger
logger = setup_service_logger("membership_service", level=config.log_level.upper())

# Print config info (development)
if config.debug:
    config_manager.print_config_summary(show_secrets=False)

# Global variables
membership_service: Optional[MembershipService] = None
event_bus = None
SERVICE_PORT = config.service_port


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global membership_service, event_bus

    try:
        if config.event_bus_enabled:
            try:
                event_bus = await get_event_bus("membership_service", config=config_manager)
                logger.info("Event bus initialized successfully")
            except Exception as e:
                logger.warning(
                    f"Failed to initialize event bus: {e}. Continuing without event subscriptions."
                )
                event_bus = None

        membership_service = create_membership_service(config=config_manager, event_bus=event_bus)

        await membership_service.repository.initialize()
        await seed_plans(membership_service.repository)

        if event_bus:
            from .events import get_event_handlers

            handler_map = get_event_handlers(membership_service, event_bus)
            for pattern, handler_func in handler_map.items():
                await event_bus.subscribe_to_events(
                    pattern=pattern,
                    handler=handler_func,
                    durable=f"membership-{pattern.replace('.', '-')}-consumer",
                )
            logger.info(f"Membership event subscriber started ({len(handler_map)} event patterns)")

        logger.info(f"Membership service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize membership service: {e}")
        raise
    finally:
        if event_bus:
            try:
                await event_bus.close()
                logger.info("Membership event bus closed")
            except Exception as e:
                logger.error(f"Error closing event bus: {e}")

        if membership_service:
            await membership_service.repository.close()
            logger.info("Membership service database connections closed")


app = FastAPI(
    title="Membership Service",
    description="Shopster+ plan catalog and subscription lifecycle",
    version=SERVICE_METADATA["version"],
    lifespan=lifespan,
)
register_exception_handlers(app)


# ====================
# Dependency Injection
# ====================


async def get_membership_service() -> MembershipService:
    """Get membership service instance"""
    if not membership_service:
        raise HTTPException(status_code=503, detail="Membership service not initialized")
    return membership_service


# ====================
# Health Check and Service Info
# ====================


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    dependencies = {}

    try:
        if membership_service and await membership_service.repository.db.health_check():
            dependencies["database"] = "healthy"
        else:
            dependencies["database"] = "unhealthy"
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        dependencies["database"] = "unhealthy"

    dependencies["event_bus"] = "healthy" if event_bus and event_bus.is_connected else "disabled"

    return HealthResponse(
        status="healthy" if dependencies["database"] == "healthy" else "degraded",
        service="membership_service",
        port=SERVICE_PORT,
        version=SERVICE_METADATA["version"],
        dependencies=dependencies,
    )


@app.get("/api/membership/info")
async def get_service_info():
    """Get service information"""
    return ApiResponse.ok({**SERVICE_METADATA, **get_route_summary()})


# ====================
# Plan Catalog
# ====================


@app.get("/api/membership/plans")
async def list_plans(service: MembershipService = Depends(get_membership_service)):
    """Active paid plans in display order"""
    plans = await service.list_active_paid_plans()
    return ApiResponse.ok([MembershipPlanResponse.from_plan(p) for p in plans])


@app.get("/api/membership/plans/trial")
async def list_trial_plans(service: MembershipService = Depends(get_membership_service)):
    """Active trial plans"""
    plans = await service.list_active_trial_plans()
    return ApiResponse.ok([MembershipPlanResponse.from_plan(p) for p in plans])


@app.get("/api/membership/plans/{plan_code}")
async def get_plan(plan_code: str, service: MembershipService = Depends(get_membership_service)):
    plan = await service.get_plan(plan_code)
    return ApiResponse.ok(MembershipPlanResponse.from_plan(plan))


# ====================
# Subscriptions
# ====================


@app.post("/api/membership/subscriptions", status_code=201)
async def create_subscription(
    request: CreateSubscriptionRequest,
    service: MembershipService = Depends(get_membership_service),
):
    """Subscribe a user to a plan"""
    try:
        subscription = await service.create_subscription(
            user_id=request.user_id,
            plan_code=request.plan_code,
            payment_method_id=request.payment_method_id,
            payment_method_type=request.payment_method_type,
            auto_renew=request.auto_renew,
        )
    except ConflictError:
        raise
    except ShopsterError as e:
        logger.warning(f"Failed to create subscription for {request.user_id}: {e.message}")
        return error_response(f"Failed to create subscription: {e.message}", 400)

    return ApiResponse.ok(subscription, message="Subscription created successfully", status=201)


@app.get("/api/membership/subscriptions/user/{user_id}")
async def get_user_subscription(user_id: str, service: MembershipService = Depends(get_membership_service)):
    """The user's ACTIVE or TRIALING subscription"""
    subscription = await service.get_active_subscription(user_id)
    if subscription is None:
        return error_response(f"No active subscription for user {user_id}", 404)
    return ApiResponse.ok(subscription)


@app.get("/api/membership/subscriptions/user/{user_id}/history")
async def get_subscription_history(user_id: str, service: MembershipService = Depends(get_membership_service)):
    history = await service.get_subscription_history(user_id)
    return ApiResponse.ok(history)


@app.put("/api/membership/subscriptions/{subscription_id}/cancel")
async def cancel_subscription(
    subscription_id: str,
    reason: str = Query(default="User requested cancellation"),
    service: MembershipService = Depends(get_membership_service),
):
    """Cancel a subscription; unknown ids answer 400"""
    try:
        subscription = await service.cancel_subscription(subscription_id, reason)
    except SubscriptionNotFoundError as e:
        return error_response(e.message, 400)
    return ApiResponse.ok(subscription, message="Subscription cancelled successfully")


@app.put("/api/membership/subscriptions/{subscription_id}/suspend")
async def suspend_subscription(
    subscription_id: str,
    request: SuspendSubscriptionRequest,
    service: MembershipService = Depends(get_membership_service),
):
    subscription = await service.suspend_subscription(subscription_id, request.reason)
    return ApiResponse.ok(subscription, message="Subscription suspended")


@app.put("/api/membership/subscriptions/{subscription_id}/reactivate")
async def reactivate_subscription(
    subscription_id: str,
    service: MembershipService = Depends(get_membership_service),
):
    subscription = await service.reactivate_subscription(subscription_id)
    return ApiResponse.ok(subscription, message="Subscription reactivated")


# ====================
# Membership Status & Stats
# ====================


@app.get("/api/membership/users/{user_id}/status")
async def get_membership_status(user_id: str, service: MembershipService = Depends(get_membership_service)):
    status = await service.get_membership_status(user_id)
    return ApiResponse.ok(status)


@app.get("/api/membership/stats")
async def get_stats(service: MembershipService = Depends(get_membership_service)):
    stats = await service.get_stats()
    return ApiResponse.ok(stats)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.service_host, port=SERVICE_PORT)
