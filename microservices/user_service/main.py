"""
User Microservice API

Registration, login, refresh-token rotation and profile management.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request

from core.api_response import ApiResponse, register_exception_handlers
from core.config_manager import ConfigManager
from core.logger import setup_service_logger
from core.nats_client import get_event_bus

from .factory import create_user_service
from .models import (
    ChangePasswordRequest,
    HealthResponse,
    LoginRequest,
    LogoutAllRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UpdateProfileRequest,
)
from .routes_registry import SERVICE_METADATA, get_route_summary
from .user_service import UserService

# Initialize config manager
config_manager = ConfigManager("user_service")
config = config_manager.get_service_config()

# Configure logger
logger = setup_service_logger("user_service", level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

# Global variables
user_service: Optional[UserService] = None
event_bus = None
SERVICE_PORT = config.service_port


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global user_service, event_bus

    try:
        if config.event_bus_enabled:
            try:
                event_bus = await get_event_bus("user_service", config=config_manager)
                logger.info("Event bus initialized successfully")
            except Exception as e:
                logger.warning(f"Failed to initialize event bus: {e}. Continuing without events.")
                event_bus = None

        user_service = create_user_service(config=config_manager, event_bus=event_bus)
        await user_service.repository.initialize()

        logger.info(f"User service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize user service: {e}")
        raise
    finally:
        if event_bus:
            try:
                await event_bus.close()
            except Exception as e:
                logger.error(f"Error closing event bus: {e}")

        if user_service:
            await user_service.repository.close()


app = FastAPI(
    title="User Service",
    description="Accounts, authentication and sessions",
    version=SERVICE_METADATA["version"],
    lifespan=lifespan,
)
register_exception_handlers(app)


async def get_user_service() -> UserService:
    """Get user service instance"""
    if not user_service:
        raise HTTPException(status_code=503, detail="User service not initialized")
    return user_service


def device_info_from(request: Request) -> str:
    """``<user agent>|<client ip>``, preferring the first X-Forwarded-For hop"""
    user_agent = request.headers.get("user-agent", "unknown")
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        client_ip = forwarded.split(",")[0].strip()
    else:
        client_ip = request.client.host if request.client else "unknown"
    return f"{user_agent}|{client_ip}"


# ====================
# Health Check and Service Info
# ====================


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    db_status = "unhealthy"
    if user_service and await user_service.repository.health_check():
        db_status = "healthy"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        service="user_service",
        port=SERVICE_PORT,
        version=SERVICE_METADATA["version"],
        dependencies={"postgres": db_status},
    )


@app.get("/api/v1/users/info")
async def get_service_info():
    return ApiResponse.ok({**SERVICE_METADATA, **get_route_summary()})


# ====================
# Auth API
# ====================


@app.post("/api/v1/auth/register")
async def register(
    body: RegisterRequest,
    request: Request,
    service: UserService = Depends(get_user_service),
):
    result = await service.register(body, device_info=device_info_from(request))
    return ApiResponse.ok(result, message="User registered successfully")


@app.post("/api/v1/auth/login")
async def login(
    body: LoginRequest,
    request: Request,
    service: UserService = Depends(get_user_service),
):
    result = await service.login(body, device_info=device_info_from(request))
    return ApiResponse.ok(result, message="Login successful")


@app.post("/api/v1/auth/refresh")
async def refresh_token(body: RefreshTokenRequest, service: UserService = Depends(get_user_service)):
    result = await service.refresh(body.refresh_token)
    return ApiResponse.ok(result, message="Token refreshed successfully")


@app.post("/api/v1/auth/logout")
async def logout(body: RefreshTokenRequest, service: UserService = Depends(get_user_service)):
    await service.logout(body.refresh_token)
    return ApiResponse.ok(None, message="Logout successful")


@app.post("/api/v1/auth/logout-all")
async def logout_all(body: LogoutAllRequest, service: UserService = Depends(get_user_service)):
    await service.logout_all_devices(body.user_id)
    return ApiResponse.ok(None, message="Logged out from all devices")


# ====================
# Users API
# ====================


@app.get("/api/v1/users/email/{email}")
async def get_user_by_email(email: str, service: UserService = Depends(get_user_service)):
    user = await service.get_user_by_email(email)
    return ApiResponse.ok(user, message="User profile retrieved successfully")


@app.get("/api/v1/users/{user_id}")
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    user = await service.get_user(user_id)
    return ApiResponse.ok(user, message="User profile retrieved successfully")


@app.put("/api/v1/users/{user_id}")
async def update_user(
    user_id: str,
    body: UpdateProfileRequest,
    service: UserService = Depends(get_user_service),
):
    user = await service.update_profile(user_id, body)
    return ApiResponse.ok(user, message="User profile updated successfully")


@app.post("/api/v1/users/{user_id}/change-password")
async def change_password(
    user_id: str,
    body: ChangePasswordRequest,
    service: UserService = Depends(get_user_service),
):
    await service.change_password(user_id, body.current_password, body.new_password)
    return ApiResponse.ok(None, message="Password changed successfully")


@app.post("/api/v1/users/{user_id}/deactivate")
async def deactivate_account(user_id: str, service: UserService = Depends(get_user_service)):
    await service.deactivate_account(user_id)
    return ApiResponse.ok(None, message="Account deactivated successfully")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.service_host, port=SERVICE_PORT)
