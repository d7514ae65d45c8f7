"""
Common response envelope and exception handlers

Every Shopster endpoint answers with {data, message, status, timestamp}, for
successes and failures alike.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import ShopsterError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope"""
    data: Optional[T] = None
    message: str = "Success"
    status: int = 200
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def ok(cls, data: Any = None, message: str = "Success", status: int = 200) -> "ApiResponse":
        return cls(data=data, message=message, status=status)

    @classmethod
    def error(cls, message: str, status: int, data: Any = None) -> "ApiResponse":
        return cls(data=data, message=message, status=status)


def error_response(message: str, status: int, data: Any = None) -> JSONResponse:
    body = ApiResponse.error(message=message, status=status, data=data)
    return JSONResponse(status_code=status, content=jsonable_encoder(body))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing handlers on an app"""

    @app.exception_handler(ShopsterError)
    async def handle_domain_error(request: Request, exc: ShopsterError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return error_response(exc.message, exc.status_code, data=exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        field_errors = {}
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
            field_errors[loc or "request"] = err.get("msg", "invalid value")
        logger.warning(f"Validation error on {request.url.path}: {field_errors}")
        return error_response("Input validation failed", 400, data=field_errors)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return error_response("An unexpected error occurred", 500)


__all__ = ["ApiResponse", "error_response", "register_exception_handlers"]
