from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_manager.domain.errors import CapacityError, NotFoundError, ValidationError

logger = logging.getLogger("task_manager.system")

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


def ok(data: Any) -> ApiResponse:
    return ApiResponse(success=True, data=data)


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    body = ApiResponse(success=False, error=message)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return error_response(404, "Task not found")

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError):
        return error_response(400, exc.message)

    @app.exception_handler(CapacityError)
    async def _full(request: Request, exc: CapacityError):
        return error_response(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(e.get("loc", ("",))[0] == "path" for e in errors):
            return error_response(400, "Invalid task ID")
        return error_response(400, "Invalid request format")

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return error_response(404, f"Endpoint not found: {request.method} {request.url.path}")
        if exc.status_code == 405:
            return error_response(405, f"Method not allowed: {request.method} {request.url.path}")
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception(
            "request.unhandled",
            extra={"category": "http", "event": "request.unhandled", "path": request.url.path},
        )
        return error_response(500, "Internal server error")
