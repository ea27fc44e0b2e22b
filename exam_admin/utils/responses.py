from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-API-Key",
}


class ApiError(Exception):
    """Error that is rendered as an error envelope by the app's exception handler."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: Optional[List[str]] = None,
                 details: Optional[Dict[str, Any]] = None):
        if errors is not None:
            details = {**(details or {}), "errors": errors}
        super().__init__(message, details)


class NotFoundError(ApiError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(ApiError):
    code = "CONFLICT"
    status_code = 409


class DatabaseError(ApiError):
    code = "DATABASE_ERROR"
    status_code = 500


@contextmanager
def database_errors(message: str) -> Iterator[None]:
    """Turns any SQLAlchemy failure inside the block into a DATABASE_ERROR."""
    try:
        yield
    except SQLAlchemyError as e:
        orig = getattr(e, "orig", None)
        driver_message = str(orig) if orig is not None else str(e)
        logger.error("%s: %s", message, driver_message)
        raise DatabaseError(f"{message}: {driver_message}", {"error": driver_message}) from e


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_response(data: Any = None, message: str = "", status_code: int = 200) -> JSONResponse:
    body: Dict[str, Any] = {"success": True, "timestamp": utc_timestamp(), "data": data}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=CORS_HEADERS)


def create_error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None,
                          status_code: int = 500) -> JSONResponse:
    body = {
        "success": False,
        "timestamp": utc_timestamp(),
        "error": {"code": code, "message": message, "details": details or {}},
    }
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=CORS_HEADERS)


def error_response(exc: ApiError) -> JSONResponse:
    return create_error_response(exc.code, exc.message, exc.details, exc.status_code)
