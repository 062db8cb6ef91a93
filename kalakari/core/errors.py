"""
API error types and exception handlers

Every error leaves the API as {"success": false, "message": ..., "errors"?: [...]}.
"""
import logging
from typing import Any, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .config import settings

logger = logging.getLogger(__name__)


class KalakariError(Exception):
    """Base class for business-rule failures raised by services"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationFailedError(KalakariError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(KalakariError):
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(KalakariError):
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(KalakariError):
    status_code = status.HTTP_409_CONFLICT


class InsufficientInventoryError(KalakariError):
    status_code = status.HTTP_400_BAD_REQUEST


class PaymentGatewayError(KalakariError):
    status_code = status.HTTP_502_BAD_GATEWAY


def error_body(message: str, errors: Optional[List[Any]] = None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


def _format_validation_errors(exc: RequestValidationError) -> List[dict]:
    formatted = []
    for err in exc.errors():
        # Drop the "body"/"query" prefix FastAPI puts in front of the field path
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({
            "field": ".".join(loc),
            "message": err.get("msg", "Invalid value"),
        })
    return formatted


async def kalakari_error_handler(request: Request, exc: KalakariError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.errors))


async def http_exception_handler(request: Request, exc: HTTPException):
    detail = exc.detail
    if isinstance(detail, dict):
        content = {"success": False, **detail}
    else:
        content = error_body(str(detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation failed", _format_validation_errors(exc)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    message = "Server error" if settings.is_production else str(exc) or "Server error"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_body(message))


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(KalakariError, kalakari_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
