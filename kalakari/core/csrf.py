"""
CSRF protection

Tokens are base64("{session_id}:{timestamp_ms}:{random}:{hmac}") where the
HMAC-SHA256 signs the first three fields. Mutating requests must echo a valid
token in the X-CSRF-Token header (or the `_csrf` query parameter).
"""
import base64
import binascii
import hashlib
import hmac
import logging
import secrets
import time
from typing import Optional

from fastapi import status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from kalakari.core.config import settings

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"
SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}

# Public endpoints that cannot carry a token (or are authenticated by signature)
SKIP_PATHS = (
    "/api/auth/login",
    "/api/auth/register",
    "/api/payment/webhook",
    "/api/dev",
    "/health",
)


def _sign(payload: str, secret: str) -> str:
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


def generate_token(session_id: Optional[str] = None, secret: Optional[str] = None,
                   now_ms: Optional[int] = None) -> str:
    """Issue a signed token bound to a session id (or 'anonymous')"""
    secret = secret or settings.CSRF_SECRET
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    payload = f"{session_id or ANONYMOUS}:{timestamp}:{secrets.token_hex(32)}"
    token = f"{payload}:{_sign(payload, secret)}"
    return base64.b64encode(token.encode()).decode()


def validate_token(token: str, session_id: Optional[str] = None, secret: Optional[str] = None,
                   max_age_seconds: Optional[int] = None, now_ms: Optional[int] = None) -> bool:
    """
    Check structure, session binding, age and signature of a token.

    A token issued to 'anonymous' is accepted for any session.
    """
    secret = secret or settings.CSRF_SECRET
    max_age_ms = (max_age_seconds or settings.CSRF_MAX_AGE_SECONDS) * 1000
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)

    try:
        decoded = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return False

    parts = decoded.split(":")
    if len(parts) != 4:
        return False

    token_session, timestamp, random_value, signature = parts

    if session_id and token_session != session_id and token_session != ANONYMOUS:
        return False

    try:
        age = now_ms - int(timestamp)
    except ValueError:
        return False
    if age < 0 or age > max_age_ms:
        return False

    expected = _sign(f"{token_session}:{timestamp}:{random_value}", secret)
    return hmac.compare_digest(signature.encode(), expected.encode())


def new_session_id() -> str:
    return secrets.token_hex(16)


class CSRFMiddleware(BaseHTTPMiddleware):
    """Rejects mutating requests without a valid CSRF token (403)"""

    async def dispatch(self, request: Request, call_next):
        if not settings.CSRF_ENABLED or request.method in SAFE_METHODS:
            return await call_next(request)

        if any(request.url.path.startswith(path) for path in SKIP_PATHS):
            return await call_next(request)

        token = request.headers.get("X-CSRF-Token") or request.query_params.get("_csrf")
        session_id = request.cookies.get(settings.SESSION_COOKIE_NAME) or ANONYMOUS

        if not token:
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={
                    "success": False,
                    "message": "CSRF token missing",
                    "error": "Missing CSRF token in request",
                },
            )

        if not validate_token(token, session_id):
            logger.warning(f"Invalid CSRF token on {request.method} {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={
                    "success": False,
                    "message": "CSRF token invalid",
                    "error": "CSRF token validation failed",
                },
            )

        return await call_next(request)
