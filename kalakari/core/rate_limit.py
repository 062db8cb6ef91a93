"""
Rate limiting middleware for the Kalakari API
Uses in-memory storage with sliding window algorithm
"""
import time
from typing import Dict, Optional, Tuple
from collections import defaultdict

from fastapi import HTTPException, Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from kalakari.core.auth import decode_access_token
from kalakari.core.config import settings


class RateLimiter:
    """
    In-memory rate limiter using sliding window algorithm.

    For production with multiple instances, consider using Redis.
    """

    def __init__(self):
        # {identifier: [(timestamp, count), ...]}
        self._requests: Dict[str, list] = defaultdict(list)
        self._last_cleanup = time.time()
        self._cleanup_interval = 60  # seconds

    def _cleanup_old_entries(self, window_seconds: int = 60):
        """Remove entries older than the largest window we care about"""
        now = time.time()

        # Only cleanup periodically to avoid overhead
        if now - self._last_cleanup < self._cleanup_interval:
            return

        cutoff = now - window_seconds * 2

        for identifier in list(self._requests.keys()):
            self._requests[identifier] = [
                (ts, count) for ts, count in self._requests[identifier]
                if ts > cutoff
            ]
            if not self._requests[identifier]:
                del self._requests[identifier]

        self._last_cleanup = now

    def is_allowed(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int = 60
    ) -> Tuple[bool, int, int]:
        """
        Check if a request is allowed under the rate limit.

        Returns:
            Tuple of (is_allowed, remaining_requests, retry_after_seconds)
        """
        self._cleanup_old_entries(window_seconds)

        now = time.time()
        window_start = now - window_seconds

        requests_in_window = [
            (ts, count) for ts, count in self._requests[identifier]
            if ts > window_start
        ]
        self._requests[identifier] = requests_in_window

        total_requests = sum(count for _, count in requests_in_window)

        if total_requests >= max_requests:
            # Calculate when the oldest request in window will expire
            if requests_in_window:
                oldest_timestamp = min(ts for ts, _ in requests_in_window)
                retry_after = int(oldest_timestamp + window_seconds - now) + 1
            else:
                retry_after = 1

            return False, 0, retry_after

        self._requests[identifier].append((now, 1))

        remaining = max_requests - total_requests - 1
        return True, remaining, 0

    def reset(self):
        self._requests.clear()


# Global rate limiter instance
rate_limiter = RateLimiter()

# Paths that are exempt from rate limiting
EXEMPT_PATHS = {
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}

AUTH_PREFIX = "/api/auth"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client sliding-window limits.

    - /api/auth/*: RATE_LIMIT_AUTH req/min (brute-force protection)
    - everything else: RATE_LIMIT_GENERAL req/min

    Headers returned:
    - X-RateLimit-Limit: Maximum requests per window
    - X-RateLimit-Remaining: Remaining requests in current window
    - X-RateLimit-Reset / Retry-After: Seconds until retry (when limited)
    """

    async def dispatch(self, request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        # Skip OPTIONS requests (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        identifier, limit = self._get_identifier_and_limit(request)

        is_allowed, remaining, retry_after = rate_limiter.is_allowed(
            identifier=identifier,
            max_requests=limit,
            window_seconds=60
        )

        if not is_allowed:
            # Return a response instead of raising so CORS headers still apply
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"success": False, "message": "Too many requests. Please slow down."},
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(retry_after),
                    "Retry-After": str(retry_after),
                }
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)

        return response

    def _get_identifier_and_limit(self, request: Request) -> Tuple[str, int]:
        """
        Identify the client.

        Auth endpoints are always keyed by client IP, so a caller cannot
        escape the login ceiling by sending a different token each time.
        Elsewhere a signed-in user (verified token) gets a per-user bucket;
        anything else falls back to the IP.
        """
        if request.url.path.startswith(AUTH_PREFIX):
            return f"auth:ip:{get_client_ip(request)}", settings.RATE_LIMIT_AUTH

        user_id = _verified_user_id(request)
        if user_id is not None:
            return f"general:user:{user_id}", settings.RATE_LIMIT_GENERAL

        return f"general:ip:{get_client_ip(request)}", settings.RATE_LIMIT_GENERAL


def _verified_user_id(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    auth_header = request.headers.get("Authorization")
    if not token and auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:]
    if not token:
        return None

    try:
        payload = decode_access_token(token)
    except HTTPException:
        return None
    if payload.get("fixture"):
        return None
    return payload.get("sub")


def get_client_ip(request: Request) -> str:
    """
    Get the client IP

    X-Forwarded-For is only honoured when the direct peer is a configured
    trusted proxy; otherwise any client could pick its own address.
    """
    peer = request.client.host if request.client else "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for and peer in settings.get_trusted_proxies():
        # First IP in the chain is the original client
        return forwarded_for.split(",")[0].strip()

    return peer
