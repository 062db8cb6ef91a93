"""
In-process request metrics

Counts requests per status class and per route template, and tracks
response-time aggregates. Exposed to admins via /api/admin/metrics.
"""
import threading
import time
from collections import Counter
from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class MetricsCollector:

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        with self._lock:
            self.started_at = time.time()
            self.total_requests = 0
            self.error_count = 0
            self.total_duration_ms = 0.0
            self.max_duration_ms = 0.0
            self.status_classes: Counter = Counter()
            self.routes: Counter = Counter()
            self.methods: Counter = Counter()

    def record(self, method: str, route: str, status_code: int, duration_ms: float):
        with self._lock:
            self.total_requests += 1
            self.total_duration_ms += duration_ms
            self.max_duration_ms = max(self.max_duration_ms, duration_ms)
            self.status_classes[f"{status_code // 100}xx"] += 1
            self.routes[f"{method} {route}"] += 1
            self.methods[method] += 1
            if status_code >= 500:
                self.error_count += 1

    def snapshot(self) -> Dict:
        with self._lock:
            average = self.total_duration_ms / self.total_requests if self.total_requests else 0.0
            return {
                "uptime_seconds": round(time.time() - self.started_at, 1),
                "requests": {
                    "total": self.total_requests,
                    "errors": self.error_count,
                    "by_status": dict(self.status_classes),
                    "by_method": dict(self.methods),
                    "top_routes": dict(self.routes.most_common(10)),
                },
                "response_time_ms": {
                    "average": round(average, 2),
                    "max": round(self.max_duration_ms, 2),
                },
            }


metrics = MetricsCollector()


class MetricsMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # Unhandled errors surface as 500s from the outer error middleware
            self._record(request, 500, start)
            raise

        self._record(request, response.status_code, start)
        return response

    @staticmethod
    def _record(request: Request, status_code: int, start: float):
        duration_ms = (time.perf_counter() - start) * 1000

        # Route template (e.g. /api/products/{product_id}) keeps cardinality bounded
        route = request.scope.get("route")
        path = getattr(route, "path", None) or "unmatched"
        metrics.record(request.method, path, status_code, duration_ms)
