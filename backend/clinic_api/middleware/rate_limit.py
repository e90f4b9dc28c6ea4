"""
Clinic Tracker Backend — Verification Rate Limiting
====================================================

What:  Per-IP sliding window limiter for the /api/auth/ endpoints.
How:   Keeps the timestamps of each client's recent auth requests in memory;
       a request arriving when the window already holds
       AUTH_RATE_LIMIT_REQUESTS timestamps is answered with 429 and a
       Retry-After header. Every other path passes straight through.

Algorithm: Sliding Window Log
    1. Drop timestamps older than the window
    2. If the remaining count has reached the limit, reject
    3. Otherwise record the request and let it through

State is per process. Multi-worker deployments get one window per worker.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from clinic_api.config import settings
from clinic_api.exceptions import RateLimitExceededError
from clinic_api.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests:    requests allowed per window (default AUTH_RATE_LIMIT_REQUESTS)
        window_seconds:  window length (default AUTH_RATE_LIMIT_WINDOW)
        path_prefix:     only paths under this prefix are counted
    """

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        path_prefix: str = "/api/auth/",
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.auth_rate_limit_requests
        self.window_seconds = window_seconds or settings.auth_rate_limit_window
        self.path_prefix = path_prefix
        self._requests: Dict[str, List[float]] = defaultdict(list)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        # Behind a proxy this is the proxy's address
        client_ip = request.client.host if request.client else "unknown"

        now = time.time()
        window_start = now - self.window_seconds
        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= self.max_requests:
            retry_after = int(recent[0] + self.window_seconds - now) + 1
            logger.warning(
                "Auth rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip, len(recent), self.window_seconds,
            )
            error = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": error.message,
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        recent.append(now)
        if len(self._requests) > 1000:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Forgets clients with no request inside the current window."""
        inactive = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive:
            del self._requests[ip]
        if inactive:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive))
