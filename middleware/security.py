"""
Security middleware for rate limiting, CORS, and other security features.
"""
from fastapi import Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import time
from collections import defaultdict, deque
from typing import Deque, Dict, List, Optional, Tuple

from core.logger import logger

LOGIN_PATH = "/api/auth/login"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client sliding-window limits.

    Every request counts against the per-minute and per-hour windows; login
    attempts also count against a tighter per-minute window so password
    guessing is throttled well before general API use.
    """

    def __init__(self, app, requests_per_minute: int = 60, requests_per_hour: int = 1000,
                 login_attempts_per_minute: int = 10):
        super().__init__(app)
        # (bucket, window seconds, limit)
        self.windows: Tuple[Tuple[str, int, int], ...] = (
            ("minute", 60, requests_per_minute),
            ("hour", 3600, requests_per_hour),
        )
        self.login_window = ("login", 60, login_attempts_per_minute)
        self.hits: Dict[Tuple[str, str], Deque[float]] = defaultdict(deque)

    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        windows = self.windows
        if request.method == "POST" and request.url.path == LOGIN_PATH:
            windows = windows + (self.login_window,)

        retry_after = self._admit(client_ip, windows, time.monotonic())
        if retry_after is not None:
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            # Raised exceptions bypass the app's handlers inside BaseHTTPMiddleware
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded. Please try again later.", "code": "RATE_LIMITED"},
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)

    def _admit(self, client_ip: str, windows, now: float) -> Optional[int]:
        """Record the hit and return None, or return seconds to wait when any window is full."""
        for bucket, seconds, limit in windows:
            hits = self.hits[(bucket, client_ip)]
            while hits and now - hits[0] >= seconds:
                hits.popleft()
            if len(hits) >= limit:
                return max(1, int(seconds - (now - hits[0])) + 1)

        for bucket, _, _ in windows:
            self.hits[(bucket, client_ip)].append(now)
        return None


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Detainee data must not linger in shared caches
        if request.url.path.startswith("/api/"):
            response.headers.setdefault("Cache-Control", "no-store")

        return response


def setup_cors(app, allowed_origins: List[str], allow_credentials: bool = True,
               allowed_methods: Optional[List[str]] = None):
    """
    Setup CORS middleware.

    Args:
        app: FastAPI application
        allowed_origins: List of allowed origins
        allow_credentials: Whether the session cookie may be sent cross-origin
        allowed_methods: List of allowed HTTP methods
    """
    if allowed_methods is None:
        allowed_methods = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "HEAD"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=allowed_methods,
        allow_headers=["*"],
        expose_headers=["*"],
    )


def setup_trusted_hosts(app, allowed_hosts: List[str]):
    """
    Setup trusted hosts middleware.

    Args:
        app: FastAPI application
        allowed_hosts: List of allowed hostnames
    """
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=allowed_hosts
    )
