"""
Authentication middleware that flags unauthenticated calls to protected routes.
It never blocks: session validation is done by FastAPI dependencies.
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from typing import List, Optional

from core.logger import logger
import config

# Public routes that don't require authentication
PUBLIC_ROUTES: List[str] = [
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
    "/api/auth/login",
    "/api/auth/logout",
]


def is_public(path: str, public_routes: List[str]) -> bool:
    if path == "/":
        return True
    return any(path == route or path.startswith(route + "/") for route in public_routes)


class AuthRequiredMiddleware(BaseHTTPMiddleware):
    """Logs requests to protected routes that carry no session credentials."""

    def __init__(self, app, public_routes: Optional[List[str]] = None):
        """
        Initialize authentication middleware.

        Args:
            app: FastAPI application
            public_routes: Paths (and their sub-paths) that don't require auth
        """
        super().__init__(app)
        self.public_routes = public_routes or PUBLIC_ROUTES

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if request.method == "OPTIONS" or is_public(path, self.public_routes):
            return await call_next(request)

        has_credentials = (
            request.headers.get("authorization")
            or request.headers.get("x-session-key")
            or request.cookies.get(config.SESSION_COOKIE_NAME)
        )
        if not has_credentials:
            logger.warning(
                f"Request without session credentials: {request.method} {path} "
                f"from {request.client.host if request.client else 'unknown'}"
            )

        return await call_next(request)
