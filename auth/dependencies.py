"""
Authentication dependencies for FastAPI.
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database.models import User
from auth.security import security_optional, session_header
from auth.permissions import Capability, has_capability
from services.auth_service import AuthService
from core.exceptions import Forbidden
from core.logger import logger
import config


@dataclass
class RequestContext:
    """Per-request state handed to services: who is calling, over which session, from where."""
    db: Session
    user: User
    session_token: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def get_db_session():
    """Get database session."""
    if not config.db:
        raise HTTPException(status_code=503, detail="Database not initialized")
    with config.db.get_session() as session:
        yield session


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_optional),
    header_key: Optional[str] = Security(session_header)
) -> Optional[str]:
    """
    Session token from, in order: Authorization Bearer, X-Session-Key header,
    session cookie.
    """
    if credentials and credentials.credentials:
        return credentials.credentials
    if header_key:
        return header_key
    return request.cookies.get(config.SESSION_COOKIE_NAME)


async def get_request_context(
    request: Request,
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db_session)
) -> RequestContext:
    """
    Resolve the caller's session into a RequestContext.

    Raises:
        Unauthenticated: Missing, expired or revoked session
    """
    user = AuthService.current_user(db, token)
    return RequestContext(
        db=db,
        user=user,
        session_token=token,
        ip_address=client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )


async def get_current_user(ctx: RequestContext = Depends(get_request_context)) -> User:
    return ctx.user


def require_capability(capability: Capability):
    """
    Dependency factory for capability-based access control.

    Args:
        capability: Capability the caller's role must grant

    Returns:
        Dependency yielding the RequestContext
    """
    async def capability_checker(
        ctx: RequestContext = Depends(get_request_context)
    ) -> RequestContext:
        if not has_capability(ctx.user.role, capability):
            logger.warning(
                f"Access denied: {ctx.user.username} ({ctx.user.role.value}) lacks {capability.value}"
            )
            raise Forbidden()
        return ctx

    return capability_checker


require_dashboard = require_capability(Capability.VIEW_DASHBOARD)
require_registration = require_capability(Capability.REGISTER_DETAINEE)
require_search = require_capability(Capability.SEARCH_DETAINEES)
require_user_admin = require_capability(Capability.MANAGE_USERS)
