"""
Authentication endpoints: login, logout and current user.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from database.models import User
from auth.dependencies import (
    RequestContext, client_ip, get_db_session, get_request_context, get_session_token
)
from auth.permissions import capabilities_for, landing_view
from schemas.user import CurrentUserResponse, LoginRequest, LoginResponse, MessageResponse, UserResponse
from services.auth_service import AuthService
from core.logger import logger
import config


router = APIRouter(prefix="/api/auth", tags=["authentication"])


def current_user_payload(user: User) -> CurrentUserResponse:
    """User projection plus the role's landing view and capability names."""
    base = UserResponse.model_validate(user).model_dump()
    return CurrentUserResponse(
        **base,
        landing_view=landing_view(user.role),
        capabilities=sorted(c.value for c in capabilities_for(user.role)),
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db_session)
):
    """
    Log in with username and password.

    Returns the session token, also set as an HttpOnly cookie. Fails with 409
    while the account holds a live session elsewhere.
    """
    token, record, user = AuthService.login(
        db,
        username=body.username.strip(),
        password=body.password,
        ip_address=client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )

    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=config.SESSION_EXPIRE_HOURS * 3600,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return LoginResponse(
        session_token=token,
        expires_at=record.expires_at,
        user=current_user_payload(user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db_session)
):
    """Close the current session. Succeeds even without a valid session."""
    closed = AuthService.logout(db, token)
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    if not closed:
        logger.debug("Logout called without a live session")
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=CurrentUserResponse)
async def get_user(ctx: RequestContext = Depends(get_request_context)):
    """Current user with role capabilities and landing view."""
    return current_user_payload(ctx.user)
