"""
User Management APIs (admin only).
"""
from typing import List
from fastapi import APIRouter, Depends, status

from auth.dependencies import RequestContext, require_user_admin
from schemas.user import MessageResponse, UserCreate, UserResponse, UserSearch, UserSuspend, UserUpdate
from services.user_service import UserService


router = APIRouter(prefix="/api/admin/users", tags=["admin-users"])


@router.get("", response_model=List[UserResponse])
async def list_users(ctx: RequestContext = Depends(require_user_admin)):
    return UserService.list_users(ctx.db)


@router.post("/search", response_model=List[UserResponse])
async def search_users(body: UserSearch, ctx: RequestContext = Depends(require_user_admin)):
    """Filter by username substring, role and status."""
    return UserService.search_users(ctx.db, username=body.username, role=body.role, status=body.status)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, ctx: RequestContext = Depends(require_user_admin)):
    return UserService.get_user(ctx.db, user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, ctx: RequestContext = Depends(require_user_admin)):
    """Create an account. Duplicate usernames yield 409."""
    return UserService.create_user(
        ctx.db,
        username=body.username,
        password=body.password,
        role=body.role,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        created_by=ctx.user,
    )


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: int, body: UserUpdate, ctx: RequestContext = Depends(require_user_admin)):
    """
    Update profile fields and role. status=active lifts a suspension;
    suspending goes through /suspend.
    """
    return UserService.update_user(
        ctx.db, ctx.user, user_id,
        username=body.username,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        role=body.role,
        status=body.status,
    )


@router.post("/{user_id}/suspend", response_model=UserResponse)
async def suspend_user(user_id: int, body: UserSuspend, ctx: RequestContext = Depends(require_user_admin)):
    """Suspend until a future date with a reason. Ends the user's live session."""
    return UserService.suspend_user(
        ctx.db, ctx.user, user_id,
        suspended_until=body.suspended_until,
        reason=body.suspended_reason,
    )


@router.post("/{user_id}/reactivate", response_model=UserResponse)
async def reactivate_user(user_id: int, ctx: RequestContext = Depends(require_user_admin)):
    return UserService.reactivate_user(ctx.db, ctx.user, user_id)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: int, ctx: RequestContext = Depends(require_user_admin)):
    """Delete an account together with its logs and session. Admins cannot delete themselves."""
    UserService.delete_user(ctx.db, ctx.user, user_id)
    return MessageResponse(message="User deleted successfully")
