"""
User directory service (admin operations): create, update, suspend,
reactivate and delete accounts.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.models import ActivityLog, SearchLog, User, UserRole, UserStatus
from auth.security import get_password_hash, validate_password
from services.auth_service import AuthService
from services.audit_service import AuditService
from services.session_store import SessionStore
from core.exceptions import (
    Conflict, DuplicateUsername, NotFound, SelfActionDenied, ValidationError
)
from core.validators import escape_like
from core.logger import logger
import config


class UserService:
    """Service for user directory operations. Every mutation is audited against the acting admin."""

    @staticmethod
    def list_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    @staticmethod
    def search_users(
        db: Session,
        username: Optional[str] = None,
        role: Optional[UserRole] = None,
        status: Optional[UserStatus] = None
    ) -> List[User]:
        """Filter users; username is a case-insensitive substring, role and status are exact."""
        query = db.query(User)
        if username:
            query = query.filter(User.username.ilike(f"%{escape_like(username)}%", escape="\\"))
        if role:
            query = query.filter(User.role == role)
        if status:
            query = query.filter(User.status == status)
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    @staticmethod
    def create_user(
        db: Session,
        username: str,
        password: str,
        role: UserRole = UserRole.OFFICER,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        created_by: Optional[User] = None
    ) -> User:
        """
        Create a new user.

        Args:
            db: Database session
            username: Unique username
            password: Plain text password (hashed before persistence)
            role: User role (default officer)
            first_name: First name
            last_name: Last name
            email: Email address
            created_by: Acting admin (None for bootstrap/scripts)

        Returns:
            Created User

        Raises:
            ValidationError: Password does not meet requirements
            DuplicateUsername: Username already taken
        """
        is_valid, error_message = validate_password(password)
        if not is_valid:
            raise ValidationError(error_message, errors=[{"field": "password", "message": error_message}])

        user = User(
            username=username,
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            email=email,
            role=role or UserRole.OFFICER,
            status=UserStatus.ACTIVE,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateUsername()
        db.refresh(user)

        logger.info(f"Created user: {username} (role: {user.role.value})")
        if created_by is not None:
            AuditService.log_activity(
                db, created_by.id, "create_user",
                f"Created user {username} with role {user.role.value}"
            )
        return user

    @staticmethod
    def update_user(
        db: Session,
        actor: User,
        user_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[UserRole] = None,
        status: Optional[UserStatus] = None
    ) -> User:
        """
        Update profile fields. Passwords are not changed through this path.

        Setting status=active clears any suspension. Suspending goes through
        suspend_user, which requires a reason and an end date.
        """
        user = UserService.get_user(db, user_id)

        if status == UserStatus.SUSPENDED and user.status != UserStatus.SUSPENDED:
            raise ValidationError(
                "Use the suspend action to suspend a user",
                errors=[{"field": "status", "message": "Suspension requires an end date and reason"}]
            )

        changes = []
        if username is not None and username != user.username:
            changes.append(f"username {user.username} -> {username}")
            user.username = username
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if email is not None:
            user.email = email
        if role is not None and role != user.role:
            changes.append(f"role {user.role.value} -> {role.value}")
            user.role = role
        if status == UserStatus.ACTIVE and user.status != UserStatus.ACTIVE:
            changes.append("reactivated")
            UserService._clear_suspension(user)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateUsername()
        db.refresh(user)

        detail = f" ({'; '.join(changes)})" if changes else ""
        logger.info(f"User {user.id} updated by {actor.username}{detail}")
        AuditService.log_activity(db, actor.id, "update_user", f"Updated user {user.username}{detail}")
        return user

    @staticmethod
    def suspend_user(
        db: Session,
        actor: User,
        user_id: int,
        suspended_until: datetime,
        reason: str
    ) -> User:
        """
        Suspend an account and revoke its live session.

        Raises:
            ValidationError: Missing end date or blank reason
            SelfActionDenied: Admin targets their own account
        """
        if suspended_until is None:
            raise ValidationError("Suspension end date is required",
                                  errors=[{"field": "suspendedUntil", "message": "Required"}])
        if not reason or not reason.strip():
            raise ValidationError("Suspension reason is required",
                                  errors=[{"field": "suspendedReason", "message": "Required"}])

        user = UserService.get_user(db, user_id)
        if user.id == actor.id:
            raise SelfActionDenied("You cannot suspend your own account")

        user.status = UserStatus.SUSPENDED
        user.suspended_until = suspended_until
        user.suspended_reason = reason.strip()
        AuthService.revoke_sessions(db, user)
        db.commit()
        db.refresh(user)

        logger.info(f"User {user.username} suspended until {suspended_until.isoformat()} by {actor.username}")
        AuditService.log_activity(
            db, actor.id, "suspend_user",
            f"Suspended user {user.username} until {suspended_until.isoformat()}: {user.suspended_reason}"
        )
        return user

    @staticmethod
    def reactivate_user(db: Session, actor: User, user_id: int) -> User:
        user = UserService.get_user(db, user_id)
        UserService._clear_suspension(user)
        db.commit()
        db.refresh(user)

        logger.info(f"User {user.username} reactivated by {actor.username}")
        AuditService.log_activity(db, actor.id, "reactivate_user", f"Reactivated user {user.username}")
        return user

    @staticmethod
    def delete_user(db: Session, actor: User, user_id: int) -> None:
        """
        Delete an account with its activity logs, search logs and sessions.

        Raises:
            SelfActionDenied: Admin targets their own account
            NotFound: Unknown user
            Conflict: User still owns detainee records
        """
        if user_id == actor.id:
            raise SelfActionDenied("You cannot delete your own account")

        user = UserService.get_user(db, user_id)
        username = user.username

        # Dependent rows first to satisfy the foreign keys
        db.query(ActivityLog).filter(ActivityLog.user_id == user_id).delete(synchronize_session=False)
        db.query(SearchLog).filter(SearchLog.user_id == user_id).delete(synchronize_session=False)
        SessionStore.destroy_for_user(db, user_id)
        db.delete(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("User has registered detainee records and cannot be deleted")

        logger.info(f"User {username} deleted by {actor.username}")
        AuditService.log_activity(db, actor.id, "delete_user", f"Deleted user {username}")

    @staticmethod
    def ensure_default_admin(db: Session) -> Optional[User]:
        """Create the bootstrap admin on first run. Returns the new user, or None if it already exists."""
        existing = db.query(User).filter(User.username == config.DEFAULT_ADMIN_USERNAME).first()
        if existing:
            return None

        user = UserService.create_user(
            db,
            username=config.DEFAULT_ADMIN_USERNAME,
            password=config.DEFAULT_ADMIN_PASSWORD,
            role=UserRole.ADMIN,
            first_name="Administrador",
            last_name="Sistema",
            email=config.DEFAULT_ADMIN_EMAIL,
        )
        logger.warning(
            f"Created default admin user '{user.username}'. Change its password before production use."
        )
        return user

    @staticmethod
    def _clear_suspension(user: User) -> None:
        user.status = UserStatus.ACTIVE
        user.suspended_until = None
        user.suspended_reason = None
