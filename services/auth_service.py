"""
Authentication service: login, logout and session resolution with
single-session-per-account enforcement.
"""
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.models import User, UserStatus, Session as DBSession
from auth.security import verify_password, hash_session_key
from services.session_store import SessionStore
from services.audit_service import AuditService
from core.exceptions import (
    AccountSuspended, InvalidCredentials, SessionConflict, Unauthenticated
)
from core.utils import local_now
from core.logger import logger


class AuthService:
    """Service for authentication operations."""

    @staticmethod
    def login(
        db: Session,
        username: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Tuple[str, DBSession, User]:
        """
        Authenticate and open the account's single session.

        Args:
            db: Database session
            username: Username
            password: Plain text password
            ip_address: Client IP for the session row
            user_agent: Client user agent for the session row

        Returns:
            Tuple of (raw session token, DBSession, User)

        Raises:
            InvalidCredentials: Unknown username or wrong password (same message for both)
            AccountSuspended: Account is suspended
            SessionConflict: Account already holds a live session
        """
        user = db.query(User).filter(User.username == username).first()
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login attempt for username: {username} from {ip_address or 'unknown'}")
            raise InvalidCredentials()

        if user.status == UserStatus.SUSPENDED:
            logger.warning(f"Login attempt for suspended account: {username}")
            raise AccountSuspended()

        try:
            AuthService._release_stale_session(db, user)
            session_key, record = SessionStore.create(
                db, user.id, ip_address=ip_address, user_agent=user_agent
            )
            # Compare-and-set: only succeeds while no other session holds the account
            claimed = db.query(User).filter(
                User.id == user.id,
                User.active_session_id.is_(None)
            ).update(
                {User.active_session_id: record.sid, User.last_login: local_now()},
                synchronize_session=False
            )
            if claimed != 1:
                raise SessionConflict()
            db.commit()
        except IntegrityError:
            # Another login inserted this user's session row first
            db.rollback()
            logger.warning(f"Concurrent login rejected for user: {username}")
            raise SessionConflict()
        except SessionConflict:
            db.rollback()
            logger.warning(f"Login rejected, session already active for user: {username}")
            raise

        db.refresh(user)
        logger.info(f"User logged in: {username} (role: {user.role.value})")
        AuditService.log_activity(db, user.id, "login", f"User {username} logged in")
        return session_key, record, user

    @staticmethod
    def _release_stale_session(db: Session, user: User) -> None:
        """
        Free the account when its recorded session is gone or expired.
        Raises SessionConflict if the recorded session is still live.
        """
        current_sid = user.active_session_id
        if current_sid is None:
            # Rows without a claim on the user can never authenticate
            SessionStore.destroy_for_user(db, user.id)
            db.flush()
            return

        existing = SessionStore.get_by_sid(db, current_sid)
        if SessionStore.is_live(existing):
            raise SessionConflict()

        SessionStore.destroy_for_user(db, user.id)
        db.query(User).filter(
            User.id == user.id,
            User.active_session_id == current_sid
        ).update({User.active_session_id: None}, synchronize_session=False)
        db.flush()
        logger.info(f"Released stale session for user: {user.username}")

    @staticmethod
    def logout(db: Session, session_key: Optional[str]) -> bool:
        """
        Close the session identified by the token. Idempotent.

        Returns:
            True if a session was closed, False if there was nothing to close
        """
        if not session_key:
            return False

        sid = hash_session_key(session_key)
        record = SessionStore.get_by_sid(db, sid)
        if record is None:
            return False

        user_id = record.user_id
        db.query(User).filter(
            User.id == user_id,
            User.active_session_id == sid
        ).update({User.active_session_id: None}, synchronize_session=False)
        SessionStore.destroy(db, sid)
        db.commit()

        logger.info(f"User {user_id} logged out")
        AuditService.log_activity(db, user_id, "logout", "User logged out")
        return True

    @staticmethod
    def current_user(db: Session, session_key: Optional[str]) -> User:
        """
        Resolve a session token to its user.

        Raises:
            Unauthenticated: Missing, unknown, expired or revoked session
        """
        if not session_key:
            raise Unauthenticated()

        record = SessionStore.get(db, session_key)
        if record is None:
            raise Unauthenticated("Session expired or invalid - please log in again")

        user = db.get(User, record.user_id)
        if user is None:
            SessionStore.destroy(db, record.sid)
            db.commit()
            raise Unauthenticated("User not found")

        if user.active_session_id != record.sid:
            SessionStore.destroy(db, record.sid)
            db.commit()
            raise Unauthenticated("Session has been revoked - please log in again")

        if user.status == UserStatus.SUSPENDED:
            AuthService.revoke_sessions(db, user)
            db.commit()
            raise Unauthenticated("Account suspended")

        return user

    @staticmethod
    def revoke_sessions(db: Session, user: User) -> None:
        """Drop the user's live session (staged, caller commits)."""
        SessionStore.destroy_for_user(db, user.id)
        user.active_session_id = None
