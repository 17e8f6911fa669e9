"""
Persisted session store. Sessions are keyed by the SHA-256 hash of the
client token and expire a fixed time after issuance.
"""
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from database.models import Session as DBSession
from auth.security import generate_session_key, hash_session_key, session_expiry
from core.utils import local_now
from core.logger import logger


class SessionStore:
    """Create, resolve and destroy session rows. Callers own the transaction."""

    @staticmethod
    def create(
        db: Session,
        user_id: int,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Tuple[str, DBSession]:
        """
        Stage a new session row (flushed, not committed).

        Returns:
            Tuple of (raw session token, DBSession)
        """
        session_key, session_hash = generate_session_key()
        now = local_now()
        record = DBSession(
            sid=session_hash,
            user_id=user_id,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
            expires_at=session_expiry(now),
            created_at=now,
        )
        db.add(record)
        db.flush()
        return session_key, record

    @staticmethod
    def get(db: Session, session_key: str) -> Optional[DBSession]:
        """
        Resolve a raw token to its live session row.
        Expired rows are deleted and reported as absent.
        """
        if not session_key:
            return None
        record = db.get(DBSession, hash_session_key(session_key))
        if record is None:
            return None
        if record.expires_at <= local_now():
            logger.info(f"Session for user {record.user_id} expired")
            db.delete(record)
            db.commit()
            return None
        return record

    @staticmethod
    def get_by_sid(db: Session, sid: str) -> Optional[DBSession]:
        return db.get(DBSession, sid) if sid else None

    @staticmethod
    def is_live(record: Optional[DBSession]) -> bool:
        return record is not None and record.expires_at > local_now()

    @staticmethod
    def destroy(db: Session, sid: str) -> bool:
        """Delete a session row by id (staged, not committed)."""
        deleted = db.query(DBSession).filter(DBSession.sid == sid).delete(synchronize_session=False)
        return deleted > 0

    @staticmethod
    def destroy_for_user(db: Session, user_id: int) -> int:
        """Delete every session row of a user (staged, not committed)."""
        return db.query(DBSession).filter(DBSession.user_id == user_id).delete(synchronize_session=False)

    @staticmethod
    def purge_expired(db: Session) -> int:
        """Delete all expired rows; returns the number removed."""
        removed = db.query(DBSession).filter(DBSession.expires_at <= local_now()).delete(synchronize_session=False)
        db.commit()
        if removed:
            logger.info(f"Purged {removed} expired sessions")
        return removed
