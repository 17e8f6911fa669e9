"""
Audit logging service: activity trail and search history.

Audit rows are written after the primary operation has committed. A failed
audit write is logged and rolled back; it never fails the request.
"""
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.models import ActivityLog, SearchLog
from core.logger import logger


class AuditService:
    """Service for audit logging."""

    @staticmethod
    def log_activity(
        db: Session,
        user_id: int,
        action: str,
        description: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """
        Append an activity row.

        Args:
            db: Database session
            user_id: Acting user ID
            action: Action tag (e.g., "login", "registration", "create_user")
            description: Human-readable detail

        Returns:
            Created ActivityLog, or None if the write failed
        """
        activity = ActivityLog(user_id=user_id, action=action, description=description)
        try:
            db.add(activity)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to write activity log ({action}) for user {user_id}: {e}")
            return None
        return activity

    @staticmethod
    def log_search(
        db: Session,
        user_id: int,
        search_term: str,
        results_count: int
    ) -> Optional[SearchLog]:
        """
        Append a search history row.

        Args:
            db: Database session
            user_id: Searching user ID
            search_term: Serialized search criteria
            results_count: Number of records returned

        Returns:
            Created SearchLog, or None if the write failed
        """
        entry = SearchLog(user_id=user_id, search_term=search_term[:500], results_count=results_count)
        try:
            db.add(entry)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to write search log for user {user_id}: {e}")
            return None
        return entry
