"""
Dashboard aggregations. Everything is recomputed per request from the
detainee, search log and activity log tables.
"""
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from database.models import ActivityLog, Detainee, SearchLog, User
from schemas.dashboard import ActivityEntry, DailyActivity, DashboardStats
from core.utils import day_window
import config


class DashboardService:

    @staticmethod
    def stats(db: Session, now: Optional[datetime] = None) -> DashboardStats:
        """
        Headline counters.

        activeUsers, todaySearches and todayRegistrations count rows inside
        [today 00:00, tomorrow 00:00) in server-local time.
        """
        start, end = day_window(now)

        total_records = db.query(func.count(Detainee.id)).scalar() or 0
        active_users = (
            db.query(func.count(func.distinct(ActivityLog.user_id)))
            .filter(ActivityLog.created_at >= start, ActivityLog.created_at < end)
            .scalar()
        ) or 0
        today_searches = (
            db.query(func.count(SearchLog.id))
            .filter(SearchLog.created_at >= start, SearchLog.created_at < end)
            .scalar()
        ) or 0
        today_registrations = (
            db.query(func.count(Detainee.id))
            .filter(Detainee.created_at >= start, Detainee.created_at < end)
            .scalar()
        ) or 0

        return DashboardStats(
            total_records=total_records,
            active_users=active_users,
            today_searches=today_searches,
            today_registrations=today_registrations,
        )

    @staticmethod
    def recent_activities(db: Session, limit: Optional[int] = None) -> List[ActivityEntry]:
        """Latest activity rows, newest first, with the acting username."""
        rows = (
            db.query(ActivityLog, User.username)
            .outerjoin(User, User.id == ActivityLog.user_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(limit or config.RECENT_ACTIVITY_LIMIT)
            .all()
        )
        return [
            ActivityEntry(
                id=log.id,
                user_id=log.user_id,
                username=username,
                action=log.action,
                description=log.description,
                created_at=log.created_at,
            )
            for log, username in rows
        ]

    @staticmethod
    def weekly_activity(db: Session, now: Optional[datetime] = None) -> List[DailyActivity]:
        """Activity counts per calendar day over the last seven days, oldest first."""
        start, end = day_window(now)
        start = start - timedelta(days=config.WEEKLY_ACTIVITY_DAYS - 1)

        day = func.date(ActivityLog.created_at)
        rows = (
            db.query(day.label("day"), func.count(ActivityLog.id).label("count"))
            .filter(ActivityLog.created_at >= start, ActivityLog.created_at < end)
            .group_by(day)
            .order_by(day)
            .all()
        )
        # date() yields a date on PostgreSQL and a string on SQLite
        return [DailyActivity(day=str(row.day), count=row.count) for row in rows]
