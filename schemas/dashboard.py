from datetime import datetime
from typing import Optional

from schemas.user import CamelModel


class DashboardStats(CamelModel):
    total_records: int
    active_users: int
    today_searches: int
    today_registrations: int


class ActivityEntry(CamelModel):
    id: int
    user_id: int
    username: Optional[str] = None
    action: str
    description: Optional[str] = None
    created_at: datetime


class DailyActivity(CamelModel):
    day: str  # YYYY-MM-DD
    count: int
