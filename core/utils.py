from datetime import datetime, timedelta
from typing import Tuple


def local_now() -> datetime:
    """Naive server-local timestamp used for every stored datetime."""
    return datetime.now()


def day_window(now: datetime = None) -> Tuple[datetime, datetime]:
    """
    Return [today 00:00, tomorrow 00:00) in server-local time.
    """
    now = now or local_now()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)
