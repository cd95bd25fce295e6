"""Urgency tiers and calendar-day helpers shared by the reminder passes."""
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from ..models import NotificationPriority

LOOKAHEAD_DAYS = 7

Clock = Callable[[], datetime]

PRIORITY_RANK = {
    NotificationPriority.LOW: 0,
    NotificationPriority.MEDIUM: 1,
    NotificationPriority.HIGH: 2,
    NotificationPriority.URGENT: 3,
}


def classify_urgency(days_until: int) -> NotificationPriority:
    """Map days until an event to a priority tier.

    One day or less (including today and overdue events) is urgent, up to
    three days is high, anything further out is medium. ``LOW`` is never
    returned here; it only exists as a default for manually created
    notifications.
    """
    if days_until <= 1:
        return NotificationPriority.URGENT
    if days_until <= 3:
        return NotificationPriority.HIGH
    return NotificationPriority.MEDIUM


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def days_until(event_date: datetime, now: datetime) -> int:
    """Calendar days from ``now`` to ``event_date`` (0 for later today)."""
    return (start_of_day(event_date) - start_of_day(now)).days


def reminder_window(now: datetime, lookahead_days: int = LOOKAHEAD_DAYS) -> Tuple[datetime, datetime]:
    """Return ``(start, end)`` covering today through today + lookahead.

    ``start`` is inclusive and ``end`` is exclusive, so callers filter with
    ``start <= date < end``.
    """
    start = start_of_day(now)
    return start, start + timedelta(days=lookahead_days + 1)


def resolve_clock(clock: Optional[Clock] = None) -> Clock:
    return clock or datetime.utcnow
