from datetime import datetime, timedelta

import pytest

from lawdesk.models import NotificationPriority
from lawdesk.services.urgency import (
    LOOKAHEAD_DAYS,
    PRIORITY_RANK,
    classify_urgency,
    days_until,
    reminder_window,
    resolve_clock,
)

NOW = datetime(2024, 3, 11, 10, 30)


@pytest.mark.parametrize(
    "days, expected",
    [
        (-2, NotificationPriority.URGENT),
        (0, NotificationPriority.URGENT),
        (1, NotificationPriority.URGENT),
        (2, NotificationPriority.HIGH),
        (3, NotificationPriority.HIGH),
        (4, NotificationPriority.MEDIUM),
        (7, NotificationPriority.MEDIUM),
    ],
)
def test_classify_urgency_thresholds(days, expected):
    assert classify_urgency(days) == expected


def test_classify_urgency_never_escalates_with_more_time():
    ranks = [PRIORITY_RANK[classify_urgency(days)] for days in range(-1, 10)]
    assert ranks == sorted(ranks, reverse=True)


def test_classify_urgency_never_returns_low():
    assert all(classify_urgency(days) != NotificationPriority.LOW for days in range(-5, 30))


def test_days_until_counts_calendar_days():
    assert days_until(datetime(2024, 3, 11, 23, 59), NOW) == 0
    assert days_until(datetime(2024, 3, 11, 8, 0), NOW) == 0
    assert days_until(datetime(2024, 3, 12, 0, 0), NOW) == 1
    assert days_until(datetime(2024, 3, 18, 9, 0), NOW) == 7


def test_reminder_window_covers_today_through_lookahead():
    start, end = reminder_window(NOW)

    assert start == datetime(2024, 3, 11)
    assert end == datetime(2024, 3, 11) + timedelta(days=LOOKAHEAD_DAYS + 1)

    last_included = datetime(2024, 3, 18, 23, 59)
    first_excluded = datetime(2024, 3, 19, 0, 0)
    assert start <= last_included < end
    assert not first_excluded < end


def test_reminder_window_includes_earlier_today():
    start, _ = reminder_window(NOW)
    assert start <= datetime(2024, 3, 11, 9, 0)


def test_resolve_clock_prefers_injected_clock():
    clock = resolve_clock(lambda: NOW)
    assert clock() == NOW
    assert resolve_clock(None)() <= datetime.utcnow()


def test_days_until_ignores_time_of_day():
    early_morning = datetime(2024, 3, 11, 8, 0)

    # 25 hours ahead is still "tomorrow"
    assert days_until(datetime(2024, 3, 12, 9, 0), early_morning) == 1
    assert classify_urgency(days_until(datetime(2024, 3, 12, 9, 0), early_morning)) == NotificationPriority.URGENT
    assert days_until(datetime(2024, 3, 12, 7, 0), early_morning) == 1
    assert days_until(datetime(2024, 3, 14, 23, 0), early_morning) == 3
