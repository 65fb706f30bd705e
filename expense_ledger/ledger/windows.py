"""
Date Window Classifier

Decides whether a record's date falls in the selected time window.

Comparisons are on calendar dates only, so a record never flips in or
out of a window depending on the time of day.
"""

from datetime import date, timedelta
from typing import Any, Union

from expense_ledger.ledger.dates import parse_record_date, to_calendar_date
from expense_ledger.models.expense import TimeWindow

# Today plus the six days before it
WEEK_LOOKBACK_DAYS = 6


def week_start(now: date) -> date:
    """First calendar day of the trailing week window."""
    return to_calendar_date(now) - timedelta(days=WEEK_LOOKBACK_DAYS)


def in_window(
    record_date: Any,
    window: Union[TimeWindow, str],
    now: date,
) -> bool:
    """
    Is a record dated record_date visible in window, as seen on now?

    - ALL: always.
    - WEEK: on or after now - 6 days. Future dates are included,
      there is no upper bound.
    - MONTH: same calendar year and month as now.

    Records with an absent or unparseable date are only visible in ALL.
    """
    window = TimeWindow(window)
    if window == TimeWindow.ALL:
        return True

    day = parse_record_date(record_date)
    if day is None:
        return False

    today = to_calendar_date(now)
    if window == TimeWindow.WEEK:
        return day >= week_start(today)
    return day.year == today.year and day.month == today.month
