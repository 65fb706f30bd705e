"""
Date parsing helpers shared by the validator and the window classifier.

Nothing in here raises on bad input: an unparseable value is None.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional

from dateutil import parser as date_parser

# Fills in whatever a free-form date leaves out ("March" -> 2001-03-01),
# so the result never depends on today's date
PARSE_DEFAULT = datetime(2001, 1, 1)


def parse_generic_datetime(text: str) -> Optional[datetime]:
    """
    Parse a free-form date string ("Mar 5 2024", "2024/03/05 10:00+02:00").

    Missing parts come from PARSE_DEFAULT. Returns None if dateutil
    cannot make sense of it.
    """
    try:
        return date_parser.parse(text, default=PARSE_DEFAULT)
    except (ValueError, OverflowError):
        return None


def to_utc_date(moment: datetime) -> date:
    """Calendar date of a datetime in UTC. Naive datetimes are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def to_calendar_date(value: date) -> date:
    """Drop the time-of-day from a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_record_date(value: Any) -> Optional[date]:
    """
    Calendar date of a stored record's date field.

    Accepts date/datetime objects and strings. Strings are read as ISO
    first, then with the generic parser.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return to_calendar_date(value)

    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    parsed = parse_generic_datetime(text)
    if parsed is None:
        return None
    return parsed.date()


def format_record_date(value: Any) -> str:
    """
    A stored date as YYYY-MM-DD, for pre-filling the edit form.

    Blank if the stored value is absent or does not parse, so a
    malformed date is never written back as typed.
    """
    day = parse_record_date(value)
    return day.isoformat() if day is not None else ""
