"""
Date windows computed in one fixed timezone.

Every "today", day, week and month boundary is resolved against
``settings.timezone``, never the host zone.

Windows are closed intervals: ``start`` is local 00:00:00.000 of the first
day and ``end`` is local 23:59:59.999 of the last day.
"""
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from leave_core.errors import InvalidDateFormat
from leave_core.model_schema import DateWindow
from leave_core.settings import settings

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

DAY_START = time(0, 0, 0, 0)
DAY_END = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class DateParts:
    year: int
    month: int      # 1-12
    day: int
    weekday: int = 0  # 0 = Monday
    hour: int = 0
    minute: int = 0
    second: int = 0

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)


def get_zone(name: str | None = None) -> ZoneInfo:
    return ZoneInfo(name or settings.timezone)


def now_local() -> datetime:
    return datetime.now(get_zone())


def current_date_parts(now: datetime | None = None) -> DateParts:
    t = (now or now_local()).astimezone(get_zone())
    return DateParts(
        year=t.year,
        month=t.month,
        day=t.day,
        weekday=t.weekday(),
        hour=t.hour,
        minute=t.minute,
        second=t.second,
    )


def parse_date(value: str) -> datetime:
    """
    Parse a strict ``YYYY-MM-DD`` string into local midnight.

    Raises InvalidDateFormat for anything else, including impossible
    calendar dates such as 2023-02-29.
    """
    m = _ISO_DATE_RE.match((value or "").strip())
    if not m:
        raise InvalidDateFormat(value)
    try:
        d = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        raise InvalidDateFormat(value) from None
    return _local(d, DAY_START)


def from_timestamp_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=get_zone())


def safe_from_timestamp_ms(ms: int | None) -> datetime | None:
    """``from_timestamp_ms`` that returns None (and logs) for a missing or out-of-range value."""
    if ms is None:
        return None
    try:
        return from_timestamp_ms(ms)
    except (OverflowError, OSError, ValueError):
        logger.warning("ignoring out-of-range timestamp %r", ms)
        return None


def as_utc(dt: datetime) -> datetime:
    # same-tzinfo datetimes compare by wall clock, even across a DST change
    return dt.astimezone(timezone.utc)


def _local(d: date, t: time) -> datetime:
    return datetime.combine(d, t, tzinfo=get_zone())


def _window(first: date, last: date) -> DateWindow:
    return DateWindow(start=_local(first, DAY_START), end=_local(last, DAY_END))


def _as_date(parts) -> date:
    if isinstance(parts, datetime):
        return parts.astimezone(get_zone()).date()
    if isinstance(parts, date):
        return parts
    return date(parts.year, parts.month, parts.day)


def _monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())


def day_window(parts) -> DateWindow:
    d = _as_date(parts)
    return _window(d, d)


def month_window(parts) -> DateWindow:
    d = _as_date(parts)
    first = d.replace(day=1)
    # day 0 of the following month
    next_first = (first + timedelta(days=32)).replace(day=1)
    return _window(first, next_first - timedelta(days=1))


def week_window(parts) -> DateWindow:
    """Monday 00:00 through Friday 23:59:59.999 of the week containing the date."""
    monday = _monday_of(_as_date(parts))
    return _window(monday, monday + timedelta(days=4))


def week_window_by_offset(parts, weeks_ahead: int = 1) -> DateWindow:
    """Monday through Sunday of the week ``weeks_ahead`` weeks after the current one."""
    weeks_ahead = max(1, int(weeks_ahead))
    monday = _monday_of(_as_date(parts)) + timedelta(weeks=weeks_ahead)
    return _window(monday, monday + timedelta(days=6))


def week_window_by_weeks_ago(parts, weeks_ago: int = 0) -> DateWindow:
    """Business week ``weeks_ago`` weeks back; 0 is the current week."""
    weeks_ago = max(0, int(weeks_ago))
    return week_window(_as_date(parts) - timedelta(weeks=weeks_ago))


def format_date(dt: datetime | None) -> str:
    if dt is None:
        return ""
    local = dt.astimezone(get_zone())
    return f"{local.month}/{local.day}/{local.year}"


def format_short_date(dt: datetime | None) -> str:
    if dt is None:
        return ""
    local = dt.astimezone(get_zone())
    return f"{local.strftime('%b')} {local.day}, {local.year}"


def format_time(dt: datetime) -> str:
    return dt.astimezone(get_zone()).strftime("%I:%M:%S %p").lstrip("0")


def format_week_label(start: datetime, end: datetime) -> str:
    return f"{format_short_date(start)} – {format_short_date(end)}"


def month_name(parts) -> str:
    return _as_date(parts).strftime("%B")
