"""
Read leave details out of a task's loosely-typed custom fields.

This is the only module that interprets raw field values. Everything it
returns is already typed: names are strings, dates are aware datetimes in
the operating timezone, day counts are non-negative integers.
"""
import logging
import math
from datetime import datetime

from leave_core.model_schema import (
    CustomFieldBase,
    DateField,
    DateWindow,
    EmployeeOnLeave,
    LeavePeriod,
    LeaveRecord,
    MultiSelectField,
    SingleSelectField,
    is_set,
    parse_timestamp_ms,
)
from leave_core.timezone_util import as_utc, format_date, safe_from_timestamp_ms

logger = logging.getLogger(__name__)

DEFAULT_LEAVE_TYPE = "Leave"
UNKNOWN_PERSON = "Unknown"
MS_PER_DAY = 24 * 60 * 60 * 1000


def _field_instant(record: LeaveRecord, field: CustomFieldBase) -> datetime | None:
    ms = parse_timestamp_ms(field.value)
    if ms is None:
        logger.warning("task %s: field %r has no readable timestamp (%r)", record.id, field.name, field.value)
        return None
    return safe_from_timestamp_ms(ms)


def person_name(record: LeaveRecord) -> str:
    title = record.name.strip()
    if title:
        return title
    if record.creator:
        return record.creator
    for field in record.custom_fields:
        if field.name_contains("name") and is_set(field.value):
            return str(field.value)
    return UNKNOWN_PERSON


def _leave_type(field: SingleSelectField, current: str) -> str:
    if field.options:
        opt = field.selected_option()
        if opt is not None and opt.display:
            return opt.display
    return str(field.value) if field.value is not None else current


def leave_period(record: LeaveRecord) -> LeavePeriod:
    """
    Leave type and from/to dates of a task.

    Custom "from"/"to" fields win over the task's own start/due dates. When
    only one boundary is known the other mirrors it, so a single-day leave
    has identical from and to dates.
    """
    leave_type = DEFAULT_LEAVE_TYPE
    from_date = None
    to_date = None

    for field in record.custom_fields:
        if isinstance(field, SingleSelectField) and field.name_contains("type"):
            leave_type = _leave_type(field, leave_type)
        elif field.name_contains("from") and is_set(field.value):
            from_date = _field_instant(record, field) or from_date
        elif field.name_contains("to") and is_set(field.value):
            to_date = _field_instant(record, field) or to_date

    if from_date is None:
        from_date = safe_from_timestamp_ms(record.start_date)
    if to_date is None:
        to_date = safe_from_timestamp_ms(record.due_date)
    if from_date is None:
        from_date = to_date
    if to_date is None:
        to_date = from_date

    return LeavePeriod(leave_type=leave_type, from_date=from_date, to_date=to_date)


def matches_window(record: LeaveRecord, window: DateWindow) -> bool:
    """
    True when any date source of the task falls in the window.

    Sources: the due date; a start..due span that overlaps the window when
    the due date lies after it; any date-typed custom field. A task with
    several date fields can match several windows at once.
    """
    due = safe_from_timestamp_ms(record.due_date)
    if due is not None:
        if window.contains(due):
            return True
        start = safe_from_timestamp_ms(record.start_date)
        if start is not None and as_utc(due) > as_utc(window.end) and as_utc(start) <= as_utc(window.end):
            return True

    for field in record.custom_fields:
        if isinstance(field, DateField) and is_set(field.value):
            when = _field_instant(record, field)
            if when is not None and window.contains(when):
                return True
    return False


def days_in_month(
    from_date: datetime | None,
    to_date: datetime | None,
    month_start: datetime,
    month_end: datetime,
) -> int:
    """Inclusive number of leave days inside the month, 0 when the period misses it."""
    if from_date is None or to_date is None:
        return 0
    start = max(as_utc(from_date), as_utc(month_start))
    end = min(as_utc(to_date), as_utc(month_end))
    if start > end:
        return 0
    span_ms = (end - start).total_seconds() * 1000
    # rounds half up
    return math.floor(span_ms / MS_PER_DAY + 0.5) + 1


def leave_reason(record: LeaveRecord) -> str:
    reason = ""
    for field in record.custom_fields:
        if field.name_contains("reason"):
            reason = str(field.value) if is_set(field.value) else ""
    return reason


def render_field_value(field: CustomFieldBase) -> str:
    """Human-readable value of a custom field, empty string when unset."""
    if isinstance(field, MultiSelectField) and isinstance(field.value, list) and field.value:
        return ", ".join(field.selected_labels())
    if isinstance(field, SingleSelectField) and field.value is not None:
        opt = field.selected_option()
        return opt.display if opt is not None and opt.display else str(field.value)
    if isinstance(field, DateField) and is_set(field.value):
        ms = parse_timestamp_ms(field.value)
        when = safe_from_timestamp_ms(ms)
        return format_date(when) if when is not None else str(field.value)
    if field.value is not None and field.value != "" and not isinstance(field.value, (list, dict)):
        return str(field.value)
    return ""


def describe_record(record: LeaveRecord) -> EmployeeOnLeave:
    period = leave_period(record)
    return EmployeeOnLeave(
        employee=person_name(record),
        leave_type=period.leave_type,
        from_date=format_date(period.from_date),
        to_date=format_date(period.to_date),
        reason=leave_reason(record),
        task_url=record.url,
        task_name=record.name,
    )
