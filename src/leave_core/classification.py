"""
Decide whether a fetched task is a leave-form submission.

The tracker has no structural marker for "this came from the leave form",
so the check is a keyword heuristic. Rules are tried in order and the first
match wins:

1. the task lives in the configured leave list;
2. its list name mentions a leave/HR keyword;
3. its own name mentions a leave keyword.
"""
from datetime import datetime, timedelta

from leave_core.model_schema import LeaveRecord
from leave_core.timezone_util import as_utc, safe_from_timestamp_ms

FORM_LIST_KEYWORDS = (
    "form", "leave", "vacation", "sick", "time off", "pto", "holiday",
    "hr", "human resources", "request", "submission",
)
FORM_TASK_KEYWORDS = (
    "form", "submission", "leave", "vacation", "sick", "time off", "pto",
    "holiday", "request",
)


def _mentions_any(text: str | None, keywords) -> bool:
    lowered = (text or "").lower()
    return any(k in lowered for k in keywords)


def is_leave_form_task(record: LeaveRecord, leave_list_id: str | None) -> bool:
    if leave_list_id is not None and record.list_id == leave_list_id:
        return True
    if _mentions_any(record.list_name, FORM_LIST_KEYWORDS):
        return True
    return _mentions_any(record.name, FORM_TASK_KEYWORDS)


def is_recent(record: LeaveRecord, now: datetime, lookback: timedelta) -> bool:
    """
    Created after ``now - lookback``. A task without a creation time counts
    as just created; one whose creation time cannot be read is not recent.
    """
    if record.date_created is None:
        return True
    created = safe_from_timestamp_ms(record.date_created)
    if created is None:
        return False
    return as_utc(created) > as_utc(now) - lookback
