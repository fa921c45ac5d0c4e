from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest

from leave_core.clickup_client import ClickUpClient
from leave_core.model_schema import LeaveRecord
from leave_core.webhook_outbox import WebhookOutbox
from notifier_app.leave_service import LeaveService

TZ = ZoneInfo("Asia/Colombo")
LEAVE_LIST = "123"
CALENDAR_LIST = "777"
# a Friday
NOW = datetime(2024, 3, 15, 10, 0, tzinfo=TZ)


def ms(year, month, day, hour=0, minute=0) -> int:
    return int(datetime(year, month, day, hour, minute, tzinfo=TZ).timestamp() * 1000)


def make_task(
    task_id="t1",
    name="Jane Doe",
    due=None,
    start=None,
    created=None,
    list_id=LEAVE_LIST,
    list_name="Leave Requests",
    creator="jane",
    custom_fields=None,
    url=None,
) -> dict:
    task = {
        "id": task_id,
        "name": name,
        "creator": {"username": creator} if creator else None,
        "list": {"id": list_id, "name": list_name},
        "custom_fields": custom_fields or [],
    }
    if due is not None:
        task["due_date"] = str(due)
    if start is not None:
        task["start_date"] = str(start)
    if created is not None:
        task["date_created"] = str(created)
    if url is not None:
        task["url"] = url
    return task


def make_record(**kwargs) -> LeaveRecord:
    return LeaveRecord.from_api(make_task(**kwargs))


def make_service(tasks=None, calendar_tasks=None, clock=None, clickup_error=None) -> LeaveService:
    clickup = MagicMock(spec=ClickUpClient)
    clickup.is_configured.return_value = True

    async def list_tasks(list_id, **kwargs):
        if clickup_error is not None:
            raise clickup_error
        raw = calendar_tasks if list_id == CALENDAR_LIST else tasks
        return [LeaveRecord.from_api(t) for t in raw or []]

    clickup.list_tasks = AsyncMock(side_effect=list_tasks)

    outbox = MagicMock(spec=WebhookOutbox)
    outbox.is_configured.return_value = True
    outbox.post = AsyncMock()

    return LeaveService(
        clickup,
        outbox,
        leave_list_id=LEAVE_LIST,
        work_calendar_list_id=CALENDAR_LIST,
        workspace_id="ws1",
        clock=clock or (lambda: NOW),
    )


@pytest.fixture
def service_factory():
    return make_service
