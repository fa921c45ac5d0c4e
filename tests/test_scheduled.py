import asyncio
import json

from conftest import CALENDAR_LIST, make_service, make_task, ms
from leave_core.errors import DeliveryError, UpstreamError
from notifier_app.scheduled import run_schedule


def _run(event, service):
    response = asyncio.run(run_schedule(event, service))
    return response["statusCode"], json.loads(response["body"])


def test_missing_schedule_runs_daily_summary():
    service = make_service(tasks=[make_task(due=ms(2024, 3, 15, 9))])
    status, body = _run({}, service)
    assert status == 200
    assert body == {"ok": True, "schedule": "daily", "count": 1, "skipped": False, "date": None}


def test_schedule_read_from_event_detail():
    service = make_service(tasks=[])
    status, body = _run({"detail": {"scheduleType": "weekly", "weeksAgo": 1}}, service)
    assert status == 200
    assert body["schedule"] == "weekly"
    assert body["weekLabel"] == "Last Week"
    assert body["weekStart"].startswith("2024-03-04T00:00:00")


def test_squad_schedule_defaults_to_next_week():
    calendar = [make_task(task_id="s1", name="Squad Alpha", list_id=CALENDAR_LIST, due=ms(2024, 3, 20, 9))]
    service = make_service(calendar_tasks=calendar)
    status, body = _run({"schedule": "squad_weekly"}, service)
    assert status == 200
    assert body["squads"] == ["Squad Alpha"] and body["weeksAhead"] == 1
    assert service.outbox.post.await_count == 1


def test_monthly_and_check_new_dispatch():
    service = make_service(tasks=[make_task(task_id="a", name="Leave", due=ms(2024, 3, 5), created=ms(2024, 3, 15, 9))])
    assert _run({"schedule": "monthly"}, service)[1]["count"] == 1
    status, body = _run({"schedule": "check_new"}, service)
    assert status == 200 and body["newCount"] == 1
    assert body["tasks"] == [{"name": "Leave", "creator": "jane"}]


def test_unknown_schedule_is_rejected():
    service = make_service()
    status, body = _run({"schedule": "hourly"}, service)
    assert status == 400
    assert body == {"error": "Unknown schedule", "received": "hourly"}
    service.clickup.list_tasks.assert_not_awaited()


def test_notifier_errors_map_to_their_status():
    service = make_service(clickup_error=UpstreamError("ClickUp answered 500", {"status_code": 500}))
    status, body = _run({"schedule": "monthly"}, service)
    assert status == 502
    assert body["ok"] is False and body["status_code"] == 500

    service = make_service(tasks=[make_task(due=ms(2024, 3, 15, 9))])
    service.outbox.post.side_effect = DeliveryError("webhook unreachable")
    assert _run({"schedule": "daily"}, service)[0] == 502


def test_unexpected_errors_become_500(caplog):
    service = make_service()
    service.clickup.list_tasks.side_effect = RuntimeError("boom")
    status, body = _run({"schedule": "daily"}, service)
    assert status == 500 and body["error"] == "boom"
    assert "crashed" in caplog.text
