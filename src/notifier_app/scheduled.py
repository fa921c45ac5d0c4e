"""
Entry point for timer-driven runs (EventBridge, cron, Cloud Scheduler...).

The event names one schedule; the handler runs it to completion and
reports the outcome as a ``statusCode``/``body`` pair; failures become
an error status rather than an exception.

    {"schedule": "daily"}                      today's leave
    {"schedule": "weekly", "weeksAgo": 1}      last week's business week
    {"schedule": "monthly"}                    this month, per person
    {"schedule": "squad_weekly", "weeksAhead": 1}
    {"schedule": "check_new"}                  new requests of the last 2h
"""
import asyncio
import json
import logging
from typing import Any, Dict

from leave_core.errors import LeaveNotifierError
from leave_core.log_config import configure_logging
from leave_core.settings import settings
from notifier_app.leave_service import LeaveService, get_leave_service

logger = logging.getLogger(__name__)


def _event_value(event: Dict[str, Any], key: str) -> Any:
    detail = event.get("detail") if isinstance(event.get("detail"), dict) else {}
    return event.get(key, detail.get(key))


def _non_negative_int(value: Any) -> int | None:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def _response(status: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {"statusCode": status, "body": json.dumps(body, default=str)}


async def run_schedule(event: Dict[str, Any], service: LeaveService) -> Dict[str, Any]:
    schedule = _event_value(event, "schedule") or _event_value(event, "scheduleType")
    try:
        if schedule == "squad_weekly":
            weeks_ahead = _non_negative_int(_event_value(event, "weeksAhead")) or 1
            logger.info("scheduled run: squad notice (weeksAhead=%d)", weeks_ahead)
            result = await service.squad_notification(weeks_ahead)
        elif schedule == "weekly":
            weeks_ago = _non_negative_int(_event_value(event, "weeksAgo"))
            logger.info("scheduled run: weekly summary (weeksAgo=%s)", weeks_ago)
            result = await service.weekly_summary(weeks_ago=weeks_ago)
        elif schedule == "monthly":
            logger.info("scheduled run: monthly summary")
            result = await service.monthly_summary()
        elif schedule == "check_new":
            logger.info("scheduled run: new leave requests")
            result = await service.check_new_requests()
        elif schedule in ("daily", None):
            logger.info("scheduled run: daily summary")
            result = await service.daily_summary()
        else:
            return _response(400, {"error": "Unknown schedule", "received": schedule})
    except LeaveNotifierError as e:
        logger.error("scheduled run %s failed: %s", schedule, e.message)
        return _response(e.http_code, {"ok": False, "schedule": schedule, "error": e.message, **e.details})
    except Exception as e:
        logger.exception("scheduled run %s crashed", schedule)
        return _response(500, {"ok": False, "schedule": schedule, "error": str(e)})

    return _response(
        200,
        {"ok": True, "schedule": schedule or "daily", **result.model_dump(mode="json", by_alias=True)},
    )


def handler(event: Dict[str, Any] | None = None, context: Any = None) -> Dict[str, Any]:
    configure_logging(settings.log_level)
    return asyncio.run(run_schedule(event or {}, get_leave_service()))
