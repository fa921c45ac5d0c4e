from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from leave_core.errors import LeaveNotifierError
from leave_core.log_config import configure_logging
from leave_core.settings import settings
from leave_core.timezone_util import current_date_parts, day_window, now_local
from notifier_app.leave_service import LeaveService, get_leave_service

configure_logging(settings.log_level)

app = FastAPI(title="Leave Notifier", version="0.1.0")


def _stamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.exception_handler(LeaveNotifierError)
async def notifier_error_handler(request: Request, exc: LeaveNotifierError):
    return JSONResponse(
        status_code=exc.http_code,
        content={"success": False, "error": exc.message, "details": exc.details, "timestamp": _stamp()},
    )


@app.get("/health")
def health():
    return {"status": "OK", "timestamp": _stamp()}


@app.get("/ping")
def ping():
    return {"status": "AWAKE", "timestamp": _stamp(), "message": "App is active and ready for scheduled tasks"}


@app.get("/check-now")
async def check_now(service: LeaveService = Depends(get_leave_service)):
    result = await service.check_new_requests()
    return {"success": True, **result.model_dump(mode="json", by_alias=True), "timestamp": _stamp()}


@app.get("/test-daily-summary")
async def test_daily_summary(date: str | None = None, service: LeaveService = Depends(get_leave_service)):
    result = await service.daily_summary(date or None)
    target = date or "today"
    message = (
        f"Nobody on leave {target}; daily summary not sent"
        if result.skipped
        else f"Daily summary sent for {target}"
    )
    return {"success": True, "message": message, **result.model_dump(mode="json", by_alias=True)}


@app.get("/test-weekly-summary")
async def test_weekly_summary(
    date: str | None = None,
    weeks_ago: int | None = Query(None, alias="weeksAgo", ge=0),
    service: LeaveService = Depends(get_leave_service),
):
    """Use ?date=YYYY-MM-DD for the week containing that date, or ?weeksAgo=0|1|2..."""
    result = await service.weekly_summary(date=(date or "").strip() or None, weeks_ago=weeks_ago)
    return {
        "success": True,
        "message": f"Weekly summary sent for {result.week_label}",
        **result.model_dump(mode="json", by_alias=True),
    }


@app.get("/test-monthly-summary")
async def test_monthly_summary(service: LeaveService = Depends(get_leave_service)):
    result = await service.monthly_summary()
    message = "Nobody on leave this month; summary not sent" if result.skipped else "Monthly summary sent"
    return {"success": True, "message": message, **result.model_dump(mode="json", by_alias=True)}


@app.get("/check-leave-on-date/{date}")
async def check_leave_on_date(date: str, service: LeaveService = Depends(get_leave_service)):
    result = await service.employees_on_leave(date)
    return {
        "success": True,
        "message": f"Found {result.count} employee(s) on leave on {result.date}",
        **result.model_dump(mode="json", by_alias=True),
    }


@app.get("/squad-next-week")
async def squad_next_week(
    weeks_ahead: int = Query(1, alias="weeksAhead", ge=1),
    service: LeaveService = Depends(get_leave_service),
):
    """Preview only; nothing is posted to the webhook."""
    result = await service.squad_preview(weeks_ahead)
    message = (
        f"Squad for week {weeks_ahead}: {', '.join(result.squads)}"
        if result.squads
        else "No squad assigned for that week in Work Calendar."
    )
    return {"success": True, "message": message, **result.model_dump(mode="json", by_alias=True)}


@app.get("/test-squad-notification")
async def test_squad_notification(
    weeks_ahead: int = Query(1, alias="weeksAhead", ge=1),
    service: LeaveService = Depends(get_leave_service),
):
    result = await service.squad_notification(weeks_ahead)
    message = (
        "No squad assigned for that week; notification not sent"
        if result.skipped
        else f"Squad-on-week notification sent (weeksAhead={weeks_ahead})"
    )
    return {"success": True, "message": message, **result.model_dump(mode="json", by_alias=True)}


@app.get("/find-lists")
async def find_lists(service: LeaveService = Depends(get_leave_service)):
    hierarchy = await service.find_lists()
    return {
        "success": True,
        "message": f"Found {len(hierarchy.lists)} lists in workspace",
        **hierarchy.model_dump(mode="json", by_alias=True),
    }


@app.get("/find-by-name")
async def find_by_name(q: str | None = None, service: LeaveService = Depends(get_leave_service)):
    result = await service.find_by_name(q)
    total = len(result.lists) + len(result.folders) + len(result.spaces)
    return {
        "success": True,
        "message": f'Found {total} match(es) for "{result.search}"',
        **result.model_dump(mode="json", by_alias=True),
    }


@app.get("/debug-timezone")
def debug_timezone():
    local = now_local()
    today = day_window(current_date_parts(local))
    return {
        "success": True,
        "timezone": settings.timezone,
        "serverTimeUtc": _stamp(),
        "localTime": local.strftime("%Y-%m-%d %H:%M:%S"),
        "startOfToday": today.start.isoformat(),
        "endOfToday": today.end.isoformat(),
    }
