from fastmcp import FastMCP

from leave_core.log_config import configure_logging
from leave_core.settings import settings
from notifier_app.leave_service import get_leave_service

mcp = FastMCP(name="leave-notifier-mcp-server")


@mcp.tool
async def employees_on_leave(date: str) -> dict:
    """
    Who is on leave on a given day. Read-only, nothing is posted.
    Date must be YYYY-MM-DD.
    """
    result = await get_leave_service().employees_on_leave(date)
    return result.model_dump(mode="json", by_alias=True)


@mcp.tool
async def squad_for_week(weeks_ahead: int = 1) -> dict:
    """Squads on the Work Calendar for a future week (1 = next week). Read-only."""
    result = await get_leave_service().squad_preview(weeks_ahead)
    return result.model_dump(mode="json", by_alias=True)


@mcp.tool
async def check_new_requests() -> dict:
    """Announce leave requests created in the last hours that were not announced yet."""
    result = await get_leave_service().check_new_requests()
    return result.model_dump(mode="json", by_alias=True)


@mcp.tool
async def send_daily_summary(date: str | None = None) -> dict:
    """Post the daily leave report for today or for a YYYY-MM-DD date."""
    result = await get_leave_service().daily_summary(date)
    return result.model_dump(mode="json", by_alias=True)


@mcp.tool
async def send_weekly_summary(date: str | None = None, weeks_ago: int | None = None) -> dict:
    """Post the business-week summary for the week of `date`, or `weeks_ago` weeks back."""
    result = await get_leave_service().weekly_summary(date=date, weeks_ago=weeks_ago)
    return result.model_dump(mode="json", by_alias=True)


@mcp.tool
async def send_monthly_summary() -> dict:
    """Post this month's leave overview grouped per person."""
    result = await get_leave_service().monthly_summary()
    return result.model_dump(mode="json", by_alias=True)


@mcp.tool
async def send_squad_notification(weeks_ahead: int = 1) -> dict:
    """Post which squad is on for a future week."""
    result = await get_leave_service().squad_notification(weeks_ahead)
    return result.model_dump(mode="json", by_alias=True)


@mcp.tool
async def find_lists_by_name(search: str = "work calendar") -> dict:
    """Find spaces, folders and lists in the workspace by (partial) name."""
    result = await get_leave_service().find_by_name(search)
    return result.model_dump(mode="json", by_alias=True)


def main():
    configure_logging(settings.log_level)
    mcp.run(
        transport="sse",
        host=settings.mcp_host,
        port=settings.mcp_port,
        path=settings.mcp_path,
    )


if __name__ == "__main__":
    main()
