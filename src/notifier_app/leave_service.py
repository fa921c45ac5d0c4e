import logging
from datetime import datetime, timedelta
from typing import Callable

from leave_core.classification import is_leave_form_task, is_recent
from leave_core.clickup_client import ClickUpClient
from leave_core.errors import AuthError, ConfigError, InputValidationError, UpstreamError
from leave_core.extraction import describe_record, matches_window
from leave_core.formatting import (
    daily_summary_embed,
    monthly_summary_embed,
    new_request_embed,
    squad_embed,
    webhook_payload,
    weekly_summary_embed,
)
from leave_core.model_schema import (
    CheckNewResult,
    DateWindow,
    EmployeesOnLeaveResult,
    LeaveRecord,
    ListHierarchy,
    NameSearchResult,
    SquadResult,
    SummaryResult,
    TaskSummary,
    WeeklySummaryResult,
)
from leave_core.settings import Settings, settings
from leave_core.timezone_util import (
    current_date_parts,
    day_window,
    format_week_label,
    month_name,
    month_window,
    now_local,
    parse_date,
    week_window,
    week_window_by_offset,
    week_window_by_weeks_ago,
)
from leave_core.webhook_outbox import WebhookOutbox

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_TERM = "work calendar"


def weeks_ago_label(weeks_ago: int) -> str:
    if weeks_ago == 0:
        return "This Week"
    if weeks_ago == 1:
        return "Last Week"
    return f"{weeks_ago} Weeks Ago"


class LeaveService:
    """
    One method per scheduled or manual run.

    Runs are independent; the only state kept between them is
    ``notified_ids``, the tasks already announced by ``check_new_requests``
    in this process.
    """

    def __init__(
        self,
        clickup: ClickUpClient,
        outbox: WebhookOutbox,
        leave_list_id: str | None,
        work_calendar_list_id: str | None = None,
        workspace_id: str | None = None,
        lookback: timedelta = timedelta(hours=2),
        fetch_limit: int = 100,
        clock: Callable[[], datetime] = now_local,
    ):
        self.clickup = clickup
        self.outbox = outbox
        self.leave_list_id = leave_list_id
        self.work_calendar_list_id = work_calendar_list_id
        self.workspace_id = workspace_id
        self.lookback = lookback
        self.fetch_limit = fetch_limit
        self.clock = clock
        self.notified_ids: set[str] = set()

    # -----------------------------
    # configuration guards
    # -----------------------------
    def _require_tracker(self) -> None:
        if not self.clickup.is_configured():
            raise AuthError("ClickUp API token not configured")

    def _require_webhook(self) -> None:
        if not self.outbox.is_configured():
            raise ConfigError("Discord webhook URL not configured")

    def _leave_list(self) -> str:
        if not self.leave_list_id:
            raise ConfigError("LEAVE_LIST_ID not configured")
        return self.leave_list_id

    def _work_calendar_list(self) -> str:
        if not self.work_calendar_list_id:
            raise ConfigError("WORK_CALENDAR_LIST_ID not configured")
        return self.work_calendar_list_id

    def _workspace(self) -> str:
        if not self.workspace_id:
            raise ConfigError("CLICKUP_WORKSPACE_ID not configured")
        return self.workspace_id

    async def _records_in(self, window: DateWindow, list_id: str | None = None) -> list[LeaveRecord]:
        records = await self.clickup.list_tasks(list_id or self._leave_list(), include_closed=True)
        return [r for r in records if matches_window(r, window)]

    # -----------------------------
    # runs
    # -----------------------------
    async def check_new_requests(self) -> CheckNewResult:
        """
        Announce leave-form tasks created within the lookback window that
        were not announced before. An unreachable tracker yields an empty
        result instead of failing the run.
        """
        self._require_tracker()
        self._require_webhook()
        list_id = self._leave_list()
        try:
            records = await self.clickup.list_tasks(
                list_id, include_closed=True, limit=self.fetch_limit, order_by="created", reverse=True
            )
        except UpstreamError:
            logger.exception("check-new: could not fetch tasks from list %s", list_id)
            return CheckNewResult(new_count=0)

        now = self.clock()
        fresh = [
            r for r in records
            if is_recent(r, now, self.lookback)
            and is_leave_form_task(r, self.leave_list_id)
            and r.id not in self.notified_ids
        ]

        sent: list[LeaveRecord] = []
        for record in fresh:
            # the same task can appear twice in one page
            if record.id in self.notified_ids:
                continue
            await self.outbox.post(webhook_payload(new_request_embed(record, now)))
            self.notified_ids.add(record.id)
            sent.append(record)

        logger.info("check-new: %d new leave request(s) announced", len(sent))
        return CheckNewResult(
            new_count=len(sent),
            tasks=[TaskSummary(name=r.name, creator=r.creator) for r in sent],
        )

    async def daily_summary(self, target_date: str | None = None) -> SummaryResult:
        day = parse_date(target_date) if target_date else current_date_parts(self.clock())
        self._require_tracker()
        self._require_webhook()

        records = await self._records_in(day_window(day))
        if not records:
            logger.info("daily summary for %s: nobody on leave, not sending", target_date or "today")
            return SummaryResult(count=0, skipped=True, date=target_date)

        await self.outbox.post(webhook_payload(daily_summary_embed(records, target_date, self.clock())))
        logger.info("daily summary for %s: %d on leave", target_date or "today", len(records))
        return SummaryResult(count=len(records), date=target_date)

    async def weekly_summary(self, date: str | None = None, weeks_ago: int | None = None) -> WeeklySummaryResult:
        """Business-week summary; sent even when nobody is on leave."""
        if date:
            window = week_window(parse_date(date))
            label = f"Week of {date}"
        elif weeks_ago is not None:
            if weeks_ago < 0:
                raise InputValidationError("weeksAgo must be 0 or greater", {"weeksAgo": weeks_ago})
            window = week_window_by_weeks_ago(current_date_parts(self.clock()), weeks_ago)
            label = weeks_ago_label(weeks_ago)
        else:
            window = week_window(current_date_parts(self.clock()))
            label = weeks_ago_label(0)
        self._require_tracker()
        self._require_webhook()

        records = await self._records_in(window)
        await self.outbox.post(webhook_payload(weekly_summary_embed(records, window, label, self.clock())))
        logger.info("weekly summary (%s): %d on leave", label, len(records))
        return WeeklySummaryResult(
            count=len(records), week_start=window.start, week_end=window.end, week_label=label
        )

    async def monthly_summary(self) -> SummaryResult:
        self._require_tracker()
        self._require_webhook()
        today = current_date_parts(self.clock())
        window = month_window(today)

        records = await self._records_in(window)
        if not records:
            logger.info("monthly summary: nobody on leave in %s, not sending", month_name(today))
            return SummaryResult(count=0, skipped=True)

        await self.outbox.post(
            webhook_payload(monthly_summary_embed(records, window, month_name(today), self.clock()))
        )
        logger.info("monthly summary: %d leave task(s) in %s", len(records), month_name(today))
        return SummaryResult(count=len(records))

    async def _squads(self, weeks_ahead: int) -> tuple[list[str], DateWindow]:
        self._require_tracker()
        window = week_window_by_offset(current_date_parts(self.clock()), weeks_ahead)
        records = await self._records_in(window, self._work_calendar_list())
        squads = [r.name.strip() for r in records if r.name.strip()]
        return squads, window

    async def squad_preview(self, weeks_ahead: int = 1) -> SquadResult:
        """Squads on a future week, without sending anything."""
        weeks_ahead = max(1, weeks_ahead)
        squads, window = await self._squads(weeks_ahead)
        return SquadResult(
            count=len(squads),
            squads=squads,
            week_label=format_week_label(window.start, window.end),
            weeks_ahead=weeks_ahead,
            week_start=window.start,
            week_end=window.end,
        )

    async def squad_notification(self, weeks_ahead: int = 1) -> SquadResult:
        self._require_webhook()
        result = await self.squad_preview(weeks_ahead)
        if not result.squads:
            logger.info("squad notice: no squad for %s, not sending", result.week_label)
            return result.model_copy(update={"skipped": True})

        window = DateWindow(start=result.week_start, end=result.week_end)
        await self.outbox.post(webhook_payload(squad_embed(result.squads, window, self.clock())))
        logger.info("squad notice for %s: %s", result.week_label, ", ".join(result.squads))
        return result

    async def employees_on_leave(self, date: str) -> EmployeesOnLeaveResult:
        """Who is on leave on ``date``; a pure query, nothing is sent."""
        day = parse_date(date)
        self._require_tracker()
        records = await self._records_in(day_window(day))
        employees = [describe_record(r) for r in records]
        return EmployeesOnLeaveResult(date=date, count=len(employees), employees_on_leave=employees)

    async def find_lists(self) -> ListHierarchy:
        self._require_tracker()
        return await self.clickup.list_hierarchy(self._workspace())

    async def find_by_name(self, term: str | None = None) -> NameSearchResult:
        self._require_tracker()
        search = (term or "").strip() or DEFAULT_SEARCH_TERM
        return await self.clickup.find_by_name(self._workspace(), search)


def build_leave_service(cfg: Settings = settings) -> LeaveService:
    return LeaveService(
        clickup=ClickUpClient(cfg.clickup_api_base_url, cfg.clickup_api_token, cfg.http_timeout_seconds),
        outbox=WebhookOutbox(cfg.discord_webhook_url, cfg.http_timeout_seconds),
        leave_list_id=cfg.leave_list_id,
        work_calendar_list_id=cfg.work_calendar_list_id,
        workspace_id=cfg.clickup_workspace_id,
        lookback=timedelta(hours=cfg.new_request_lookback_hours),
        fetch_limit=cfg.fetch_limit,
    )


_SERVICE: LeaveService | None = None


def get_leave_service() -> LeaveService:
    """
    One service per process, so the notified set survives between runs
    of a warm process.
    """
    global _SERVICE
    if _SERVICE is None:
        _SERVICE = build_leave_service()
    return _SERVICE
