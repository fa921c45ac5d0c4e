"""
Build the webhook embeds for every notification the notifier sends.

Builders are pure: they take already-filtered records and return a
``MessagePayload``. Sending is the outbox's job.
"""
from datetime import datetime, timezone

from leave_core.extraction import (
    days_in_month,
    leave_period,
    person_name,
    render_field_value,
)
from leave_core.model_schema import (
    DateWindow,
    EmbedField,
    EmbedFooter,
    LeavePeriod,
    LeaveRecord,
    MessagePayload,
    WebhookPayload,
)
from leave_core.settings import settings
from leave_core.timezone_util import (
    format_date,
    format_short_date,
    format_time,
    format_week_label,
)

# Discord rejects embed field values longer than this
FIELD_VALUE_LIMIT = 1024
MAX_CHUNK_LEN = FIELD_VALUE_LIMIT - 4
ELLIPSIS = "..."
PARAGRAPH_SEP = "\n\n"

COLOR_NEW_REQUEST = 0x00D4AA
COLOR_DAILY = 0x4A90E2
COLOR_WEEKLY = 0x4A90E2
COLOR_MONTHLY = 0xFF6B35
COLOR_SQUAD = 0x9B59B6


def _plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def _footer(suffix: str = "Leave Management System") -> EmbedFooter:
    return EmbedFooter(text=f"{settings.org_name} • {suffix}")


def _timestamp(now: datetime | None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def _clip(value: str, limit: int = FIELD_VALUE_LIMIT) -> str:
    return value if len(value) <= limit else value[: limit - len(ELLIPSIS)] + ELLIPSIS


def webhook_payload(*embeds: MessagePayload) -> WebhookPayload:
    return WebhookPayload(embeds=list(embeds), username=settings.bot_username)


# -----------------------------
# Chunking
# -----------------------------
def chunk_text(value: str, limit: int = MAX_CHUNK_LEN) -> list[str]:
    """
    Pack blank-line separated blocks, in order, into as few chunks as fit
    ``limit``. A block that alone exceeds the limit is truncated with "...".
    """
    if len(value) <= limit:
        return [value]
    chunks: list[str] = []
    current = ""
    for block in value.split(PARAGRAPH_SEP):
        candidate = current + PARAGRAPH_SEP + block if current else block
        if len(candidate) <= limit:
            current = candidate
            continue
        if current:
            chunks.append(current)
        current = block if len(block) <= limit else block[: limit - len(ELLIPSIS)] + ELLIPSIS
    if current:
        chunks.append(current)
    return chunks


def add_chunked_field(payload: MessagePayload, name: str, value: str, limit: int = MAX_CHUNK_LEN) -> None:
    chunks = chunk_text(value, limit)
    total = len(chunks)
    for idx, chunk in enumerate(chunks, start=1):
        payload.fields.append(
            EmbedField(name=f"{name} ({idx}/{total})" if total > 1 else name, value=chunk)
        )


# -----------------------------
# Lines
# -----------------------------
def period_suffix(period: LeavePeriod) -> str:
    from_str = format_date(period.from_date)
    to_str = format_date(period.to_date)
    if from_str and to_str:
        return f" ({from_str})" if from_str == to_str else f" ({from_str} to {to_str})"
    if from_str or to_str:
        return f" ({from_str or to_str})"
    return ""


def leave_line(record: LeaveRecord) -> str:
    period = leave_period(record)
    return f"• **{person_name(record)}** - {period.leave_type}{period_suffix(period)}"


# -----------------------------
# Embeds
# -----------------------------
def new_request_embed(record: LeaveRecord, now: datetime | None = None) -> MessagePayload:
    submitted = now or datetime.now(timezone.utc)
    embed = MessagePayload(
        title=f"🎯 New Leave Request - {settings.org_name}",
        color=COLOR_NEW_REQUEST,
        description=f"A new leave request has been submitted by one of our {settings.member_noun}s!",
        fields=[
            EmbedField(name=f"👤 {settings.member_noun}", value=f"**{record.creator or 'Unknown User'}**", inline=True),
            EmbedField(name="📅 Submitted", value=f"**{format_date(submitted)}** at {format_time(submitted)}", inline=True),
        ],
        timestamp=_timestamp(now),
        footer=_footer(),
    )
    for field in record.custom_fields:
        if field.name_contains("reason"):
            continue
        value = render_field_value(field)
        if value:
            embed.fields.append(EmbedField(name=f"📋 {field.name}", value=_clip(value), inline=True))
    if record.url:
        embed.fields.append(EmbedField(name="🔗 ClickUp Link", value=f"[View Full Request]({record.url})"))
    return embed


def daily_summary_embed(
    records: list[LeaveRecord],
    target_date: str | None = None,
    now: datetime | None = None,
) -> MessagePayload:
    noun = settings.member_noun
    date_label = f"on {target_date}" if target_date else "today"
    count = len(records)
    embed = MessagePayload(
        title=f"📅 Daily Leave Report - {target_date or 'Today'}",
        color=COLOR_DAILY,
        description=f"Here's who's taking time off {date_label} at {settings.org_name}",
        fields=[
            EmbedField(name="📊 Team Status", value=f"**{count}** {_plural(count, noun)} on leave {date_label}"),
        ],
        timestamp=_timestamp(now),
        footer=_footer(),
    )
    if target_date:
        embed.fields.append(EmbedField(name="📅 Date", value=f"**{target_date}**", inline=True))
    if records:
        add_chunked_field(
            embed,
            f"👥 {noun}s Taking Time Off {'on ' + target_date if target_date else 'Today'}",
            PARAGRAPH_SEP.join(leave_line(r) for r in records),
        )
    else:
        embed.fields.append(EmbedField(name="✅ Status", value=f"All {noun}s are working {date_label}! 🚀"))
    return embed


def weekly_summary_embed(
    records: list[LeaveRecord],
    window: DateWindow,
    week_label: str = "This Week",
    now: datetime | None = None,
) -> MessagePayload:
    noun = settings.member_noun
    count = len(records)
    status = (
        "**0** leave requests this week"
        if count == 0
        else f"**{count}** {_plural(count, noun)} on leave this week"
    )
    embed = MessagePayload(
        title=f"📅 Weekly Leave Summary - {week_label}",
        color=COLOR_WEEKLY,
        description=(
            f"Leave requests from {format_date(window.start)} to {format_date(window.end)} "
            f"at {settings.org_name}"
        ),
        fields=[EmbedField(name="📊 Team Status", value=status)],
        timestamp=_timestamp(now),
        footer=_footer(),
    )
    details = (
        PARAGRAPH_SEP.join(leave_line(r) for r in records)
        if records
        else f"All {noun}s are working this week! 🚀"
    )
    add_chunked_field(embed, f"👥 {noun}s Taking Time Off This Week", details)
    return embed


def group_by_person(records: list[LeaveRecord]) -> dict[str, list[LeaveRecord]]:
    grouped: dict[str, list[LeaveRecord]] = {}
    for record in records:
        grouped.setdefault(person_name(record), []).append(record)
    return grouped


def person_month_block(name: str, records: list[LeaveRecord], window: DateWindow) -> tuple[str, int]:
    """Per-person block of the monthly summary and the person's total days in the month."""
    total = 0
    lines = []
    for record in records:
        period = leave_period(record)
        days = days_in_month(period.from_date, period.to_date, window.start, window.end)
        total += days
        from_str = format_short_date(period.from_date)
        to_str = format_short_date(period.to_date)
        line = f"  • {period.leave_type}: "
        if from_str and to_str:
            line += from_str if from_str == to_str else f"{from_str} → {to_str}"
            if days > 0:
                line += f" ({days} {_plural(days, 'day')})"
        else:
            line += "—"
        lines.append(line)
    block = f"**{name}**\n" + "\n".join(lines) + f"\n  **Total: {total} {_plural(total, 'day')} this month**"
    return block, total


def monthly_summary_embed(
    records: list[LeaveRecord],
    window: DateWindow,
    month_name: str,
    now: datetime | None = None,
) -> MessagePayload:
    noun = settings.member_noun
    grouped = group_by_person(records)
    people = len(grouped)
    embed = MessagePayload(
        title=f"📊 Monthly Leave Overview - {settings.org_name}",
        color=COLOR_MONTHLY,
        description=f"Monthly summary of all leave requests at {settings.org_name}",
        fields=[
            EmbedField(name="📊 Team Status", value=f"**{people}** {_plural(people, noun)} on leave in {month_name}"),
        ],
        timestamp=_timestamp(now),
        footer=_footer(),
    )
    blocks = [person_month_block(name, person_records, window)[0] for name, person_records in grouped.items()]
    if blocks:
        add_chunked_field(embed, f"👥 {noun}s Taking Time Off This Month", PARAGRAPH_SEP.join(blocks))
    else:
        embed.fields.append(EmbedField(name="✅ Status", value=f"All {noun}s are working this month! 🚀"))
    return embed


def squad_embed(squads: list[str], window: DateWindow, now: datetime | None = None) -> MessagePayload:
    week_label = format_week_label(window.start, window.end)
    squad_list = (
        "\n".join(f"• **{name}**" for name in squads)
        if squads
        else "_No squad assigned for next week in Work Calendar._"
    )
    return MessagePayload(
        title=f"📅 Squad On Next Week - {settings.org_name}",
        color=COLOR_SQUAD,
        description=f"Here’s who’s on for **next week** ({week_label}).",
        fields=[
            EmbedField(name="📆 Week", value=week_label, inline=True),
            EmbedField(name="👥 Squad on next week", value=_clip(squad_list)),
        ],
        timestamp=_timestamp(now),
        footer=_footer("Work Calendar"),
    )
