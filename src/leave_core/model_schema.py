import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_timestamp_ms(value: Any) -> int | None:
    """
    Read an epoch-milliseconds value the way the tracker sends them:
    an int, a float or a numeric string (leading digits are enough).
    Returns None when nothing numeric can be read.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        m = _LEADING_INT_RE.match(value)
        if m:
            return int(m.group(1))
    return None


def is_set(value: Any) -> bool:
    """True for a value the tracker considers filled in (not None, "", 0 or False)."""
    return value not in (None, "", 0)


# -----------------------------
# Custom fields
# -----------------------------
class FieldKind(str, Enum):
    TEXT = "text"
    DATE = "date"
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"
    OTHER = "other"


class SelectOption(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    id: str | None = None
    name: str | None = None
    label: str | None = None
    orderindex: int | str | None = None

    @property
    def display(self) -> str | None:
        return self.name or self.label


class CustomFieldBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: ClassVar[FieldKind] = FieldKind.OTHER

    id: str | None = None
    name: str = ""
    type: str = ""
    value: Any = None
    options: list[SelectOption] = Field(default_factory=list)

    def name_contains(self, needle: str) -> bool:
        return needle in self.name.lower()


class TextField(CustomFieldBase):
    kind: ClassVar[FieldKind] = FieldKind.TEXT


class DateField(CustomFieldBase):
    kind: ClassVar[FieldKind] = FieldKind.DATE


class SingleSelectField(CustomFieldBase):
    kind: ClassVar[FieldKind] = FieldKind.SINGLE_SELECT

    def selected_option(self) -> SelectOption | None:
        # the tracker stores either the option id or its orderindex
        for opt in self.options:
            if opt.id == self.value or opt.orderindex == self.value:
                return opt
        return None


class MultiSelectField(CustomFieldBase):
    kind: ClassVar[FieldKind] = FieldKind.MULTI_SELECT

    def selected_labels(self) -> list[str]:
        if not isinstance(self.value, list):
            return []
        if not self.options:
            return [str(v) for v in self.value]
        by_id = {opt.id: opt for opt in self.options}
        labels = []
        for option_id in self.value:
            opt = by_id.get(option_id)
            labels.append(opt.label if opt and opt.label else str(option_id))
        return labels


class OtherField(CustomFieldBase):
    kind: ClassVar[FieldKind] = FieldKind.OTHER


CustomField = Union[TextField, DateField, SingleSelectField, MultiSelectField, OtherField]

_FIELD_TYPES: dict[str, type[CustomFieldBase]] = {
    "short_text": TextField,
    "text": TextField,
    "date": DateField,
    "drop_down": SingleSelectField,
    "labels": MultiSelectField,
}


def parse_custom_field(raw: dict) -> CustomField:
    """Turn one raw ``custom_fields`` entry into its typed variant."""
    raw_type = str(raw.get("type") or "")
    cls = _FIELD_TYPES.get(raw_type, OtherField)
    type_config = raw.get("type_config") or {}
    options = type_config.get("options") if isinstance(type_config, dict) else None
    return cls(
        id=str(raw["id"]) if raw.get("id") is not None else None,
        name=str(raw.get("name") or ""),
        type=raw_type,
        value=raw.get("value"),
        options=[o for o in (options or []) if isinstance(o, dict)],
    )


# -----------------------------
# Tasks
# -----------------------------
class LeaveRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    creator: str | None = None
    list_id: str | None = None
    list_name: str | None = None
    url: str | None = None
    date_created: int | None = None
    start_date: int | None = None
    due_date: int | None = None
    custom_fields: list[CustomField] = Field(default_factory=list)

    @classmethod
    def from_api(cls, raw: dict) -> "LeaveRecord":
        task_id = str(raw.get("id") or "")
        creator = raw.get("creator") or {}
        task_list = raw.get("list") or {}
        return cls(
            id=task_id,
            name=raw.get("name") or "",
            creator=creator.get("username") if isinstance(creator, dict) else None,
            list_id=str(task_list["id"]) if isinstance(task_list, dict) and task_list.get("id") is not None else None,
            list_name=task_list.get("name") if isinstance(task_list, dict) else None,
            url=raw.get("url"),
            date_created=_timestamp(raw, "date_created", task_id),
            start_date=_timestamp(raw, "start_date", task_id),
            due_date=_timestamp(raw, "due_date", task_id),
            custom_fields=[parse_custom_field(f) for f in raw.get("custom_fields") or [] if isinstance(f, dict)],
        )


def _timestamp(raw: dict, key: str, task_id: str) -> int | None:
    value = raw.get(key)
    if not is_set(value):
        return None
    ms = parse_timestamp_ms(value)
    if ms is None:
        logger.warning("task %s: ignoring unreadable %s=%r", task_id, key, value)
    return ms


# -----------------------------
# Windows and periods
# -----------------------------
class DateWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self) -> "DateWindow":
        if self.start.astimezone(timezone.utc) > self.end.astimezone(timezone.utc):
            raise ValueError("window start must not be after its end")
        return self

    def contains(self, instant: datetime) -> bool:
        utc = timezone.utc
        return self.start.astimezone(utc) <= instant.astimezone(utc) <= self.end.astimezone(utc)


class LeavePeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    leave_type: str = "Leave"
    from_date: datetime | None = None
    to_date: datetime | None = None


# -----------------------------
# Webhook messages
# -----------------------------
class EmbedField(BaseModel):
    name: str
    value: str
    inline: bool = False


class EmbedFooter(BaseModel):
    text: str


class MessagePayload(BaseModel):
    title: str
    color: int
    description: str = ""
    fields: list[EmbedField] = Field(default_factory=list)
    timestamp: str | None = None
    footer: EmbedFooter | None = None


class WebhookPayload(BaseModel):
    embeds: list[MessagePayload]
    username: str


# -----------------------------
# Query surface results
# -----------------------------
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskSummary(CamelModel):
    name: str
    creator: str | None = None


class CheckNewResult(CamelModel):
    new_count: int
    tasks: list[TaskSummary] = Field(default_factory=list)


class SummaryResult(CamelModel):
    count: int
    skipped: bool = False
    date: str | None = None


class WeeklySummaryResult(CamelModel):
    count: int
    week_start: datetime
    week_end: datetime
    week_label: str


class SquadResult(CamelModel):
    count: int
    squads: list[str] = Field(default_factory=list)
    week_label: str
    weeks_ahead: int
    week_start: datetime
    week_end: datetime
    skipped: bool = False


class EmployeeOnLeave(CamelModel):
    employee: str
    leave_type: str
    from_date: str
    to_date: str
    reason: str = ""
    task_url: str | None = None
    task_name: str | None = None


class EmployeesOnLeaveResult(CamelModel):
    date: str
    count: int
    employees_on_leave: list[EmployeeOnLeave] = Field(default_factory=list)


# -----------------------------
# Workspace hierarchy
# -----------------------------
class SpaceRef(CamelModel):
    id: str
    name: str


class FolderRef(CamelModel):
    id: str
    name: str
    space_id: str
    space_name: str
    path: str


class ListRef(CamelModel):
    id: str
    name: str
    space: str
    space_id: str
    folder: str | None = None
    folder_id: str | None = None
    path: str


class ListHierarchy(CamelModel):
    spaces: list[SpaceRef] = Field(default_factory=list)
    folders: list[FolderRef] = Field(default_factory=list)
    lists: list[ListRef] = Field(default_factory=list)


class NameSearchResult(CamelModel):
    search: str
    spaces: list[SpaceRef] = Field(default_factory=list)
    folders: list[FolderRef] = Field(default_factory=list)
    lists: list[ListRef] = Field(default_factory=list)
