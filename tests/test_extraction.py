from datetime import datetime

from conftest import TZ, make_record, ms
from leave_core.extraction import (
    days_in_month,
    describe_record,
    leave_period,
    leave_reason,
    matches_window,
    person_name,
    render_field_value,
)
from leave_core.model_schema import parse_custom_field
from leave_core.timezone_util import DateParts, day_window, month_window, week_window

LEAVE_TYPE_FIELD = {
    "id": "f-type",
    "name": "Leave Type",
    "type": "drop_down",
    "value": 1,
    "type_config": {
        "options": [
            {"id": "opt-a", "name": "Annual", "orderindex": 0},
            {"id": "opt-s", "name": "Sick", "orderindex": 1},
        ]
    },
}


# -----------------------------
# person_name
# -----------------------------
def test_person_name_prefers_trimmed_title():
    assert person_name(make_record(name="  Jane Doe  ", creator="jdoe")) == "Jane Doe"


def test_person_name_falls_back_to_creator_then_field():
    assert person_name(make_record(name="  ", creator="jdoe")) == "jdoe"
    record = make_record(
        name="",
        creator=None,
        custom_fields=[{"name": "Employee Name", "type": "short_text", "value": "Sam"}],
    )
    assert person_name(record) == "Sam"
    assert person_name(make_record(name="", creator=None)) == "Unknown"


# -----------------------------
# leave_period
# -----------------------------
def test_leave_type_resolves_selected_option_by_orderindex():
    period = leave_period(make_record(custom_fields=[LEAVE_TYPE_FIELD], due=ms(2024, 3, 15, 9)))
    assert period.leave_type == "Sick"


def test_leave_type_resolves_option_id_and_raw_value():
    by_id = dict(LEAVE_TYPE_FIELD, value="opt-a")
    assert leave_period(make_record(custom_fields=[by_id])).leave_type == "Annual"
    no_options = {"name": "Type", "type": "drop_down", "value": "Casual"}
    assert leave_period(make_record(custom_fields=[no_options])).leave_type == "Casual"
    assert leave_period(make_record()).leave_type == "Leave"


def test_from_and_to_fields_win_over_task_dates():
    record = make_record(
        start=ms(2024, 1, 1),
        due=ms(2024, 1, 2),
        custom_fields=[
            {"name": "From Date", "type": "date", "value": str(ms(2024, 3, 11))},
            {"name": "To Date", "type": "date", "value": ms(2024, 3, 13)},
        ],
    )
    period = leave_period(record)
    assert period.from_date == datetime(2024, 3, 11, tzinfo=TZ)
    assert period.to_date == datetime(2024, 3, 13, tzinfo=TZ)


def test_due_date_only_collapses_to_single_day():
    period = leave_period(make_record(due=ms(2024, 3, 15, 9)))
    assert period.from_date == period.to_date == datetime(2024, 3, 15, 9, tzinfo=TZ)


def test_no_dates_at_all_leaves_period_open():
    period = leave_period(make_record())
    assert period.from_date is None and period.to_date is None


def test_unreadable_from_field_is_ignored(caplog):
    record = make_record(
        due=ms(2024, 3, 15),
        custom_fields=[{"name": "From", "type": "short_text", "value": "next monday"}],
    )
    period = leave_period(record)
    assert period.from_date == period.to_date == datetime(2024, 3, 15, tzinfo=TZ)
    assert "no readable timestamp" in caplog.text


# -----------------------------
# matches_window
# -----------------------------
def test_due_date_inside_day_window_matches():
    record = make_record(due=ms(2024, 3, 15, 9))
    assert matches_window(record, day_window(DateParts(2024, 3, 15)))
    assert not matches_window(record, day_window(DateParts(2024, 3, 14)))


def test_start_to_due_span_overlapping_window_matches():
    record = make_record(start=ms(2024, 3, 13), due=ms(2024, 3, 20))
    assert matches_window(record, day_window(DateParts(2024, 3, 15)))
    # span starts after the window
    assert not matches_window(record, day_window(DateParts(2024, 3, 12)))


def test_date_custom_field_matches_even_without_due_date():
    record = make_record(custom_fields=[{"name": "Leave day", "type": "date", "value": str(ms(2024, 3, 15, 4))}])
    assert matches_window(record, day_window(DateParts(2024, 3, 15)))


def test_record_with_several_date_fields_matches_several_windows():
    record = make_record(
        custom_fields=[
            {"name": "First day", "type": "date", "value": str(ms(2024, 3, 1))},
            {"name": "Second day", "type": "date", "value": str(ms(2024, 3, 20))},
        ]
    )
    assert matches_window(record, week_window(DateParts(2024, 2, 28)))
    assert matches_window(record, week_window(DateParts(2024, 3, 20)))


def test_record_without_dates_never_matches():
    assert not matches_window(make_record(), month_window(DateParts(2024, 3, 1)))


# -----------------------------
# days_in_month
# -----------------------------
def test_days_in_month_counts_inclusive_days():
    window = month_window(DateParts(2024, 3, 1))
    first = leave_period(make_record(start=ms(2024, 3, 4, 9), due=ms(2024, 3, 5, 9)))
    second = leave_period(make_record(start=ms(2024, 3, 11, 9), due=ms(2024, 3, 13, 9)))
    total = sum(days_in_month(p.from_date, p.to_date, window.start, window.end) for p in (first, second))
    assert total == 5


def test_days_in_month_clips_to_month():
    window = month_window(DateParts(2024, 3, 1))
    assert days_in_month(
        datetime(2024, 2, 27, 9, tzinfo=TZ), datetime(2024, 3, 2, 9, tzinfo=TZ), window.start, window.end
    ) == 2
    assert days_in_month(
        datetime(2024, 4, 2, tzinfo=TZ), datetime(2024, 4, 3, tzinfo=TZ), window.start, window.end
    ) == 0
    assert days_in_month(None, None, window.start, window.end) == 0


# -----------------------------
# display helpers
# -----------------------------
def test_render_field_value_per_variant():
    labels = parse_custom_field({
        "name": "Teams",
        "type": "labels",
        "value": ["l1", "l2"],
        "type_config": {"options": [{"id": "l1", "label": "Web"}, {"id": "l2", "label": "Mobile"}]},
    })
    assert render_field_value(labels) == "Web, Mobile"
    assert render_field_value(parse_custom_field(LEAVE_TYPE_FIELD)) == "Sick"
    day = parse_custom_field({"name": "Day", "type": "date", "value": str(ms(2024, 3, 15))})
    assert render_field_value(day) == "3/15/2024"
    assert render_field_value(parse_custom_field({"name": "Days", "type": "number", "value": 3})) == "3"
    assert render_field_value(parse_custom_field({"name": "Notes", "type": "text", "value": None})) == ""


def test_describe_record_for_point_lookup():
    record = make_record(
        name="Jane Doe",
        due=ms(2024, 3, 15, 9),
        url="https://app.clickup.com/t/t1",
        custom_fields=[LEAVE_TYPE_FIELD, {"name": "Reason", "type": "text", "value": "Flu"}],
    )
    entry = describe_record(record)
    assert entry.employee == "Jane Doe"
    assert entry.leave_type == "Sick"
    assert entry.from_date == entry.to_date == "3/15/2024"
    assert entry.reason == leave_reason(record) == "Flu"
    assert entry.model_dump(by_alias=True)["taskUrl"] == "https://app.clickup.com/t/t1"
