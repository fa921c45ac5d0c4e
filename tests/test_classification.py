from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from conftest import NOW, make_record, ms
from leave_core.classification import is_leave_form_task, is_recent
from leave_core.settings import settings


def test_task_in_configured_list_is_leave_form():
    record = make_record(name="Q1 Budget Review", list_id="123", list_name="Finance")
    assert is_leave_form_task(record, "123")


def test_unrelated_task_is_not_leave_form():
    record = make_record(name="Q1 Budget Review", list_id="999", list_name="Finance")
    assert not is_leave_form_task(record, "123")


@pytest.mark.parametrize("list_name", ["HR Forms", "Time Off", "Vacation tracker", "human resources", "PTO"])
def test_list_name_keywords(list_name):
    record = make_record(name="Q1 Budget Review", list_id="999", list_name=list_name)
    assert is_leave_form_task(record, "123")


@pytest.mark.parametrize("name", ["SICK day - Jane", "Holiday request", "Form Submission #4", "pto"])
def test_task_name_keywords_are_case_insensitive(name):
    record = make_record(name=name, list_id="999", list_name="Engineering")
    assert is_leave_form_task(record, "123")


def test_hr_keyword_only_applies_to_list_names():
    # "hr" appears in "Three" but only list names are checked for it
    record = make_record(name="Three amigos sync", list_id="999", list_name="Engineering")
    assert not is_leave_form_task(record, "123")


def test_missing_list_falls_back_to_task_name():
    record = make_record(name="Leave - John", list_id=None, list_name=None)
    assert is_leave_form_task(record, "123")


def test_is_recent_uses_lookback():
    lookback = timedelta(hours=2)
    assert is_recent(make_record(created=ms(2024, 3, 15, 9, 0)), NOW, lookback)
    assert not is_recent(make_record(created=ms(2024, 3, 15, 7, 59)), NOW, lookback)


def test_task_without_creation_time_counts_as_new():
    assert is_recent(make_record(created=None), NOW, timedelta(hours=2))


def test_unreadable_creation_time_is_not_recent(caplog):
    record = make_record(created=99999999999999999999)
    assert not is_recent(record, NOW, timedelta(hours=2))
    assert "out-of-range timestamp" in caplog.text


def test_is_recent_compares_instants_across_dst_change(monkeypatch):
    monkeypatch.setattr(settings, "timezone", "America/New_York")
    tz = ZoneInfo("America/New_York")
    # 01:10 EST on the fall-back day is 06:10 UTC
    now = datetime(2024, 11, 3, 6, 10, tzinfo=timezone.utc).astimezone(tz)
    # 01:20 EDT, fifty minutes earlier in real time
    created = int(datetime(2024, 11, 3, 5, 20, tzinfo=timezone.utc).timestamp() * 1000)
    record = make_record(created=created)
    assert not is_recent(record, now, timedelta(minutes=30))
    assert is_recent(record, now, timedelta(hours=1))
