"""Tests for the pre-parsed slot catalog and group-play windows."""

from __future__ import annotations

from datetime import date

import pytest

from apps.courts.domain.catalog import (
    CatalogSlot,
    SlotCatalog,
    day_type_for,
    format_time_of_day,
    js_weekday,
    parse_time_of_day,
    weekday_name,
)
from apps.courts.domain.policies import GroupPlaySchedule, GroupPlayWindow


def test_parse_time_of_day_accepts_end_of_day_only_when_allowed():
    assert parse_time_of_day("08:30") == 510
    assert parse_time_of_day("8:05") == 485
    assert parse_time_of_day("24:00", allow_end_of_day=True) == 1440
    with pytest.raises(ValueError):
        parse_time_of_day("24:00")


@pytest.mark.parametrize("value", ["", "8", "25:00", "10:60", "ab:cd", "24:30"])
def test_parse_time_of_day_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_time_of_day(value, allow_end_of_day=True)


def test_format_time_of_day_zero_pads():
    assert format_time_of_day(0) == "00:00"
    assert format_time_of_day(545) == "09:05"
    assert format_time_of_day(1440) == "24:00"


def test_day_helpers_follow_calendar():
    saturday = date(2026, 10, 24)
    monday = date(2026, 10, 26)
    assert day_type_for(saturday) == "weekend"
    assert day_type_for(monday) == "weekday"
    assert weekday_name(monday) == "monday"
    assert js_weekday(saturday) == 6
    assert js_weekday(date(2026, 10, 25)) == 0


def test_catalog_is_sorted_by_start_minute():
    catalog = SlotCatalog(
        "weekday",
        [
            CatalogSlot(id=2, start_minute=540, end_minute=600, day_type="weekday"),
            CatalogSlot(id=1, start_minute=480, end_minute=540, day_type="weekday"),
        ],
    )
    assert [slot.id for slot in catalog] == [1, 2]
    assert catalog.index_of(2) == 1
    assert catalog.index_of(99) is None


def test_group_play_window_is_half_open():
    schedule = GroupPlaySchedule.from_windows(
        [
            GroupPlayWindow(
                name="Evening social",
                court_ids=frozenset({1}),
                weekdays=frozenset({"monday"}),
                start_minute=18 * 60,
                end_minute=20 * 60,
            )
        ]
    )
    assert schedule.is_slot_blocked(1, "monday", 18 * 60)
    assert schedule.is_slot_blocked(1, "monday", 19 * 60 + 30)
    assert not schedule.is_slot_blocked(1, "monday", 20 * 60)
    assert not schedule.is_slot_blocked(2, "monday", 18 * 60)
    assert not schedule.is_slot_blocked(1, "tuesday", 18 * 60)
