"""Catalog lookups and blocking oracles backed by the court models."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from shared.domain.errors import NotFoundError
from shared.infrastructure.storage import storage_guard

from .domain.catalog import SlotCatalog, parse_time_of_day
from .domain.policies import DEFAULT_BLOCK_REASON, DateBlock, GroupPlaySchedule, GroupPlayWindow
from .models import BlockedDate, Court, GroupPlayRule, TimeSlot

logger = logging.getLogger(__name__)


def get_court(court_id) -> Court:
    with storage_guard("court catalog"):
        try:
            return Court.objects.get(pk=court_id)
        except (Court.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Court", court_id)


def get_time_slot(time_slot_id) -> TimeSlot:
    with storage_guard("slot catalog"):
        try:
            return TimeSlot.objects.get(pk=time_slot_id)
        except (TimeSlot.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("TimeSlot", time_slot_id)


def list_time_slots(day_type: str) -> List[TimeSlot]:
    """Active slots of a day type ordered by start time."""

    with storage_guard("slot catalog"):
        return list(
            TimeSlot.objects.filter(day_type=day_type, status=TimeSlot.Status.ACTIVE).order_by("start_minute")
        )


def load_catalog(day_type: str) -> SlotCatalog:
    return SlotCatalog(day_type, (slot.to_catalog_slot() for slot in list_time_slots(day_type)))


def list_bookable_courts() -> List[Court]:
    with storage_guard("court catalog"):
        return list(Court.objects.filter(status=Court.Status.AVAILABLE).order_by("number"))


# ----------------------------------------------------------------------------
# Blocked-date oracle
# ----------------------------------------------------------------------------

def is_date_blocked(day: date) -> DateBlock:
    with storage_guard("blocked dates"):
        entry = BlockedDate.objects.filter(date=day).first()
    if entry is None:
        return DateBlock(date=day, is_blocked=False)
    return DateBlock(date=day, is_blocked=True, reason=entry.reason or DEFAULT_BLOCK_REASON)


def blocked_dates_in_range(start: date, end: date) -> List[DateBlock]:
    with storage_guard("blocked dates"):
        entries = list(BlockedDate.objects.filter(date__gte=start, date__lte=end).order_by("date"))
    return [DateBlock(date=entry.date, is_blocked=True, reason=entry.reason or DEFAULT_BLOCK_REASON) for entry in entries]


# ----------------------------------------------------------------------------
# Group-play oracle
# ----------------------------------------------------------------------------

def load_group_play_schedule(court_ids: Optional[List[int]] = None) -> GroupPlaySchedule:
    """Load active group-play rules, optionally only those touching given courts."""

    with storage_guard("group play rules"):
        rules = GroupPlayRule.objects.filter(is_active=True).prefetch_related("courts")
        if court_ids is not None:
            rules = rules.filter(courts__id__in=court_ids).distinct()
        rules = list(rules)

    windows = []
    for rule in rules:
        try:
            start = parse_time_of_day(rule.start_time)
            end = parse_time_of_day(rule.end_time, allow_end_of_day=True)
        except ValueError:
            logger.warning(f"Ignoring group play rule {rule.pk} with malformed times {rule.start_time}-{rule.end_time}")
            continue
        windows.append(
            GroupPlayWindow(
                name=rule.session_name,
                court_ids=frozenset(court.pk for court in rule.courts.all()),
                weekdays=frozenset(str(day).lower() for day in rule.days_of_week),
                start_minute=start,
                end_minute=end,
            )
        )
    return GroupPlaySchedule.from_windows(windows)


def is_slot_blocked(court_id: int, weekday_name: str, slot_start: str) -> bool:
    """Single-question form of the group-play oracle."""

    schedule = load_group_play_schedule([court_id])
    return schedule.is_slot_blocked(court_id, weekday_name.lower(), parse_time_of_day(slot_start))
