"""
Blocking policies

Value objects answering the two policy questions of the engine:
is a whole date closed, and is a court held by a group-play session at
a given time of day on a given weekday.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class DateBlock:
    date: date
    is_blocked: bool
    reason: Optional[str] = None


DEFAULT_BLOCK_REASON = "Closed for booking"


@dataclass(frozen=True)
class GroupPlayWindow:
    """A session occupying some courts on some weekdays within [start, end)."""

    name: str
    court_ids: frozenset
    weekdays: frozenset
    start_minute: int
    end_minute: int

    def covers(self, court_id: int, weekday_name: str, minute: int) -> bool:
        return (
            court_id in self.court_ids
            and weekday_name in self.weekdays
            and self.start_minute <= minute < self.end_minute
        )


@dataclass
class GroupPlaySchedule:
    """
    Preloaded group-play windows

    Built once per request so per-token lookups never hit storage.
    """

    windows: List[GroupPlayWindow] = field(default_factory=list)
    _by_key: Dict[Tuple[int, str], List[GroupPlayWindow]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        for window in self.windows:
            for court_id in window.court_ids:
                for weekday in window.weekdays:
                    self._by_key.setdefault((court_id, weekday), []).append(window)

    @classmethod
    def from_windows(cls, windows: Iterable[GroupPlayWindow]) -> 'GroupPlaySchedule':
        return cls(windows=list(windows))

    def is_slot_blocked(self, court_id: int, weekday_name: str, slot_start_minute: int) -> bool:
        return self.window_for(court_id, weekday_name, slot_start_minute) is not None

    def window_for(self, court_id: int, weekday_name: str, slot_start_minute: int) -> Optional[GroupPlayWindow]:
        for window in self._by_key.get((court_id, weekday_name), ()):
            if window.covers(court_id, weekday_name, slot_start_minute):
                return window
        return None
