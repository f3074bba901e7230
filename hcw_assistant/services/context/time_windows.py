# hcw_assistant/services/context/time_windows.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple
from zoneinfo import ZoneInfo


class WindowKind(str, Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "thisWeek"
    LAST_WEEK = "lastWeek"
    THIS_MONTH = "thisMonth"
    LAST_MONTH = "lastMonth"
    ALL_TIME = "allTime"


# priority order: first keyword found in the query wins
WINDOW_KEYWORDS: Tuple[Tuple[str, WindowKind], ...] = (
    ("today", WindowKind.TODAY),
    ("yesterday", WindowKind.YESTERDAY),
    ("this week", WindowKind.THIS_WEEK),
    ("last week", WindowKind.LAST_WEEK),
    ("this month", WindowKind.THIS_MONTH),
    ("last month", WindowKind.LAST_MONTH),
)

WINDOW_TITLES = {
    WindowKind.TODAY: "Today",
    WindowKind.YESTERDAY: "Yesterday",
    WindowKind.THIS_WEEK: "This Week",
    WindowKind.LAST_WEEK: "Last Week",
    WindowKind.THIS_MONTH: "This Month",
    WindowKind.LAST_MONTH: "Last Month",
    WindowKind.ALL_TIME: "All Time",
}

# granularity -> (current, previous) used by period comparisons
COMPARISON_PAIRS = {
    "day": (WindowKind.TODAY, WindowKind.YESTERDAY),
    "week": (WindowKind.THIS_WEEK, WindowKind.LAST_WEEK),
    "month": (WindowKind.THIS_MONTH, WindowKind.LAST_MONTH),
}

_GRANULARITY = {
    WindowKind.TODAY: "day",
    WindowKind.YESTERDAY: "day",
    WindowKind.THIS_WEEK: "week",
    WindowKind.LAST_WEEK: "week",
    WindowKind.THIS_MONTH: "month",
    WindowKind.LAST_MONTH: "month",
}


@dataclass(frozen=True)
class ResolvedWindow:
    """Concrete ``[start, end)`` instants for a window; both None for all-time."""

    kind: WindowKind
    start: Optional[datetime]
    end: Optional[datetime]

    @property
    def title(self) -> str:
        return WINDOW_TITLES[self.kind]

    @property
    def is_bounded(self) -> bool:
        return self.start is not None

    def contains(self, ts: datetime) -> bool:
        if self.start is None or self.end is None:
            return True
        return self.start <= ts < self.end

    def label(self) -> str:
        """Human readable range, end shown inclusively (last covered day)."""
        if self.start is None or self.end is None:
            return self.title
        first = self.start.date()
        last = (self.end - timedelta(microseconds=1)).date()
        if first == last:
            return f"{self.title} ({first.isoformat()})"
        return f"{self.title} ({first.isoformat()} to {last.isoformat()})"


def detect_window(query: str) -> WindowKind:
    text = (query or "").lower()
    for keyword, kind in WINDOW_KEYWORDS:
        if keyword in text:
            return kind
    return WindowKind.ALL_TIME


def granularity_of(kind: WindowKind) -> Optional[str]:
    return _GRANULARITY.get(kind)


def _start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _add_days(day_start: datetime, days: int) -> datetime:
    # rebuild from the calendar date so DST shifts never leak into midnight
    d = day_start.date() + timedelta(days=days)
    return datetime(d.year, d.month, d.day, tzinfo=day_start.tzinfo)


def _month_start(year: int, month: int, tz) -> datetime:
    while month < 1:
        month += 12
        year -= 1
    while month > 12:
        month -= 12
        year += 1
    return datetime(year, month, 1, tzinfo=tz)


def localize(now: datetime, tz_name: str) -> datetime:
    """Aware ``now`` in the assistant timezone; naive input is taken as UTC."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name))


def resolve_window(kind: WindowKind, now: datetime, tz_name: str = "UTC") -> ResolvedWindow:
    if kind is WindowKind.ALL_TIME:
        return ResolvedWindow(kind=kind, start=None, end=None)

    local_now = localize(now, tz_name)
    tz = local_now.tzinfo
    today = _start_of_day(local_now)

    if kind is WindowKind.TODAY:
        return ResolvedWindow(kind, today, _add_days(today, 1))

    if kind is WindowKind.YESTERDAY:
        return ResolvedWindow(kind, _add_days(today, -1), today)

    # weeks start on Sunday; weekday() is 0 for Monday
    days_since_sunday = (local_now.weekday() + 1) % 7
    this_week_start = _add_days(today, -days_since_sunday)

    if kind is WindowKind.THIS_WEEK:
        return ResolvedWindow(kind, this_week_start, _add_days(this_week_start, 7))

    if kind is WindowKind.LAST_WEEK:
        return ResolvedWindow(kind, _add_days(this_week_start, -7), this_week_start)

    this_month_start = _month_start(local_now.year, local_now.month, tz)

    if kind is WindowKind.THIS_MONTH:
        return ResolvedWindow(kind, this_month_start, _month_start(local_now.year, local_now.month + 1, tz))

    if kind is WindowKind.LAST_MONTH:
        return ResolvedWindow(kind, _month_start(local_now.year, local_now.month - 1, tz), this_month_start)

    raise ValueError(f"Unsupported window: {kind}")
