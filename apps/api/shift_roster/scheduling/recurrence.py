"""
Weekly template -> dated candidates for one calendar month.

Weekdays follow the template convention (0=Sun ... 6=Sat), not
date.weekday(). Nothing in here reads the wall clock except current_month().
"""
from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, List
from zoneinfo import ZoneInfo

from shift_roster.core.errors import InvalidRequestError
from shift_roster.scheduling.types import RosterRow, staffing_of

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


class MonthDays:
    """Lazy, restartable iteration over every date of a YYYY-MM month."""

    def __init__(self, month: str):
        m = _MONTH_RE.match(month or "")
        if not m:
            raise InvalidRequestError(f"month must be YYYY-MM, got {month!r}")
        year, mon = int(m.group(1)), int(m.group(2))
        if not 1 <= mon <= 12 or year < 1:
            raise InvalidRequestError(f"month out of range: {month!r}")
        self.month = month
        self.first = date(year, mon, 1)
        self.last = date(year, mon, calendar.monthrange(year, mon)[1])

    def __iter__(self) -> Iterator[date]:
        cur = self.first
        while cur <= self.last:
            yield cur
            cur += timedelta(days=1)

    def __len__(self) -> int:
        return self.last.day


def current_month(tz_name: str) -> str:
    return datetime.now(ZoneInfo(tz_name)).strftime("%Y-%m")


def weekday_of(d: date) -> int:
    # date.weekday(): Mon=0. Templates: Sun=0.
    return (d.weekday() + 1) % 7


def nth_week(d: date) -> int:
    """Days 1-7 -> 1, 8-14 -> 2, ... 29-31 -> 5."""
    return (d.day - 1) // 7 + 1


def nth_weeks_of(t) -> List[int]:
    return [int(n) for n in (getattr(t, "nth_weeks", None) or [])]


def is_within_effective_range(t, d: date) -> bool:
    if t.effective_from and d < t.effective_from:
        return False
    if t.effective_to and d > t.effective_to:
        return False
    return True


def passes_biweekly(t, d: date) -> bool:
    if not t.is_biweekly:
        return True
    anchor = t.effective_from or d
    weeks = (d - anchor).days // 7
    return weeks % 2 == 0


def passes_nth_week(t, d: date) -> bool:
    nth_weeks = nth_weeks_of(t)
    if not nth_weeks:
        return True
    return nth_week(d) in nth_weeks


def template_claims(t, d: date, recurrence_enabled: bool = True) -> bool:
    if not t.active:
        return False
    if t.weekday != weekday_of(d):
        return False
    if not is_within_effective_range(t, d):
        return False
    if recurrence_enabled and not (passes_biweekly(t, d) and passes_nth_week(t, d)):
        return False
    return True


def candidate_for(t, d: date) -> RosterRow:
    return RosterRow(
        client_id=t.client_id,
        shift_date=d,
        weekday=weekday_of(d),
        start_time=t.start_time,
        end_time=t.end_time,
        required_staff_count=t.required_staff_count,
        is_template=True,
        template_id=getattr(t, "template_id", None),
        **staffing_of(t),
    )


def iter_candidates(templates: Iterable, days: MonthDays, recurrence_enabled: bool = True) -> Iterator[RosterRow]:
    templates = list(templates)
    for d in days:
        for t in templates:
            if template_claims(t, d, recurrence_enabled):
                yield candidate_for(t, d)


def evaluate_month(templates: Iterable, month: str, recurrence_enabled: bool = True) -> List[RosterRow]:
    """One candidate per (date, template) pair the template claims in the month."""
    return list(iter_candidates(templates, MonthDays(month), recurrence_enabled))
