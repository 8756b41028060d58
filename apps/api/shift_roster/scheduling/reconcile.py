"""
Classify candidates against the shifts already stored for the month.

Pure: nothing here writes. Under overwrite_only the conflicting existing
shifts are only reported; the shift store decides what overwriting means.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Sequence

from shift_roster.scheduling.overlap import overlaps
from shift_roster.scheduling.recurrence import weekday_of
from shift_roster.scheduling.types import RosterRow, staffing_of


def _by_date(items: Iterable, date_attr: str = "shift_date") -> Dict[date, list]:
    out: Dict[date, list] = defaultdict(list)
    for item in items:
        out[getattr(item, date_attr)].append(item)
    return out


def _conflicts(item, others_same_day: Sequence) -> bool:
    return any(overlaps(item.start_time, item.end_time, o.start_time, o.end_time) for o in others_same_day)


def existing_row(instance, conflict: bool, action: str) -> RosterRow:
    return RosterRow(
        client_id=instance.client_id,
        shift_date=instance.shift_date,
        weekday=weekday_of(instance.shift_date),
        start_time=instance.start_time,
        end_time=instance.end_time,
        required_staff_count=instance.required_staff_count,
        is_template=False,
        conflict=conflict,
        action=action,
        instance_id=instance.shift_id,
        **staffing_of(instance),
    )


def sort_rows(rows: List[RosterRow]) -> List[RosterRow]:
    # sorted() is stable: ties keep insertion order (candidates before existing)
    return sorted(rows, key=lambda r: (r.shift_date, r.start_time))


def reconcile(candidates: Sequence[RosterRow], existing: Sequence, policy: str) -> List[RosterRow]:
    if not candidates:
        return sort_rows([existing_row(e, conflict=False, action="keep") for e in existing])

    existing_by_date = _by_date(existing)
    candidates_by_date = _by_date(candidates)

    rows: List[RosterRow] = []
    for c in candidates:
        conflict = _conflicts(c, existing_by_date.get(c.shift_date, ()))
        if policy == "skip_conflict" and conflict:
            continue
        action = "new_conflict" if conflict else "new"
        rows.append(replace(c, conflict=conflict, action=action))

    existing_action = "delete" if policy == "delete_month_insert" else "keep"
    for e in existing:
        conflict = _conflicts(e, candidates_by_date.get(e.shift_date, ()))
        rows.append(existing_row(e, conflict=conflict, action=existing_action))

    return sort_rows(rows)
