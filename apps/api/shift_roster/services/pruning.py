"""
Post-deployment pruning.

A shift is pruned when a biweekly template with an nth-week restriction
governs its (weekday, start_time, required_staff_count) slot and none of
those templates claims the shift's nth week any more. Shifts whose slot has
no such template are never touched.
"""
from __future__ import annotations

import logging
from datetime import time
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from shift_roster.core.errors import PruningError
from shift_roster.scheduling.recurrence import MonthDays, nth_week, nth_weeks_of, weekday_of

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100

SlotKey = Tuple[int, time, int]


def is_prunable_template(t) -> bool:
    return bool(t.is_biweekly) and bool(nth_weeks_of(t))


def build_nth_lookup(templates: Iterable) -> Dict[SlotKey, FrozenSet[int]]:
    """Slot -> union of nth weeks claimed by every biweekly template sharing it."""
    merged: Dict[SlotKey, set] = {}
    for t in templates:
        if not is_prunable_template(t):
            continue
        key = (t.weekday, t.start_time, t.required_staff_count)
        merged.setdefault(key, set()).update(nth_weeks_of(t))
    return {k: frozenset(v) for k, v in merged.items()}


def select_for_pruning(instances: Iterable, lookup: Dict[SlotKey, FrozenSet[int]]) -> List:
    marked = []
    for inst in instances:
        key = (weekday_of(inst.shift_date), inst.start_time, inst.required_staff_count)
        eligible = lookup.get(key)
        if eligible is None:
            continue
        if nth_week(inst.shift_date) not in eligible:
            marked.append(inst)
    return marked


def _batches(ids: Sequence[int], size: int):
    for i in range(0, len(ids), size):
        yield ids[i:i + size]


def prune_month(shift_store, client_id: str, days: MonthDays, templates: Iterable, batch_size: int = DEFAULT_BATCH_SIZE) -> int:
    """
    Delete ineligible shifts of the month in batches; returns the number deleted.

    A failing batch stops the pass. Batches already deleted stay deleted and
    their count travels on the raised PruningError.
    """
    lookup = build_nth_lookup(templates)
    if not lookup:
        logger.info("prune client=%s month=%s: no biweekly nth-week templates", client_id, days.month)
        return 0

    instances = shift_store.get_instances(client_id, days.first, days.last)
    ids = [inst.shift_id for inst in select_for_pruning(instances, lookup)]
    if not ids:
        return 0

    pruned = 0
    for n, batch in enumerate(_batches(ids, batch_size), start=1):
        try:
            shift_store.delete_batch(batch)
        except Exception as exc:
            logger.error(
                "prune client=%s month=%s: batch %d failed after %d deleted: %s",
                client_id, days.month, n, pruned, exc,
            )
            raise PruningError(f"pruning batch {n} failed: {exc}", pruned_count=pruned) from exc
        pruned += len(batch)
        logger.info("prune client=%s month=%s: batch %d deleted %d", client_id, days.month, n, len(batch))
    return pruned
