from __future__ import annotations

import logging
from typing import List, Optional

from shift_roster.core.config import settings
from shift_roster.scheduling.recurrence import current_month, iter_candidates
from shift_roster.scheduling.reconcile import reconcile
from shift_roster.scheduling.types import RosterRow
from shift_roster.services.stores import ShiftStore, TemplateStore
from shift_roster.services.validators import validate_client_id, validate_month, validate_policy

logger = logging.getLogger(__name__)


def preview_month(
    template_store: TemplateStore,
    shift_store: ShiftStore,
    client_id: str,
    month: Optional[str] = None,
    policy: str = "skip_conflict",
    recurrence_enabled: bool = True,
) -> List[RosterRow]:
    """
    Rows a deployment of `month` would produce for one client, merged with
    the shifts already stored, sorted by (date, start_time). Read-only.

    An omitted month defaults to the current month in settings.timezone.
    """
    client_id = validate_client_id(client_id)
    days = validate_month(current_month(settings.timezone) if month is None else month)
    policy = validate_policy(policy)

    templates = template_store.get_active_templates(client_id)
    candidates = list(iter_candidates(templates, days, recurrence_enabled))
    existing = shift_store.get_instances(client_id, days.first, days.last)

    rows = reconcile(candidates, existing, policy)
    logger.info(
        "preview client=%s month=%s policy=%s recurrence=%s templates=%d candidates=%d existing=%d rows=%d",
        client_id, days.month, policy, recurrence_enabled,
        len(templates), len(candidates), len(existing), len(rows),
    )
    return rows
