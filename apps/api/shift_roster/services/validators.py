import re
from typing import Iterable, List, Optional

from shift_roster.core.errors import InvalidRequestError
from shift_roster.scheduling.recurrence import MonthDays
from shift_roster.scheduling.types import POLICIES

ROLE_CODES = {"-999", "01", "02"}
_JUDO_IDO_RE = re.compile(r"^[0-2][0-9][0-5][0-9]$")


def validate_client_id(client_id: Optional[str]) -> str:
    if client_id is None or not str(client_id).strip():
        raise InvalidRequestError("client_id is required")
    return str(client_id).strip()


def validate_policy(policy: Optional[str]) -> str:
    if policy not in POLICIES:
        raise InvalidRequestError(f"policy must be one of {', '.join(POLICIES)}")
    return policy


def validate_month(month: Optional[str]) -> MonthDays:
    if not month:
        raise InvalidRequestError("month is required")
    return MonthDays(month)


def template_errors(row) -> List[str]:
    """Field-level problems with one template row; empty list means valid."""
    errs: List[str] = []
    if not (row.client_id or "").strip():
        errs.append("client_id is required")
    if row.weekday is None or not 0 <= row.weekday <= 6:
        errs.append("weekday must be 0 (Sun) to 6 (Sat)")
    if not row.service_code:
        errs.append("service_code is required")
    if row.required_staff_count is None or row.required_staff_count < 1:
        errs.append("required_staff_count must be at least 1")
    if any(n < 1 or n > 5 for n in (row.nth_weeks or [])):
        errs.append("nth_weeks must be between 1 and 5")
    if row.judo_ido and not _JUDO_IDO_RE.match(row.judo_ido):
        errs.append("judo_ido must be HHMM")
    for code in (row.staff_01_role_code, row.staff_02_role_code, row.staff_03_role_code):
        if code and code not in ROLE_CODES:
            errs.append("role codes must be '-999', '01' or '02'")
            break
    if row.effective_from and row.effective_to and row.effective_from > row.effective_to:
        errs.append("effective_from must be on or before effective_to")
    return errs


def duplicate_slots(rows: Iterable) -> List[str]:
    """(client_id, weekday, start_time) keys that occur more than once."""
    seen = set()
    dupes: List[str] = []
    for r in rows:
        key = (r.client_id, r.weekday, r.start_time)
        if key in seen:
            dupes.append(f"{r.client_id}|{r.weekday}|{r.start_time:%H:%M}")
        seen.add(key)
    return dupes


def validate_template_rows(rows: list) -> None:
    if not rows:
        raise InvalidRequestError("empty payload")
    problems: List[str] = []
    for i, r in enumerate(rows):
        problems.extend(f"rows[{i}]: {e}" for e in template_errors(r))
    dupes = duplicate_slots(rows)
    if dupes:
        problems.append("duplicate weekday/start_time: " + ", ".join(dupes))
    if problems:
        raise InvalidRequestError("; ".join(problems))
