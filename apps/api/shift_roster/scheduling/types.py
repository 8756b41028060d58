from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import List, Literal, Optional

DeployPolicy = Literal["skip_conflict", "overwrite_only", "delete_month_insert"]
POLICIES = ("skip_conflict", "overwrite_only", "delete_month_insert")

RowAction = Literal["new", "new_conflict", "keep", "delete"]

# Copied verbatim from template -> candidate -> shift.
STAFFING_FIELDS = (
    "service_code",
    "two_person_work_flg",
    "judo_ido",
    "staff_01_user_id",
    "staff_02_user_id",
    "staff_03_user_id",
    "staff_02_attend_flg",
    "staff_03_attend_flg",
    "staff_01_role_code",
    "staff_02_role_code",
    "staff_03_role_code",
)

_STAFFING_DEFAULTS = {
    "two_person_work_flg": False,
    "staff_02_attend_flg": False,
    "staff_03_attend_flg": False,
}


def staffing_of(obj) -> dict:
    """Staffing fields of a template, shift or row (ORM object or dataclass)."""
    out = {}
    for name in STAFFING_FIELDS:
        value = getattr(obj, name, None)
        if value is None and name in _STAFFING_DEFAULTS:
            value = _STAFFING_DEFAULTS[name]
        out[name] = value
    return out


@dataclass(kw_only=True)
class Staffing:
    service_code: Optional[str] = None
    two_person_work_flg: bool = False
    judo_ido: Optional[str] = None
    staff_01_user_id: Optional[str] = None
    staff_02_user_id: Optional[str] = None
    staff_03_user_id: Optional[str] = None
    staff_02_attend_flg: bool = False
    staff_03_attend_flg: bool = False
    staff_01_role_code: Optional[str] = None
    staff_02_role_code: Optional[str] = None
    staff_03_role_code: Optional[str] = None


@dataclass(kw_only=True)
class WeeklyTemplate(Staffing):
    client_id: str
    weekday: int  # 0=Sun ... 6=Sat
    start_time: time
    end_time: time
    required_staff_count: int = 1
    nth_weeks: List[int] = field(default_factory=list)
    is_biweekly: bool = False
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    active: bool = True
    template_id: Optional[int] = None


@dataclass(kw_only=True)
class ShiftInstance(Staffing):
    client_id: str
    shift_date: date
    start_time: time
    end_time: time
    required_staff_count: int = 1
    shift_id: Optional[int] = None


@dataclass(kw_only=True)
class RosterRow(Staffing):
    """One line of a preview: a candidate (is_template) or an existing shift."""

    client_id: str
    shift_date: date
    weekday: int
    start_time: time
    end_time: time
    required_staff_count: int
    is_template: bool
    conflict: bool = False
    action: RowAction = "new"
    instance_id: Optional[int] = None
    template_id: Optional[int] = None
