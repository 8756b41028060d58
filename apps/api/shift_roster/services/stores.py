"""
Template/shift store contracts and their SQLAlchemy implementations.

The preview/deploy services only see the Protocols; any store that
satisfies them (another database, a remote API, a test fake) can be
plugged in.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Protocol, Sequence

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shift_roster.core.errors import InvalidRequestError, StoreError
from shift_roster.models.shift import Shift
from shift_roster.models.shift_weekly_template import ShiftWeeklyTemplate
from shift_roster.scheduling.overlap import overlaps
from shift_roster.scheduling.recurrence import MonthDays, iter_candidates
from shift_roster.scheduling.types import POLICIES, STAFFING_FIELDS

logger = logging.getLogger(__name__)

NATURAL_KEY = ("client_id", "weekday", "start_time", "required_staff_count")
TEMPLATE_FIELDS = NATURAL_KEY + (
    "end_time",
    "nth_weeks",
    "is_biweekly",
    "effective_from",
    "effective_to",
    "active",
) + STAFFING_FIELDS


class TemplateStore(Protocol):
    def get_active_templates(self, client_id: str) -> Sequence: ...


class ClientTemplateStore(TemplateStore, Protocol):
    """A template store that can also enumerate clients, for bulk deployment."""

    def client_ids_with_active_templates(self) -> Sequence[str]: ...


class ShiftStore(Protocol):
    def get_instances(self, client_id: str, start: date, end: date) -> Sequence: ...

    def materialize(self, client_id: str, month: str, policy: str) -> int: ...

    def delete_batch(self, shift_ids: Sequence[int]) -> None: ...


@contextmanager
def _store_call(db: Session, what: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("%s failed: %s", what, exc)
        raise StoreError(f"{what} failed: {exc}") from exc


class SqlTemplateStore:
    def __init__(self, db: Session):
        self.db = db

    def get_active_templates(self, client_id: str) -> List[ShiftWeeklyTemplate]:
        with _store_call(self.db, "template read"):
            return list(
                self.db.execute(
                    select(ShiftWeeklyTemplate)
                    .where(
                        and_(
                            ShiftWeeklyTemplate.client_id == client_id,
                            ShiftWeeklyTemplate.active == True,  # noqa: E712
                        )
                    )
                    .order_by(ShiftWeeklyTemplate.weekday, ShiftWeeklyTemplate.start_time)
                )
                .scalars()
                .all()
            )

    def list_templates(self, client_id: str) -> List[ShiftWeeklyTemplate]:
        with _store_call(self.db, "template read"):
            return list(
                self.db.execute(
                    select(ShiftWeeklyTemplate)
                    .where(ShiftWeeklyTemplate.client_id == client_id)
                    .order_by(ShiftWeeklyTemplate.weekday, ShiftWeeklyTemplate.start_time)
                )
                .scalars()
                .all()
            )

    def client_ids_with_active_templates(self) -> List[str]:
        with _store_call(self.db, "client list"):
            return list(
                self.db.execute(
                    select(ShiftWeeklyTemplate.client_id)
                    .where(ShiftWeeklyTemplate.active == True)  # noqa: E712
                    .distinct()
                    .order_by(ShiftWeeklyTemplate.client_id)
                )
                .scalars()
                .all()
            )

    def bulk_upsert(self, rows: Sequence[dict]) -> int:
        """
        Rows that carry a template_id replace that record: the old rows are
        deleted first, then every row is upserted on the natural key
        (client_id, weekday, start_time, required_staff_count).
        """
        replaced_ids = [r["template_id"] for r in rows if r.get("template_id") is not None]
        with _store_call(self.db, "template upsert"):
            if replaced_ids:
                self.db.execute(delete(ShiftWeeklyTemplate).where(ShiftWeeklyTemplate.template_id.in_(replaced_ids)))

            for r in rows:
                values = {k: r.get(k) for k in TEMPLATE_FIELDS if k in r}
                values["nth_weeks"] = sorted(set(values.get("nth_weeks") or []))
                current = self.db.execute(
                    select(ShiftWeeklyTemplate).where(
                        and_(*(getattr(ShiftWeeklyTemplate, k) == values[k] for k in NATURAL_KEY))
                    )
                ).scalar_one_or_none()
                if current is None:
                    self.db.add(ShiftWeeklyTemplate(**values))
                else:
                    for k, v in values.items():
                        setattr(current, k, v)
                self.db.flush()
            self.db.commit()
        logger.info("upserted %d weekly templates (%d replaced)", len(rows), len(replaced_ids))
        return len(rows)

    def bulk_delete(self, template_ids: Sequence[int]) -> int:
        with _store_call(self.db, "template delete"):
            result = self.db.execute(
                delete(ShiftWeeklyTemplate).where(ShiftWeeklyTemplate.template_id.in_(list(template_ids)))
            )
            self.db.commit()
        return result.rowcount or 0


class SqlShiftStore:
    def __init__(self, db: Session):
        self.db = db

    def get_instances(self, client_id: str, start: date, end: date) -> List[Shift]:
        with _store_call(self.db, "shift read"):
            return list(
                self.db.execute(
                    select(Shift)
                    .where(
                        and_(
                            Shift.client_id == client_id,
                            Shift.shift_date >= start,
                            Shift.shift_date <= end,
                        )
                    )
                    .order_by(Shift.shift_date, Shift.start_time, Shift.shift_id)
                )
                .scalars()
                .all()
            )

    def delete_batch(self, shift_ids: Sequence[int]) -> None:
        with _store_call(self.db, "shift delete"):
            self.db.execute(delete(Shift).where(Shift.shift_id.in_(list(shift_ids))))
            self.db.commit()

    def materialize(self, client_id: str, month: str, policy: str) -> int:
        """
        Insert this month's template occurrences in one transaction.

          skip_conflict        insert only candidates that overlap nothing stored
          overwrite_only       drop stored shifts a candidate overlaps, insert all
          delete_month_insert  drop the whole month, insert all

        Nothing is deleted when the templates yield no candidates.
        """
        if policy not in POLICIES:
            raise InvalidRequestError(f"policy must be one of {', '.join(POLICIES)}")
        days = MonthDays(month)
        templates = SqlTemplateStore(self.db).get_active_templates(client_id)
        candidates = list(iter_candidates(templates, days, recurrence_enabled=True))
        existing = self.get_instances(client_id, days.first, days.last)

        if not candidates:
            return 0

        def hits(c, e) -> bool:
            return c.shift_date == e.shift_date and overlaps(c.start_time, c.end_time, e.start_time, e.end_time)

        if policy == "skip_conflict":
            to_insert = [c for c in candidates if not any(hits(c, e) for e in existing)]
            to_delete = []
        elif policy == "overwrite_only":
            to_insert = candidates
            to_delete = [e for e in existing if any(hits(c, e) for c in candidates)]
        elif policy == "delete_month_insert":
            to_insert = candidates
            to_delete = list(existing)
        else:
            raise InvalidRequestError(f"unknown policy {policy!r}")

        with _store_call(self.db, "materialize"):
            if to_delete:
                self.db.execute(delete(Shift).where(Shift.shift_id.in_([e.shift_id for e in to_delete])))
            for c in to_insert:
                self.db.add(
                    Shift(
                        client_id=client_id,
                        shift_date=c.shift_date,
                        start_time=c.start_time,
                        end_time=c.end_time,
                        required_staff_count=c.required_staff_count,
                        **{k: getattr(c, k) for k in STAFFING_FIELDS},
                    )
                )
            self.db.commit()

        logger.info(
            "materialize client=%s month=%s policy=%s inserted=%d deleted=%d",
            client_id, month, policy, len(to_insert), len(to_delete),
        )
        return len(to_insert)
