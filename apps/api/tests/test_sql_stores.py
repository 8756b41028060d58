from datetime import date, time

import pytest
from sqlalchemy import select

from shift_roster.core.errors import InvalidRequestError, StoreError
from shift_roster.models.shift import Shift
from shift_roster.models.shift_weekly_template import ShiftWeeklyTemplate
from shift_roster.services.deploy import deploy_month
from shift_roster.services.stores import SqlShiftStore, SqlTemplateStore


def _template_row(**kw):
    row = {
        "client_id": "C1",
        "weekday": 1,
        "start_time": time(9, 0),
        "end_time": time(10, 0),
        "required_staff_count": 1,
        "service_code": "SV01",
        "nth_weeks": [],
        "is_biweekly": False,
        "active": True,
    }
    row.update(kw)
    return row


def _add_shift(db, day, start=time(9, 0), end=time(10, 0), client_id="C1", **kw):
    kw.setdefault("required_staff_count", 1)
    s = Shift(client_id=client_id, shift_date=day, start_time=start, end_time=end, **kw)
    db.add(s)
    db.commit()
    return s


def _days(db, client_id="C1"):
    return sorted(
        (s.shift_date.day, s.start_time.hour)
        for s in db.execute(select(Shift).where(Shift.client_id == client_id)).scalars()
    )


def test_bulk_upsert_inserts_then_updates_on_natural_key(db):
    store = SqlTemplateStore(db)
    store.bulk_upsert([_template_row(), _template_row(weekday=3)])
    store.bulk_upsert([_template_row(end_time=time(11, 0), nth_weeks=[3, 1, 3])])

    templates = store.list_templates("C1")
    assert len(templates) == 2
    monday = templates[0]
    assert monday.end_time == time(11, 0)
    assert monday.nth_weeks == [1, 3]


def test_bulk_upsert_replaces_row_by_template_id(db):
    store = SqlTemplateStore(db)
    store.bulk_upsert([_template_row()])
    [old] = store.list_templates("C1")

    store.bulk_upsert([_template_row(template_id=old.template_id, weekday=2)])

    assert [t.weekday for t in store.list_templates("C1")] == [2]


def test_active_templates_and_client_listing(db):
    store = SqlTemplateStore(db)
    store.bulk_upsert(
        [
            _template_row(),
            _template_row(weekday=2, active=False),
            _template_row(client_id="C2"),
            _template_row(client_id="C3", active=False),
        ]
    )
    assert [t.weekday for t in store.get_active_templates("C1")] == [1]
    assert store.client_ids_with_active_templates() == ["C1", "C2"]


def test_bulk_delete(db):
    store = SqlTemplateStore(db)
    store.bulk_upsert([_template_row(), _template_row(weekday=2)])
    ids = [t.template_id for t in store.list_templates("C1")]
    assert store.bulk_delete(ids[:1]) == 1
    assert len(store.list_templates("C1")) == 1


def test_get_instances_is_scoped_by_client_and_range(db):
    _add_shift(db, date(2025, 10, 1))
    _add_shift(db, date(2025, 10, 31))
    _add_shift(db, date(2025, 11, 1))
    _add_shift(db, date(2025, 10, 15), client_id="C2")

    got = SqlShiftStore(db).get_instances("C1", date(2025, 10, 1), date(2025, 10, 31))
    assert [s.shift_date.day for s in got] == [1, 31]


def test_delete_batch(db):
    a = _add_shift(db, date(2025, 10, 1))
    _add_shift(db, date(2025, 10, 2))
    SqlShiftStore(db).delete_batch([a.shift_id])
    assert _days(db) == [(2, 9)]


def test_materialize_skip_conflict_is_repeatable(db):
    SqlTemplateStore(db).bulk_upsert([_template_row(start_time=time(9, 30), end_time=time(10, 30))])
    _add_shift(db, date(2025, 10, 6))
    store = SqlShiftStore(db)

    assert store.materialize("C1", "2025-10", "skip_conflict") == 3
    assert _days(db) == [(6, 9), (13, 9), (20, 9), (27, 9)]
    assert store.materialize("C1", "2025-10", "skip_conflict") == 0


def test_materialize_overwrite_only_replaces_overlapping_rows(db):
    SqlTemplateStore(db).bulk_upsert([_template_row(start_time=time(9, 30), end_time=time(10, 30), nth_weeks=[1])])
    _add_shift(db, date(2025, 10, 6))  # overlaps the candidate
    _add_shift(db, date(2025, 10, 6), time(14, 0), time(15, 0))  # does not

    assert SqlShiftStore(db).materialize("C1", "2025-10", "overwrite_only") == 1
    shifts = db.execute(select(Shift).order_by(Shift.start_time)).scalars().all()
    assert [(s.start_time, s.service_code) for s in shifts] == [(time(9, 30), "SV01"), (time(14, 0), None)]


def test_materialize_delete_month_insert_clears_only_that_month_and_client(db):
    SqlTemplateStore(db).bulk_upsert([_template_row(nth_weeks=[1])])
    _add_shift(db, date(2025, 10, 2), time(18, 0), time(19, 0))
    _add_shift(db, date(2025, 11, 3))
    _add_shift(db, date(2025, 10, 2), client_id="C2")

    assert SqlShiftStore(db).materialize("C1", "2025-10", "delete_month_insert") == 1
    assert _days(db) == [(3, 9), (6, 9)]
    assert _days(db, "C2") == [(2, 9)]


def test_materialize_without_candidates_deletes_nothing(db):
    _add_shift(db, date(2025, 10, 2))
    assert SqlShiftStore(db).materialize("C1", "2025-10", "delete_month_insert") == 0
    assert _days(db) == [(2, 9)]


def test_materialize_copies_staffing(db):
    SqlTemplateStore(db).bulk_upsert(
        [_template_row(nth_weeks=[1], required_staff_count=2, two_person_work_flg=True, staff_01_user_id="u1", judo_ido="0030")]
    )
    SqlShiftStore(db).materialize("C1", "2025-10", "skip_conflict")
    [s] = db.execute(select(Shift)).scalars().all()
    assert (s.required_staff_count, s.two_person_work_flg, s.staff_01_user_id, s.judo_ido) == (2, True, "u1", "0030")


def test_deploy_end_to_end_prunes_ineligible_weeks(db):
    SqlTemplateStore(db).bulk_upsert(
        [_template_row(is_biweekly=True, nth_weeks=[1, 2, 3], effective_from=date(2025, 10, 6))]
    )
    _add_shift(db, date(2025, 10, 13))  # nth 2: still claimed
    _add_shift(db, date(2025, 10, 27))  # nth 4: no longer claimed
    _add_shift(db, date(2025, 10, 27), time(15, 0), time(16, 0))  # other slot

    result = deploy_month(SqlTemplateStore(db), SqlShiftStore(db), "C1", "2025-10", "skip_conflict")

    assert result.to_dict() == {"inserted_count": 2, "pruned_count": 1, "status": "done"}
    assert _days(db) == [(6, 9), (13, 9), (20, 9), (27, 15)]


def test_database_errors_surface_as_store_errors(db, engine):
    ShiftWeeklyTemplate.__table__.drop(engine)
    with pytest.raises(StoreError):
        SqlTemplateStore(db).get_active_templates("C1")


def test_materialize_rejects_unknown_policy_without_touching_shifts(db):
    SqlTemplateStore(db).bulk_upsert([_template_row(nth_weeks=[1])])
    _add_shift(db, date(2025, 10, 2), time(18, 0), time(19, 0))

    with pytest.raises(InvalidRequestError):
        SqlShiftStore(db).materialize("C1", "2025-10", "skip_conflcit")

    assert _days(db) == [(2, 18)]
