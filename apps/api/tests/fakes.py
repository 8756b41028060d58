from __future__ import annotations

from datetime import date, time

from shift_roster.core.errors import StoreError
from shift_roster.scheduling.types import ShiftInstance, WeeklyTemplate


def hm(s: str) -> time:
    hh, mm = s.split(":")
    return time(int(hh), int(mm))


def make_template(**kw) -> WeeklyTemplate:
    kw.setdefault("client_id", "C1")
    kw.setdefault("weekday", 1)
    kw.setdefault("service_code", "SV01")
    kw["start_time"] = hm(kw.pop("start", "09:00"))
    kw["end_time"] = hm(kw.pop("end", "10:00"))
    return WeeklyTemplate(**kw)


_next_id = [0]


def make_shift(day: date, start: str = "09:00", end: str = "10:00", **kw) -> ShiftInstance:
    if "shift_id" not in kw:
        _next_id[0] += 1
        kw["shift_id"] = _next_id[0]
    kw.setdefault("client_id", "C1")
    return ShiftInstance(shift_date=day, start_time=hm(start), end_time=hm(end), **kw)


class FakeTemplateStore:
    def __init__(self, templates=(), fail=False):
        self.templates = list(templates)
        self.fail = fail
        self.calls = 0

    def get_active_templates(self, client_id):
        self.calls += 1
        if self.fail:
            raise StoreError("template store unavailable")
        return [t for t in self.templates if t.client_id == client_id and t.active]

    def client_ids_with_active_templates(self):
        return sorted({t.client_id for t in self.templates if t.active})


class FakeShiftStore:
    def __init__(self, instances=(), inserted=0, fail_materialize_for=(), fail_on_batch=None):
        self.instances = list(instances)
        self.inserted = inserted
        self.fail_materialize_for = set(fail_materialize_for)
        self.fail_on_batch = fail_on_batch
        self.read_calls = 0
        self.materialize_calls = []
        self.deleted_batches = []
        self.batch_attempts = 0

    def get_instances(self, client_id, start, end):
        self.read_calls += 1
        return [i for i in self.instances if i.client_id == client_id and start <= i.shift_date <= end]

    def materialize(self, client_id, month, policy):
        self.materialize_calls.append((client_id, month, policy))
        if client_id in self.fail_materialize_for:
            raise StoreError("materialize failed")
        return self.inserted

    def delete_batch(self, shift_ids):
        self.batch_attempts += 1
        if self.fail_on_batch == self.batch_attempts:
            raise StoreError("delete timed out")
        ids = set(shift_ids)
        self.instances = [i for i in self.instances if i.shift_id not in ids]
        self.deleted_batches.append(list(shift_ids))
