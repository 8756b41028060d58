from datetime import date, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class WeeklyTemplateIn(BaseModel):
    template_id: Optional[int] = None  # set when replacing an existing template
    client_id: str
    weekday: int  # 0=Sun ... 6=Sat
    start_time: time
    end_time: time
    service_code: str
    required_staff_count: int = 1
    two_person_work_flg: bool = False
    judo_ido: str | None = None
    staff_01_user_id: str | None = None
    staff_02_user_id: str | None = None
    staff_03_user_id: str | None = None
    staff_02_attend_flg: bool = False
    staff_03_attend_flg: bool = False
    staff_01_role_code: str | None = None
    staff_02_role_code: str | None = None
    staff_03_role_code: str | None = None
    active: bool = True
    effective_from: date | None = None
    effective_to: date | None = None
    is_biweekly: bool = False
    nth_weeks: list[int] = []

    # The roster screen sends null for "not set"
    @field_validator("is_biweekly", "two_person_work_flg", "staff_02_attend_flg", "staff_03_attend_flg", mode="before")
    @classmethod
    def _null_flag(cls, v):
        return False if v is None else v

    @field_validator("nth_weeks", mode="before")
    @classmethod
    def _null_nth_weeks(cls, v):
        return [] if v is None else v


class WeeklyTemplateOut(WeeklyTemplateIn):
    model_config = ConfigDict(from_attributes=True)

    template_id: int


class TemplateBulkUpsert(BaseModel):
    rows: list[WeeklyTemplateIn] = []


class TemplateBulkDelete(BaseModel):
    template_ids: list[int]


class PreviewRequest(BaseModel):
    client_id: str
    month: str | None = None  # YYYY-MM, defaults to the current month
    policy: str = "skip_conflict"
    recurrence_enabled: bool = True


class DeployRequest(BaseModel):
    client_id: str
    month: str
    policy: str


class BulkDeployRequest(BaseModel):
    month: str
    policy: str
