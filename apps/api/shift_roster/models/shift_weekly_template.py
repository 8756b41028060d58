from sqlalchemy import JSON, Boolean, Column, Date, Integer, Text, Time, UniqueConstraint

from shift_roster.core.database import Base


class ShiftWeeklyTemplate(Base):
    __tablename__ = "shift_weekly_template"
    __table_args__ = (
        UniqueConstraint("client_id", "weekday", "start_time", "required_staff_count", name="uq_weekly_template_slot"),
    )

    template_id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Text, nullable=False, index=True)

    weekday = Column(Integer, nullable=False)  # 0=Sun ... 6=Sat
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)  # <= start_time means overnight
    required_staff_count = Column(Integer, nullable=False, default=1)

    service_code = Column(Text, nullable=False)
    two_person_work_flg = Column(Boolean, nullable=False, default=False)
    judo_ido = Column(Text, nullable=True)  # HHMM

    staff_01_user_id = Column(Text, nullable=True)
    staff_02_user_id = Column(Text, nullable=True)
    staff_03_user_id = Column(Text, nullable=True)
    staff_02_attend_flg = Column(Boolean, nullable=False, default=False)
    staff_03_attend_flg = Column(Boolean, nullable=False, default=False)
    staff_01_role_code = Column(Text, nullable=True)
    staff_02_role_code = Column(Text, nullable=True)
    staff_03_role_code = Column(Text, nullable=True)

    nth_weeks = Column(JSON, nullable=True)  # [1..5], empty/null = every week
    is_biweekly = Column(Boolean, nullable=False, default=False)
    effective_from = Column(Date, nullable=True)
    effective_to = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
