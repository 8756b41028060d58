from sqlalchemy import Boolean, Column, Date, Integer, Text, Time
from sqlalchemy.sql import func
from sqlalchemy.sql.sqltypes import DateTime

from shift_roster.core.database import Base


class Shift(Base):
    __tablename__ = "shift"

    shift_id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Text, nullable=False, index=True)

    shift_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    required_staff_count = Column(Integer, nullable=False, default=1)

    service_code = Column(Text, nullable=True)
    two_person_work_flg = Column(Boolean, nullable=False, default=False)
    judo_ido = Column(Text, nullable=True)

    staff_01_user_id = Column(Text, nullable=True)
    staff_02_user_id = Column(Text, nullable=True)
    staff_03_user_id = Column(Text, nullable=True)
    staff_02_attend_flg = Column(Boolean, nullable=False, default=False)
    staff_03_attend_flg = Column(Boolean, nullable=False, default=False)
    staff_01_role_code = Column(Text, nullable=True)
    staff_02_role_code = Column(Text, nullable=True)
    staff_03_role_code = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
