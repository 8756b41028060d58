from datetime import time
from typing import Tuple, Union

MINUTES_PER_DAY = 24 * 60


def _to_minutes(t: Union[time, str]) -> int:
    if hasattr(t, "hour"):
        return int(t.hour) * 60 + int(t.minute)
    s = str(t)
    hh, mm = s[:5].split(":")
    return int(hh) * 60 + int(mm)


def window_minutes(start, end) -> Tuple[int, int]:
    """(start, end) in minutes from midnight; an end at or before the start rolls into the next day."""
    s = _to_minutes(start)
    e = _to_minutes(end)
    if e <= s:
        e += MINUTES_PER_DAY
    return s, e


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """
    Half-open intersection of two windows on the same calendar date.

    An overnight window (22:00-02:00) also covers the early hours of the
    same date, so b is compared at -24h/0/+24h. Both windows are shorter
    than two days, so those three offsets cover every intersection.
    """
    a_s, a_e = window_minutes(a_start, a_end)
    b_s, b_e = window_minutes(b_start, b_end)
    for offset in (-MINUTES_PER_DAY, 0, MINUTES_PER_DAY):
        if a_s < b_e + offset and b_s + offset < a_e:
            return True
    return False
