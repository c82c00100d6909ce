"""
Time scales used to express RINEX epochs, and their offsets to TAI.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from .leap_seconds import utc_tai_offset

GLONASST_UTC_OFFSET = timedelta(hours=3)


class TimeScale(Enum):
    GPST = "GPST"
    GST = "GST"
    BDT = "BDT"
    QZSST = "QZSST"
    IRNSST = "IRNSST"
    GLONASST = "GLONASST"
    UTC = "UTC"
    TAI = "TAI"

    @staticmethod
    def from_str(s: str) -> "TimeScale":
        """
        Parses either a time scale name (`GPST`) or the 3-letter code used in
        RINEX headers (`GPS`, `GAL`, `GLO`, ...).
        """
        key = s.strip().upper()
        if key in _RINEX_CODE_TO_TIMESCALE:
            return _RINEX_CODE_TO_TIMESCALE[key]
        for ts in TimeScale:
            if ts.value == key:
                return ts
        raise ValueError(f"Unknown time scale: `{s}`")

    @property
    def rinex_code(self) -> str:
        return _TIMESCALE_TO_RINEX_CODE[self]

    @property
    def is_leap_second_based(self) -> bool:
        return self in (TimeScale.UTC, TimeScale.GLONASST)

    def tai_offset(self, reading: Optional[datetime] = None) -> timedelta:
        """
        Returns `TAI - self` for a calendar `reading` expressed in this time
        scale. `reading` is only needed for UTC based time scales.
        """
        if self in _FIXED_TAI_OFFSETS:
            return _FIXED_TAI_OFFSETS[self]
        if reading is None:
            raise ValueError(f"{self.value} offset to TAI depends on the epoch")
        if self == TimeScale.GLONASST:
            utc = reading - GLONASST_UTC_OFFSET
            return utc_tai_offset(utc) - GLONASST_UTC_OFFSET
        return utc_tai_offset(reading)


_FIXED_TAI_OFFSETS = {
    TimeScale.TAI: timedelta(0),
    TimeScale.GPST: timedelta(seconds=19),
    TimeScale.GST: timedelta(seconds=19),
    TimeScale.QZSST: timedelta(seconds=19),
    TimeScale.IRNSST: timedelta(seconds=19),
    TimeScale.BDT: timedelta(seconds=33),
}

_TIMESCALE_TO_RINEX_CODE = {
    TimeScale.GPST: "GPS",
    TimeScale.GST: "GAL",
    TimeScale.BDT: "BDT",
    TimeScale.QZSST: "QZS",
    TimeScale.IRNSST: "IRN",
    TimeScale.GLONASST: "GLO",
    TimeScale.UTC: "UTC",
    TimeScale.TAI: "TAI",
}

_RINEX_CODE_TO_TIMESCALE = {code: ts for ts, code in _TIMESCALE_TO_RINEX_CODE.items()}
