"""
Nanosecond resolution epochs tied to a time scale.

An `Epoch` stores the calendar reading of a clock (as `numpy.datetime64[ns]`)
together with the time scale that clock runs in. Epochs in different time
scales compare through TAI.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Tuple

import numpy as np

from .timescale import TimeScale

NS_PER_SECOND = 1_000_000_000
NS_PER_DAY = 86400 * NS_PER_SECOND
UNIX_EPOCH = datetime(1970, 1, 1)
JD_UNIX_EPOCH = Decimal("2440587.5")
MJD_JD_OFFSET = Decimal("2400000.5")

_ISO_EPOCH_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,9}))?)?)?"
    r"(?:\s+([A-Za-z]+))?$"
)


def timedelta_to_nanoseconds(dt: timedelta) -> int:
    return (dt.days * 86400 + dt.seconds) * NS_PER_SECOND + dt.microseconds * 1000


def nanoseconds_to_timedelta(ns: int) -> timedelta:
    return timedelta(microseconds=ns // 1000)


@dataclass(frozen=True, eq=False)
class Epoch:
    timestamp: np.datetime64
    timescale: TimeScale = TimeScale.GPST

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", np.datetime64(self.timestamp, "ns"))

    @staticmethod
    def from_gregorian(
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        nanos: int = 0,
        timescale: TimeScale = TimeScale.GPST,
    ) -> "Epoch":
        if not (0 <= hour < 24 and 0 <= minute < 60 and 0 <= second <= 60):
            raise ValueError(
                f"Invalid time of day: {hour:02d}:{minute:02d}:{second:02d}"
            )
        if not 0 <= nanos < NS_PER_SECOND:
            raise ValueError(f"Invalid nanoseconds: {nanos}")
        date = np.datetime64(f"{year:04d}-{month:02d}-{day:02d}", "ns")
        seconds = hour * 3600 + minute * 60 + second
        return Epoch(
            date + np.timedelta64(seconds * NS_PER_SECOND + nanos, "ns"), timescale
        )

    @staticmethod
    def from_datetime(dt: datetime, timescale: TimeScale = TimeScale.GPST) -> "Epoch":
        return Epoch(np.datetime64(dt, "ns"), timescale)

    @staticmethod
    def from_nanoseconds(ns: int, timescale: TimeScale = TimeScale.GPST) -> "Epoch":
        return Epoch(np.datetime64(ns, "ns"), timescale)

    @staticmethod
    def from_tai_nanoseconds(tai_ns: int, timescale: TimeScale) -> "Epoch":
        if not timescale.is_leap_second_based:
            offset = timescale.tai_offset()
            return Epoch.from_nanoseconds(tai_ns - timedelta_to_nanoseconds(offset), timescale)
        # the offset depends on the reading itself; two passes settle it
        guess = Epoch.from_nanoseconds(tai_ns, timescale)
        for _ in range(2):
            offset = timescale.tai_offset(guess.to_datetime())
            guess = Epoch.from_nanoseconds(tai_ns - timedelta_to_nanoseconds(offset), timescale)
        return guess

    @staticmethod
    def from_str(s: str) -> "Epoch":
        """
        Parses an epoch description. Supported forms are:

            YYYY-MM-DD[THH:MM[:SS[.fffffffff]]] [TS]
            JD <days> [TS]
            MJD <days> [TS]

        where `TS` is a time scale name (UTC when omitted).
        """
        text = s.strip()
        fields = text.split()
        if fields and fields[0].upper() in ("JD", "MJD"):
            if len(fields) not in (2, 3):
                raise ValueError(f"Invalid epoch description: `{s}`")
            try:
                days = Decimal(fields[1])
            except InvalidOperation:
                raise ValueError(f"Invalid epoch description: `{s}`")
            if fields[0].upper() == "MJD":
                days += MJD_JD_OFFSET
            timescale = TimeScale.from_str(fields[2]) if len(fields) == 3 else TimeScale.UTC
            ns = int((days - JD_UNIX_EPOCH) * NS_PER_DAY)
            return Epoch.from_nanoseconds(ns, timescale)

        match = _ISO_EPOCH_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Invalid epoch description: `{s}`")
        year, month, day, hour, minute, second, frac, ts = match.groups()
        nanos = int(frac.ljust(9, "0")) if frac else 0
        timescale = TimeScale.from_str(ts) if ts else TimeScale.UTC
        return Epoch.from_gregorian(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            nanos,
            timescale,
        )

    @property
    def nanoseconds(self) -> int:
        """Calendar reading as nanoseconds since 1970-01-01 (in `timescale`)."""
        return int(self.timestamp.astype(np.int64))

    def to_datetime(self) -> datetime:
        """Calendar reading truncated to microseconds."""
        return UNIX_EPOCH + timedelta(microseconds=self.nanoseconds // 1000)

    def to_gregorian(self) -> Tuple[int, int, int, int, int, int, int]:
        """Returns (year, month, day, hour, minute, second, nanos)."""
        ns = self.nanoseconds
        dt = UNIX_EPOCH + timedelta(seconds=ns // NS_PER_SECOND)
        return dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second, ns % NS_PER_SECOND

    def tai_nanoseconds(self) -> int:
        if self.timescale.is_leap_second_based:
            offset = self.timescale.tai_offset(self.to_datetime())
        else:
            offset = self.timescale.tai_offset()
        return self.nanoseconds + timedelta_to_nanoseconds(offset)

    def in_timescale(self, timescale: TimeScale) -> "Epoch":
        if timescale == self.timescale:
            return self
        return Epoch.from_tai_nanoseconds(self.tai_nanoseconds(), timescale)

    def __add__(self, other: timedelta) -> "Epoch":
        if not isinstance(other, timedelta):
            return NotImplemented
        return Epoch.from_nanoseconds(
            self.nanoseconds + timedelta_to_nanoseconds(other), self.timescale
        )

    def __sub__(self, other):
        if isinstance(other, Epoch):
            return nanoseconds_to_timedelta(self.tai_nanoseconds() - other.tai_nanoseconds())
        if isinstance(other, timedelta):
            return Epoch.from_nanoseconds(
                self.nanoseconds - timedelta_to_nanoseconds(other), self.timescale
            )
        return NotImplemented

    def __eq__(self, other) -> bool:
        if not isinstance(other, Epoch):
            return NotImplemented
        return self.tai_nanoseconds() == other.tai_nanoseconds()

    def __hash__(self) -> int:
        return hash(self.tai_nanoseconds())

    def __lt__(self, other: "Epoch") -> bool:
        return self.tai_nanoseconds() < other.tai_nanoseconds()

    def __le__(self, other: "Epoch") -> bool:
        return self.tai_nanoseconds() <= other.tai_nanoseconds()

    def __gt__(self, other: "Epoch") -> bool:
        return self.tai_nanoseconds() > other.tai_nanoseconds()

    def __ge__(self, other: "Epoch") -> bool:
        return self.tai_nanoseconds() >= other.tai_nanoseconds()

    def __str__(self) -> str:
        year, month, day, hour, minute, second, nanos = self.to_gregorian()
        text = f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:02d}"
        if nanos:
            text += f".{nanos:09d}".rstrip("0")
        return f"{text} {self.timescale.value}"
