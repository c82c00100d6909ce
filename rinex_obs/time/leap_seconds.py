"""
leap_seconds.py

Utilities for computing number of elapsed leap seconds.

The table shipped here is the IERS list as of Bulletin C 70. A newer
`leap-seconds.list` file can be parsed with `parse_tai_leap_seconds` and
passed to `utc_tai_offset`.
"""

from datetime import datetime, timedelta
from collections import namedtuple
from typing import List, Optional

OffsetEpoch = namedtuple('OffsetEpoch', ['epoch', 'offset'])
NTP_EPOCH = datetime(year=1900, month=1, day=1, hour=0, minute=0, second=0)

LEAP_SECOND_EPOCHS: List[OffsetEpoch] = [
    OffsetEpoch(datetime(1972, 1, 1), 10),
    OffsetEpoch(datetime(1972, 7, 1), 11),
    OffsetEpoch(datetime(1973, 1, 1), 12),
    OffsetEpoch(datetime(1974, 1, 1), 13),
    OffsetEpoch(datetime(1975, 1, 1), 14),
    OffsetEpoch(datetime(1976, 1, 1), 15),
    OffsetEpoch(datetime(1977, 1, 1), 16),
    OffsetEpoch(datetime(1978, 1, 1), 17),
    OffsetEpoch(datetime(1979, 1, 1), 18),
    OffsetEpoch(datetime(1980, 1, 1), 19),
    OffsetEpoch(datetime(1981, 7, 1), 20),
    OffsetEpoch(datetime(1982, 7, 1), 21),
    OffsetEpoch(datetime(1983, 7, 1), 22),
    OffsetEpoch(datetime(1985, 7, 1), 23),
    OffsetEpoch(datetime(1988, 1, 1), 24),
    OffsetEpoch(datetime(1990, 1, 1), 25),
    OffsetEpoch(datetime(1991, 1, 1), 26),
    OffsetEpoch(datetime(1992, 7, 1), 27),
    OffsetEpoch(datetime(1993, 7, 1), 28),
    OffsetEpoch(datetime(1994, 7, 1), 29),
    OffsetEpoch(datetime(1996, 1, 1), 30),
    OffsetEpoch(datetime(1997, 7, 1), 31),
    OffsetEpoch(datetime(1999, 1, 1), 32),
    OffsetEpoch(datetime(2006, 1, 1), 33),
    OffsetEpoch(datetime(2009, 1, 1), 34),
    OffsetEpoch(datetime(2012, 7, 1), 35),
    OffsetEpoch(datetime(2015, 7, 1), 36),
    OffsetEpoch(datetime(2017, 1, 1), 37),
]


def parse_tai_leap_seconds(filepath: str) -> List[OffsetEpoch]:
    """Parses an IETF/IERS `leap-seconds.list` file, e.g. from:
        https://data.iana.org/time-zones/tzdb/leap-seconds.list
    """
    leap_seconds_epochs = []
    with open(filepath, 'r') as leap_seconds_data:
        for line in leap_seconds_data.readlines():
            line = line.strip()
            if line.startswith('#') or line == '':
                # if line is comment or blank, ignore
                continue
            ntp_timestamp = int(line.split()[0])
            offset = int(line.split()[1])
            epoch = NTP_EPOCH + timedelta(seconds=ntp_timestamp)
            leap_seconds_epochs.append(OffsetEpoch(epoch, offset))
    return leap_seconds_epochs


def utc_tai_offset(
    time: datetime, leap_second_epochs: Optional[List[OffsetEpoch]] = None
) -> timedelta:
    """
    Calculates the offset (number of leap seconds) between a
    given UTC time and TAI. If `time` is before the first leap
    seconds were introduced in 1972, returns 10--which is the
    original offset introduced in 1972. Otherwise, returns
    the offset corresponding to the last offset before
    `time`.

    Inputs
    -----
    time: datetime
        the (naive, UTC) time for which to find leap seconds
    leap_second_epochs: List[OffsetEpoch]
        optional table to use instead of `LEAP_SECOND_EPOCHS`

    Returns
    ------
    offset: timedelta
        the total leap second offset
    """
    epochs = LEAP_SECOND_EPOCHS if leap_second_epochs is None else leap_second_epochs
    offset = epochs[0].offset if epochs else 0
    for i in range(len(epochs)):
        if epochs[i].epoch > time:
            break
        offset = epochs[i].offset
    return timedelta(seconds=offset)
