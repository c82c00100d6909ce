"""
Utilities for expressing epochs as GPS seconds.
"""

import numpy as np
from datetime import datetime, timedelta
from typing import Iterable, List

from .epoch import Epoch, NS_PER_SECOND
from .timescale import TimeScale


GPS_EPOCH = datetime(year=1980, month=1, day=6, hour=0, minute=0, second=0)
GPS_TAI_OFFSET = TimeScale.GPST.tai_offset()
SECONDS_IN_WEEK = 3600 * 24 * 7

_GPS_EPOCH_TAI_NS = Epoch.from_datetime(GPS_EPOCH, TimeScale.GPST).tai_nanoseconds()


def convert_epoch_to_gps_seconds(epoch: Epoch) -> float:
    ns = epoch.tai_nanoseconds() - _GPS_EPOCH_TAI_NS
    return ns // NS_PER_SECOND + (ns % NS_PER_SECOND) / NS_PER_SECOND


def convert_gps_seconds_to_epoch(gps_seconds: float) -> Epoch:
    whole_seconds = int(np.floor(gps_seconds))
    nanos = int(round((gps_seconds - whole_seconds) * NS_PER_SECOND))
    return Epoch.from_datetime(GPS_EPOCH, TimeScale.GPST) + timedelta(
        seconds=whole_seconds, microseconds=nanos / 1000
    )


def convert_epoch_array_to_gps_seconds_array(epochs: Iterable[Epoch]) -> np.ndarray:
    return np.array([convert_epoch_to_gps_seconds(epoch) for epoch in epochs], dtype=np.float64)


def convert_gps_seconds_to_epoch_list(gps_seconds_array: Iterable[float]) -> List[Epoch]:
    return [convert_gps_seconds_to_epoch(gpst) for gpst in gps_seconds_array]


def gps_week_and_tow(epoch: Epoch) -> tuple:
    """Returns (GPS week number, time of week in seconds)."""
    gps_seconds = convert_epoch_to_gps_seconds(epoch)
    week_num = int(gps_seconds // SECONDS_IN_WEEK)
    return week_num, gps_seconds - week_num * SECONDS_IN_WEEK
