"""
Time partitioning of observation records.
"""

from datetime import timedelta
from typing import List, Tuple

import numba
import numpy as np
from numpy.typing import NDArray

from ..rinex_io.record import Record
from ..time.epoch import Epoch, timedelta_to_nanoseconds


def record_tai_nanoseconds(record: Record) -> NDArray[np.int64]:
    """TAI nanoseconds of every record key, in record order."""
    return np.array([key.epoch.tai_nanoseconds() for key in record.keys()], dtype=np.int64)


def find_gap_segments(
    tai_ns: NDArray[np.int64],
    min_gap_ns: int,
) -> List[Tuple[int, int]]:
    """Find the segments of a sorted time array separated by gaps.

    Args:
        tai_ns: sorted sample times, nanoseconds
        min_gap_ns: a sample at least this much after the first sample of
            the current segment starts a new segment

    Returns:
        List of (start, stop) index pairs covering the whole array.
    """
    if len(tai_ns) == 0:
        return []
    return numba_find_gap_segments(len(tai_ns), tai_ns, min_gap_ns)


@numba.njit
def numba_find_gap_segments(
    N: int,
    tai_ns: NDArray[np.int64],
    min_gap_ns: int,
) -> List[Tuple[int, int]]:

    segments: List[Tuple[int, int]] = []
    start: int = 0
    last = tai_ns[0]
    for i in range(1, N):
        if tai_ns[i] - last >= min_gap_ns:
            segments.append((start, i))
            start = i
            last = tai_ns[i]
    segments.append((start, N))
    return segments


def split(record: Record, epoch: Epoch) -> Tuple[Record, Record]:
    """
    Splits `record` at `epoch`: entries strictly before it, then the rest.
    """
    before = Record()
    after = Record()
    for key, entry in record.items():
        if key.epoch < epoch:
            before.insert(key, entry.copy())
        else:
            after.insert(key, entry.copy())
    return before, after


def split_dt(record: Record, duration: timedelta) -> List[Record]:
    """
    Splits `record` into segments: an entry at least `duration` after the
    first entry of the current segment starts a new one. Every entry ends up
    in exactly one of the returned records.
    """
    keys = record.keys()
    segments = find_gap_segments(record_tai_nanoseconds(record), timedelta_to_nanoseconds(duration))
    records: List[Record] = []
    for start, stop in segments:
        segment = Record()
        for key in keys[start:stop]:
            segment.insert(key, record[key].copy())
        records.append(segment)
    return records
