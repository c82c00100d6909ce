"""
Decimation of observation records.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional

import numba
import numpy as np
from numpy.typing import NDArray

from ..rinex_io.record import Record
from ..time.duration import parse_duration
from ..time.epoch import timedelta_to_nanoseconds
from .errors import InvalidDecimationRatioError
from .masking import MaskFilter, mask_mut
from .split import record_tai_nanoseconds


class DecimationType(Enum):
    BY_RATIO = "ratio"
    BY_INTERVAL = "interval"


@dataclass
class DecimationFilter:
    """
    `ratio` -- keep one entry out of `ratio` (0 or 1 keep everything)
    `interval` -- minimum time between two kept entries
    """
    decimation_type: DecimationType = DecimationType.BY_RATIO
    ratio: int = 0
    interval: Optional[timedelta] = None

    @staticmethod
    def by_ratio(ratio: int) -> "DecimationFilter":
        return DecimationFilter(DecimationType.BY_RATIO, ratio=ratio)

    @staticmethod
    def by_interval(interval: timedelta) -> "DecimationFilter":
        return DecimationFilter(DecimationType.BY_INTERVAL, interval=interval)

    @staticmethod
    def from_str(s: str) -> "DecimationFilter":
        """
        Parses a decimation ratio (`"5"`). A duration (`"30 s"`) gives a
        decimation by interval.
        """
        text = s.strip()
        if text.isdigit():
            return DecimationFilter.by_ratio(int(text))
        try:
            return DecimationFilter.by_interval(parse_duration(text))
        except ValueError:
            raise InvalidDecimationRatioError(f"Invalid decimation: `{s}`")


@dataclass
class ResamplingFilter:
    decimation: DecimationFilter
    mask: Optional[MaskFilter] = None

    @staticmethod
    def parse_decimation(s: str) -> "ResamplingFilter":
        """Parses `<ratio>` or `<mask>*<ratio>`."""
        if "*" in s:
            mask_str, _, decimation_str = s.rpartition("*")
            return ResamplingFilter(
                DecimationFilter.from_str(decimation_str),
                MaskFilter.from_str(mask_str.strip()),
            )
        return ResamplingFilter(DecimationFilter.from_str(s))


@numba.njit
def numba_decimate_by_interval(
    N: int,
    tai_ns: NDArray[np.int64],
    interval_ns: int,
) -> NDArray[np.bool_]:

    keep = np.zeros(N, dtype=np.bool_)
    if N == 0:
        return keep
    keep[0] = True
    last = tai_ns[0]
    for i in range(1, N):
        if tai_ns[i] - last >= interval_ns:
            keep[i] = True
            last = tai_ns[i]
    return keep


def decimate_by_ratio_mut(record: Record, ratio: int) -> None:
    if ratio <= 1:
        return
    keep = set(record.keys()[::ratio])
    record.retain(lambda key, entry: key in keep)


def decimate_by_interval_mut(record: Record, interval: timedelta) -> None:
    keys = record.keys()
    if not keys:
        return
    keep_mask = numba_decimate_by_interval(
        len(keys), record_tai_nanoseconds(record), timedelta_to_nanoseconds(interval)
    )
    keep = {key for key, kept in zip(keys, keep_mask) if kept}
    record.retain(lambda key, entry: key in keep)


def decimate_mut(record: Record, decimation: DecimationFilter) -> None:
    match decimation.decimation_type:
        case DecimationType.BY_RATIO:
            decimate_by_ratio_mut(record, decimation.ratio)
        case DecimationType.BY_INTERVAL:
            decimate_by_interval_mut(record, decimation.interval)


def resample_mut(record: Record, resampling_filter: ResamplingFilter) -> None:
    """
    Decimates `record` in place. When the filter carries a mask, only the
    data the mask selects is decimated: the decimation runs over the masked
    subset, and the selected observations of the epochs it drops are removed.
    Data outside the mask is left untouched.
    """
    if resampling_filter.mask is None:
        decimate_mut(record, resampling_filter.decimation)
        return

    selected = record.copy()
    mask_mut(selected, resampling_filter.mask)
    selected_entries = dict(selected.items())
    decimate_mut(selected, resampling_filter.decimation)
    dropped = {key for key in selected_entries if key not in selected}

    for key in dropped:
        dropped_observations = selected_entries[key].observations
        record[key].retain_observations(lambda obs_key, data: obs_key not in dropped_observations)

    # dropped epochs left without observations go with the decimation
    record.retain(lambda key, entry: key not in dropped or bool(entry.observations))


def resample(record: Record, resampling_filter: ResamplingFilter) -> Record:
    resampled = record.copy()
    resample_mut(resampled, resampling_filter)
    return resampled
