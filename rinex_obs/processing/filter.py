from dataclasses import dataclass
from typing import Optional

from ..rinex_io.record import Record
from .errors import InvalidFilterError
from .masking import MaskFilter, mask_mut
from .resampling import ResamplingFilter, resample_mut

DECIMATION_PREFIX = "d:"
FILTER_PREFIX_LEN = 2


@dataclass
class Filter:
    """Either a mask or a resampling filter."""
    mask: Optional[MaskFilter] = None
    resampling: Optional[ResamplingFilter] = None

    @staticmethod
    def from_str(s: str) -> "Filter":
        """
        Parses `d:<ratio>` and `d:<mask>*<ratio>` decimation filters. Any
        other description is a mask behind a two character prefix (`m:`).
        """
        text = s.strip()
        if text.startswith(DECIMATION_PREFIX):
            return Filter(resampling=ResamplingFilter.parse_decimation(text[FILTER_PREFIX_LEN:]))
        if len(text) <= FILTER_PREFIX_LEN:
            raise InvalidFilterError(f"Invalid filter description: `{s}`")
        return Filter(mask=MaskFilter.from_str(text[FILTER_PREFIX_LEN:]))

    def apply_mut(self, record: Record) -> None:
        if self.mask is not None:
            mask_mut(record, self.mask)
        if self.resampling is not None:
            resample_mut(record, self.resampling)

    def apply(self, record: Record) -> Record:
        filtered = record.copy()
        self.apply_mut(filtered)
        return filtered
