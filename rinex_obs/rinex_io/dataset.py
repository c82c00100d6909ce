from dataclasses import dataclass, field, replace
import io
import logging
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..processing.filter import Filter
from ..processing.masking import MaskFilter, mask_mut
from ..processing.merge import merge_mut
from ..processing.resampling import DecimationFilter, ResamplingFilter, resample_mut
from ..processing.split import split, split_dt
from ..time.epoch import Epoch
from ..time.gpst import convert_epoch_array_to_gps_seconds_array
from .header import Header, format_header, parse_header
from .observation import format_record, parse_record
from .record import ObservationKey, Record


@dataclass
class ObservationArrays:
    # GPS seconds of every epoch carrying observations
    epochs: np.ndarray
    # sv -> observable -> values, NaN where missing
    records: Dict[str, Dict[str, np.ndarray]] = field(default_factory=dict)


def merge_headers(lhs: Header, rhs: Header) -> Header:
    """
    Returns `lhs` with the observable tables extended by the codes only `rhs`
    declares. Existing codes keep their position.
    """
    observables = {constellation: list(codes) for constellation, codes in lhs.observables.items()}
    for constellation, codes in rhs.observables.items():
        table = observables.setdefault(constellation, [])
        for code in codes:
            if code not in table:
                table.append(code)
    time_of_first_obs = lhs.time_of_first_obs
    if rhs.time_of_first_obs is not None and (
        time_of_first_obs is None or rhs.time_of_first_obs < time_of_first_obs
    ):
        time_of_first_obs = rhs.time_of_first_obs
    return replace(
        lhs,
        observables=observables,
        time_of_first_obs=time_of_first_obs,
        comments=lhs.comments + [c for c in rhs.comments if c not in lhs.comments],
    )


class ObservationDataset:

    def __init__(self, include_ssi: bool = True, include_lli: bool = True) -> None:
        self.header: Optional[Header] = None
        self.record: Optional[Record] = None

        # content of the exported arrays
        self._include_ssi = include_ssi
        self._include_lli = include_lli

        self._filepaths: List[str] = []

    def _with(self, header: Optional[Header], record: Optional[Record]) -> "ObservationDataset":
        dataset = ObservationDataset(self._include_ssi, self._include_lli)
        dataset.header = header
        dataset.record = record
        dataset._filepaths = list(self._filepaths)
        return dataset

    def _require(self) -> None:
        if self.header is None or self.record is None:
            raise ValueError("Dataset has no header and observations loaded")

    def load(self, io: io.TextIOBase, strict: bool = True) -> "ObservationDataset":
        """
        Reads one RINEX observation file. Loading into a dataset that already
        holds data merges the new content in; existing observations win.
        """
        header = parse_header(io, strict)
        record = parse_record(io, header, strict=strict)
        if self.header is None or self.record is None:
            self.header = header
            self.record = record
        else:
            if header.version.major != self.header.version.major:
                logging.warning(
                    f"Merging RINEX {header.version} content into a RINEX {self.header.version} dataset"
                )
            self.header = merge_headers(self.header, header)
            merge_mut(self.record, record)
        return self

    def load_files(self, filepaths: List[str], strict: bool = True) -> "ObservationDataset":
        for filepath in filepaths:
            with open(filepath, "r") as f:
                logging.debug(f"Reading {filepath}")
                self.load(f, strict)
        self._filepaths += filepaths
        return self

    def save(self, io: io.TextIOBase) -> None:
        if self.header is None or self.record is None:
            raise ValueError("Cannot save dataset without header and observations")
        lines = format_header(self.header)
        lines.extend(format_record(self.record, self.header))
        # writelines doesn't add newlines
        io.writelines(line + "\n" for line in lines)

    def mask_mut(self, mask_filter: MaskFilter | str) -> None:
        self._require()
        if isinstance(mask_filter, str):
            mask_filter = MaskFilter.from_str(mask_filter)
        mask_mut(self.record, mask_filter)

    def mask(self, mask_filter: MaskFilter | str) -> "ObservationDataset":
        self._require()
        dataset = self._with(self.header, self.record.copy())
        dataset.mask_mut(mask_filter)
        return dataset

    def filter(self, description: str) -> "ObservationDataset":
        """Applies a `Filter` description such as `m:c=GPS` or `d:5`."""
        self._require()
        return self._with(self.header, Filter.from_str(description).apply(self.record))

    def merge(self, other: "ObservationDataset") -> "ObservationDataset":
        self._require()
        other._require()
        record = self.record.copy()
        merge_mut(record, other.record)
        return self._with(merge_headers(self.header, other.header), record)

    def split(self, epoch: Epoch) -> Tuple["ObservationDataset", "ObservationDataset"]:
        """Returns (dataset before `epoch`, dataset from `epoch` on)."""
        self._require()
        before, after = split(self.record, epoch)
        return self._with(self.header, before), self._with(self.header, after)

    def split_dt(self, duration: timedelta) -> List["ObservationDataset"]:
        self._require()
        return [self._with(self.header, record) for record in split_dt(self.record, duration)]

    def decimate(
        self,
        ratio: Optional[int] = None,
        interval: Optional[timedelta] = None,
        mask_filter: Optional[MaskFilter] = None,
    ) -> "ObservationDataset":
        """
        Decimates by `ratio` (one epoch out of `ratio`) or by `interval`
        (minimum time between two kept epochs), after an optional mask.
        """
        self._require()
        if (ratio is None) == (interval is None):
            raise ValueError("Exactly one of `ratio` and `interval` is required")
        if ratio is not None:
            decimation = DecimationFilter.by_ratio(ratio)
        else:
            decimation = DecimationFilter.by_interval(interval)
        record = self.record.copy()
        resample_mut(record, ResamplingFilter(decimation, mask_filter))
        return self._with(self.header, record)

    def get_observation_arrays(self, strip_all_nan: bool = True) -> ObservationArrays:
        """
        Get observations as numpy arrays.

        Returns:
            epochs: numpy array of observation epochs (GPS seconds), one per
                record entry carrying observations
            records: dict of satellite ID to dict of observation code to
                numpy array of observation values. Phase codes (`L*`) also get
                `<code>_SSI` and `<code>_LLI` arrays when enabled.
        """
        self._require()
        keys = [key for key, entry in self.record.items() if entry.observations]
        num_epochs = len(keys)
        epochs = convert_epoch_array_to_gps_seconds_array(key.epoch for key in keys)

        records: Dict[str, Dict[str, np.ndarray]] = {}
        for index, key in enumerate(keys):
            entry = self.record[key]
            for obs_key, data in entry.observations.items():
                sat_id = str(obs_key.sv)
                if sat_id not in records:
                    records[sat_id] = self._empty_arrays(obs_key, num_epochs)
                obs_dict = records[sat_id]
                code = obs_key.observable
                if code not in obs_dict:
                    obs_dict[code] = np.full(num_epochs, np.nan)
                obs_dict[code][index] = data.value
                if code[0] == "L":
                    if self._include_ssi:
                        obs_dict.setdefault(code + "_SSI", np.full(num_epochs, np.nan))
                        if data.snr is not None:
                            obs_dict[code + "_SSI"][index] = int(data.snr)
                    if self._include_lli:
                        obs_dict.setdefault(code + "_LLI", np.full(num_epochs, np.nan))
                        if data.lli is not None:
                            obs_dict[code + "_LLI"][index] = int(data.lli)

        if strip_all_nan:
            for obs_dict in records.values():
                for code in list(obs_dict.keys()):
                    if np.all(np.isnan(obs_dict[code])):
                        del obs_dict[code]

        return ObservationArrays(epochs, records)

    def _empty_arrays(self, obs_key: ObservationKey, num_epochs: int) -> Dict[str, np.ndarray]:
        """All the header-declared codes of the satellite, filled with NaN."""
        obs_dict: Dict[str, np.ndarray] = {}
        for code in self.header.observables_for(obs_key.sv.constellation) or []:
            obs_dict[code] = np.full(num_epochs, np.nan)
        return obs_dict
