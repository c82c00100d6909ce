"""
In-memory model of the RINEX observation record.

A `Record` maps `RecordKey` (sampling epoch, epoch flag) to `RecordEntry`
(optional receiver clock offset and the observations made at that epoch).
Keys are kept sorted; observations keep the order they were parsed in.
"""

import bisect
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple

from ..gnss.constellation import Constellation
from ..gnss.sv import SV
from ..time.epoch import Epoch
from .flags import EpochFlag, LliFlags, SNR


@dataclass
class ObservationData:
    value: float
    lli: Optional[LliFlags] = None
    snr: Optional[SNR] = None

    def is_ok(self) -> bool:
        """
        True when no LLI condition is reported and the signal strength, when
        known, is in the strong classes.
        """
        lli_ok = self.lli is None or self.lli == LliFlags.OK_OR_UNKNOWN
        snr_ok = self.snr is None or self.snr == SNR.DBHZ0 or self.snr.strong()
        return lli_ok and snr_ok

    def is_ok_snr(self, min_snr: SNR) -> bool:
        """Same as `is_ok`, also requiring an SNR of at least `min_snr`."""
        return self.is_ok() and self.snr is not None and self.snr >= min_snr


@dataclass(frozen=True)
class ObservationKey:
    sv: SV
    observable: str


@dataclass(frozen=True, order=True)
class RecordKey:
    epoch: Epoch
    flag: EpochFlag = EpochFlag.OK


@dataclass
class RecordEntry:
    clock_offset: Optional[float] = None
    observations: Dict[ObservationKey, ObservationData] = field(default_factory=dict)

    def sv(self) -> List[SV]:
        """Satellites in order of first appearance."""
        return list(dict.fromkeys(key.sv for key in self.observations))

    def observables(self, sv: SV) -> List[str]:
        return [key.observable for key in self.observations if key.sv == sv]

    def retain_observations(
        self, predicate: Callable[[ObservationKey, ObservationData], bool]
    ) -> None:
        self.observations = {
            key: data for key, data in self.observations.items() if predicate(key, data)
        }

    def is_empty(self) -> bool:
        return not self.observations and self.clock_offset is None

    def copy(self) -> "RecordEntry":
        return RecordEntry(
            self.clock_offset,
            {key: replace(data) for key, data in self.observations.items()},
        )


class Record:

    def __init__(self, entries: Optional[Dict[RecordKey, RecordEntry]] = None) -> None:
        self._entries: Dict[RecordKey, RecordEntry] = {}
        self._keys: List[RecordKey] = []
        if entries:
            for key, entry in entries.items():
                self.insert(key, entry)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: RecordKey) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[RecordKey]:
        return iter(list(self._keys))

    def __getitem__(self, key: RecordKey) -> RecordEntry:
        return self._entries[key]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._keys == other._keys and all(
            self._entries[key] == other._entries[key] for key in self._keys
        )

    def get(self, key: RecordKey) -> Optional[RecordEntry]:
        return self._entries.get(key)

    def insert(self, key: RecordKey, entry: RecordEntry) -> None:
        if key not in self._entries:
            bisect.insort(self._keys, key)
        self._entries[key] = entry

    def remove(self, key: RecordKey) -> RecordEntry:
        entry = self._entries.pop(key)
        self._keys.remove(key)
        return entry

    def keys(self) -> List[RecordKey]:
        return list(self._keys)

    def items(self) -> Iterator[Tuple[RecordKey, RecordEntry]]:
        for key in list(self._keys):
            yield key, self._entries[key]

    def retain(self, predicate: Callable[[RecordKey, RecordEntry], bool]) -> None:
        """Rebuilds the record keeping the entries `predicate` accepts, in order."""
        kept = [(key, self._entries[key]) for key in self._keys if predicate(key, self._entries[key])]
        self._keys = [key for key, _ in kept]
        self._entries = dict(kept)

    def copy(self) -> "Record":
        record = Record()
        record._keys = list(self._keys)
        record._entries = {key: self._entries[key].copy() for key in self._keys}
        return record

    def epochs(self) -> List[Epoch]:
        return list(dict.fromkeys(key.epoch for key in self._keys))

    def first_epoch(self) -> Optional[Epoch]:
        return self._keys[0].epoch if self._keys else None

    def last_epoch(self) -> Optional[Epoch]:
        return self._keys[-1].epoch if self._keys else None

    def sv(self) -> List[SV]:
        """Sorted list of the satellites observed in the whole record."""
        svs: Set[SV] = set()
        for entry in self._entries.values():
            svs.update(key.sv for key in entry.observations)
        return sorted(svs)

    def constellations(self) -> List[Constellation]:
        return list(dict.fromkeys(sv.constellation for sv in self.sv()))

    def observables(self) -> List[str]:
        """Observables in order of first appearance."""
        observables: Dict[str, None] = {}
        for entry in self._entries.values():
            for key in entry.observations:
                observables.setdefault(key.observable, None)
        return list(observables)

    def __repr__(self) -> str:
        return f"Record({len(self._keys)} epochs)"
