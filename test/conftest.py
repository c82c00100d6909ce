import os
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

import pytest

from rinex_obs.gnss.constellation import Constellation
from rinex_obs.gnss.sv import SV
from rinex_obs.rinex_io.header import V2_MIXED_CONSTELLATIONS, Header, Version
from rinex_obs.rinex_io.record import ObservationData, ObservationKey, Record, RecordEntry, RecordKey
from rinex_obs.time.epoch import Epoch
from rinex_obs.time.timescale import TimeScale

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")

T0 = Epoch.from_gregorian(2022, 1, 9, timescale=TimeScale.GPST)


def read_data_lines(filename: str) -> List[str]:
    with open(os.path.join(DATA_DIR, filename), "r") as f:
        return f.read().splitlines()


def epoch_at(seconds: int) -> Epoch:
    return T0 + timedelta(seconds=seconds)


def key_at(seconds: int) -> RecordKey:
    return RecordKey(epoch_at(seconds))


def make_entry(
    observations: Dict[Tuple[str, str], ObservationData | float],
    clock_offset: Optional[float] = None,
) -> RecordEntry:
    """`observations` maps ("G01", "C1C") to the data or to a bare value."""
    entry = RecordEntry(clock_offset)
    for (sv, code), data in observations.items():
        if not isinstance(data, ObservationData):
            data = ObservationData(float(data))
        entry.observations[ObservationKey(SV.from_str(sv), code)] = data
    return entry


def make_record(entries: Dict[int, RecordEntry]) -> Record:
    return Record({key_at(seconds): entry for seconds, entry in entries.items()})


def observation_count(record: Record) -> int:
    return sum(len(entry.observations) for _, entry in record.items())


def make_header(major: int, constellation: Constellation, codes: List[str], targets=None) -> Header:
    if targets is None:
        targets = V2_MIXED_CONSTELLATIONS if constellation.is_mixed() else [constellation]
    return Header(
        version=Version(major, 0 if major == 2 else 4),
        constellation=constellation,
        observables={target: list(codes) for target in targets},
    )


@pytest.fixture
def gps_v2_header() -> Header:
    return make_header(2, Constellation.GPS, ["C1", "L1"])


@pytest.fixture
def aopr_header() -> Header:
    return make_header(2, Constellation.GPS, ["L1", "L2", "C1", "P1", "P2"])


@pytest.fixture
def npaz_header() -> Header:
    return make_header(2, Constellation.MIXED, ["C1", "L1", "L2", "P2", "S1", "S2"])


@pytest.fixture
def mixed_24sv_header() -> Header:
    return make_header(
        2,
        Constellation.GPS,
        ["C1", "C2", "C5", "L1", "L2", "L5", "P1", "P2", "S1", "S2", "S5"],
        targets=[Constellation.GPS, Constellation.GLONASS],
    )


@pytest.fixture
def v3_header() -> Header:
    return make_header(
        3,
        Constellation.MIXED,
        ["C1C", "L1C", "S1C", "C2S", "L2S", "S2S", "C2W", "L2W", "S2W", "C5Q", "L5Q", "S5Q"],
        targets=[Constellation.GPS, Constellation.GLONASS],
    )
