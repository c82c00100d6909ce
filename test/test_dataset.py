import io
import os
from datetime import datetime, timedelta

import numpy as np
import pytest

from conftest import DATA_DIR

from rinex_obs.gnss.constellation import Constellation
from rinex_obs.gnss.sv import SV
from rinex_obs.processing.masking import MaskFilter
from rinex_obs.rinex_io.dataset import ObservationDataset, merge_headers
from rinex_obs.rinex_io.header import Header
from rinex_obs.rinex_io.record import ObservationKey, RecordKey
from rinex_obs.time.epoch import Epoch
from rinex_obs.time.gpst import GPS_EPOCH
from rinex_obs.time.timescale import TimeScale

G01 = SV(Constellation.GPS, 1)
R01 = SV(Constellation.GLONASS, 1)
G07 = SV(Constellation.GPS, 7)
G08 = SV(Constellation.GPS, 8)


def data_path(filename: str) -> str:
    return os.path.join(DATA_DIR, filename)


@pytest.fixture
def dataset() -> ObservationDataset:
    return ObservationDataset().load_files([data_path("v3_sample.rnx")])


def test_load(dataset):
    assert len(dataset.record) == 4
    assert dataset.record.sv() == [G01, R01]
    assert dataset.record.first_epoch() == dataset.header.time_of_first_obs
    entry = dataset.record[dataset.record.keys()[0]]
    assert entry.observables(G01) == ["C1C", "L1C", "D1C", "S1C"]
    assert entry.observations[ObservationKey(G01, "D1C")].value == -1234.567


def test_save_and_reload(dataset):
    buffer = io.StringIO()
    dataset.save(buffer)
    buffer.seek(0)
    reloaded = ObservationDataset().load(buffer)
    assert reloaded.header == dataset.header
    assert reloaded.record == dataset.record


def test_observation_arrays(dataset):
    arrays = dataset.get_observation_arrays()
    t0 = (datetime(2022, 1, 9) - GPS_EPOCH).total_seconds()
    np.testing.assert_array_equal(arrays.epochs, t0 + np.array([0.0, 30.0, 60.0, 600.0]))

    assert set(arrays.records) == {"G01", "R01"}
    assert set(arrays.records["G01"]) == {"C1C", "L1C", "D1C", "S1C", "L1C_SSI", "L1C_LLI"}
    np.testing.assert_array_equal(arrays.records["G01"]["L1C_SSI"], [8, 8, 8, 8])

    r01 = arrays.records["R01"]
    np.testing.assert_allclose(r01["L1C"], [108021892.155, 108021897.155, np.nan, 108021950.155])
    np.testing.assert_array_equal(r01["L1C_SSI"], [6, 3, np.nan, 5])
    np.testing.assert_array_equal(r01["L1C_LLI"], [1, 0, np.nan, 0])
    np.testing.assert_array_equal(r01["C1C"], [20207718.320, 20207719.320, np.nan, 20207730.320])


def test_observation_arrays_options():
    dataset = ObservationDataset(include_ssi=False, include_lli=False).load_files([data_path("v3_sample.rnx")])
    dataset.mask_mut("o=C1C")
    arrays = dataset.get_observation_arrays()
    assert set(arrays.records["G01"]) == {"C1C"}

    arrays = dataset.get_observation_arrays(strip_all_nan=False)
    assert set(arrays.records["G01"]) == {"C1C", "L1C", "D1C", "S1C"}
    assert np.all(np.isnan(arrays.records["G01"]["L1C"]))


def test_mask_and_filter(dataset):
    masked = dataset.mask(MaskFilter.from_str("c=GPS"))
    assert masked.record.sv() == [G01]
    assert dataset.record.sv() == [G01, R01]

    filtered = dataset.filter("m:c=GLO")
    assert len(filtered.record) == 3
    assert filtered.header is dataset.header


def test_split(dataset):
    before, after = dataset.split(Epoch.from_gregorian(2022, 1, 9, 0, 0, 30, timescale=TimeScale.GPST))
    assert (len(before.record), len(after.record)) == (1, 3)

    segments = dataset.split_dt(timedelta(minutes=5))
    assert [len(segment.record) for segment in segments] == [3, 1]


def test_decimate(dataset):
    assert len(dataset.decimate(ratio=2).record) == 2
    assert len(dataset.decimate(interval=timedelta(minutes=1)).record) == 3
    masked = dataset.decimate(ratio=2, mask_filter=MaskFilter.from_str("c=GLO"))
    # GLONASS epochs 0, 30, 600 decimate to 0 and 600; GPS data is kept
    assert len(masked.record) == 4
    assert [R01 in entry.sv() for _, entry in masked.record.items()] == [True, False, False, True]
    assert [G01 in entry.sv() for _, entry in masked.record.items()] == [True, True, True, True]
    with pytest.raises(ValueError):
        dataset.decimate()
    with pytest.raises(ValueError):
        dataset.decimate(ratio=2, interval=timedelta(minutes=1))


def test_load_files_merges():
    dataset = ObservationDataset().load_files([data_path("v2_sample_a.rnx"), data_path("v2_sample_b.rnx")])
    assert dataset.header.observables == {Constellation.GPS: ["C1", "L1", "S1"]}
    assert len(dataset.record) == 3

    shared = dataset.record[RecordKey(Epoch.from_gregorian(2021, 12, 21, 0, 0, 30, timescale=TimeScale.GPST))]
    assert shared.observations[ObservationKey(G07, "C1")].value == 20243518.560
    assert shared.observations[ObservationKey(G07, "S1")].value == 45.0
    assert shared.observations[ObservationKey(G08, "C1")].value == 21243518.560

    other = ObservationDataset().load_files([data_path("v2_sample_a.rnx")]).merge(
        ObservationDataset().load_files([data_path("v2_sample_b.rnx")])
    )
    assert other.record == dataset.record


def test_merge_headers():
    with open(data_path("v2_sample_a.rnx"), "r") as f:
        lhs = ObservationDataset().load(f).header
    rhs = Header(lhs.version, Constellation.MIXED, {Constellation.GLONASS: ["C1"]}, comments=["merged"])
    merged = merge_headers(lhs, rhs)
    assert merged.observables == {Constellation.GPS: ["C1", "L1"], Constellation.GLONASS: ["C1"]}
    assert merged.constellation == Constellation.GPS
    assert merged.time_of_first_obs == lhs.time_of_first_obs
    assert merged.comments == ["merged"]


def test_empty_dataset():
    dataset = ObservationDataset()
    with pytest.raises(ValueError):
        dataset.mask_mut("c=GPS")
    with pytest.raises(ValueError):
        dataset.save(io.StringIO())
