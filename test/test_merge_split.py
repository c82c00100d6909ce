from datetime import timedelta

import numpy as np
import pytest

from conftest import epoch_at, key_at, make_entry, make_record

from rinex_obs.gnss.constellation import Constellation
from rinex_obs.gnss.sv import SV
from rinex_obs.processing.merge import merge, merge_mut
from rinex_obs.processing.split import find_gap_segments, split, split_dt
from rinex_obs.rinex_io.record import ObservationKey, Record
from rinex_obs.time.epoch import Epoch
from rinex_obs.time.timescale import TimeScale

G01 = SV(Constellation.GPS, 1)


@pytest.fixture
def lhs():
    return make_record(
        {
            0: make_entry({("G01", "C1C"): 1.0}),
            30: make_entry({("G01", "C1C"): 2.0}),
        }
    )


@pytest.fixture
def rhs():
    return make_record(
        {
            30: make_entry({("G01", "C1C"): 9.0, ("G01", "S1C"): 40.0}, clock_offset=0.2),
            60: make_entry({("G01", "C1C"): 3.0}),
        }
    )


def test_merge_left_wins_right_fills(lhs, rhs):
    merged = merge(lhs, rhs)
    assert merged.keys() == [key_at(0), key_at(30), key_at(60)]
    shared = merged[key_at(30)]
    assert shared.observations[ObservationKey(G01, "C1C")].value == 2.0
    assert shared.observations[ObservationKey(G01, "S1C")].value == 40.0
    assert shared.clock_offset == 0.2
    # inputs are left untouched
    assert len(lhs) == 2
    assert lhs[key_at(30)].clock_offset is None


def test_merge_copies_right_entries(lhs, rhs):
    merge_mut(lhs, rhs)
    lhs[key_at(60)].observations[ObservationKey(G01, "C1C")].value = 0.0
    assert rhs[key_at(60)].observations[ObservationKey(G01, "C1C")].value == 3.0


def test_merge_identity(lhs):
    assert merge(lhs, Record()) == lhs
    assert merge(Record(), lhs) == lhs
    assert merge(lhs, lhs) == lhs


def test_find_gap_segments():
    tai_ns = np.array([0, 10, 20, 100, 110, 500], dtype=np.int64)
    assert find_gap_segments(tai_ns, 50) == [(0, 3), (3, 5), (5, 6)]
    assert find_gap_segments(tai_ns, 1000) == [(0, 6)]
    assert find_gap_segments(np.array([], dtype=np.int64), 50) == []
    assert find_gap_segments(np.array([0, 10, 20, 30], dtype=np.int64), 20) == [(0, 2), (2, 4)]


@pytest.fixture
def record():
    return make_record({seconds: make_entry({("G01", "C1C"): seconds}) for seconds in (0, 30, 60, 600, 630, 3600)})


def test_split(record):
    before, after = split(record, epoch_at(30))
    assert before.keys() == [key_at(0)]
    assert after.keys() == [key_at(30), key_at(60), key_at(600), key_at(630), key_at(3600)]

    before, after = split(record, epoch_at(-1))
    assert len(before) == 0
    assert after == record


def test_split_across_timescales(record):
    # 00:00:12 UTC is 00:00:30 GPST
    before, after = split(record, Epoch.from_gregorian(2022, 1, 9, 0, 0, 12, timescale=TimeScale.UTC))
    assert before.keys() == [key_at(0)]
    assert after.first_epoch() == epoch_at(30)


def test_split_dt(record):
    segments = split_dt(record, timedelta(minutes=5))
    assert [len(segment) for segment in segments] == [3, 2, 1]
    assert [key for segment in segments for key in segment.keys()] == record.keys()
    assert segments[1].first_epoch() == epoch_at(600)


def test_split_dt_gap_equal_to_duration(record):
    segments = split_dt(record, timedelta(seconds=30))
    assert [len(segment) for segment in segments] == [1, 1, 1, 1, 1, 1]


def test_split_dt_single_segment(record):
    assert split_dt(record, timedelta(hours=2)) == [record]
    assert split_dt(Record(), timedelta(hours=2)) == []


def test_split_dt_measures_from_segment_start():
    record = make_record({seconds: make_entry({("G01", "C1C"): float(seconds)}) for seconds in (0, 10, 20, 30)})
    segments = split_dt(record, timedelta(seconds=20))
    assert [len(segment) for segment in segments] == [2, 2]
    assert [segment.first_epoch() for segment in segments] == [epoch_at(0), epoch_at(20)]
