import pytest

from conftest import read_data_lines

from rinex_obs.gnss.constellation import Constellation
from rinex_obs.gnss.sv import SV
from rinex_obs.rinex_io.errors import EmptyLineError, NumSatParsingError
from rinex_obs.rinex_io.flags import EpochFlag
from rinex_obs.rinex_io.header import Version
from rinex_obs.rinex_io.observation import (
    format_record,
    is_new_epoch,
    iter_epoch_blocks,
    iter_epochs,
    parse_epoch,
    parse_record,
)
from rinex_obs.time.epoch import Epoch
from rinex_obs.time.timescale import TimeScale


def test_version_dispatch():
    assert is_new_epoch("> 2022 01 09 00 00  0.0000000  0  9", Version(3, 4))
    assert not is_new_epoch("> 2022 01 09 00 00  0.0000000  0  9", Version(2, 11))
    assert is_new_epoch(" 21 12 21  0  0  0.0000000  0  1G07", Version(2, 11))
    assert not is_new_epoch(" 21 12 21  0  0  0.0000000  0  1G07", Version(3, 0))


@pytest.mark.parametrize("content", ["", "   ", []])
def test_empty_content(gps_v2_header, content):
    with pytest.raises(EmptyLineError):
        parse_epoch(gps_v2_header, content)


def test_epoch_blocks(aopr_header):
    blocks = list(iter_epoch_blocks(read_data_lines("v2_gps_aopr.txt"), aopr_header.version))
    assert [len(block) for block in blocks] == [11, 10, 12]


def test_parse_record(aopr_header):
    record = parse_record(read_data_lines("v2_gps_aopr.txt"), aopr_header)
    assert len(record) == 3
    assert record.epochs() == [
        Epoch.from_gregorian(2017, 1, 1, 0, 0, 0, timescale=TimeScale.GPST),
        Epoch.from_gregorian(2017, 1, 1, 3, 33, 40, timescale=TimeScale.GPST),
        Epoch.from_gregorian(2017, 1, 1, 6, 9, 10, timescale=TimeScale.GPST),
    ]
    assert [len(entry.sv()) for _, entry in record.items()] == [10, 9, 11]
    assert record.constellations() == [Constellation.GPS]
    assert record.observables() == ["L1", "L2", "C1", "P1", "P2"]
    assert record.sv()[0] == SV(Constellation.GPS, 1)


def test_format_record_round_trip(aopr_header):
    record = parse_record(read_data_lines("v2_gps_aopr.txt"), aopr_header)
    lines = format_record(record, aopr_header)
    assert parse_record(lines, aopr_header) == record


def test_lines_before_first_epoch_are_skipped(gps_v2_header):
    lines = ["garbage", " 21 12 21  0  0  0.0000000  0  1G07", "  20243517.560   106380411.71708"]
    record = parse_record(lines, gps_v2_header)
    assert len(record) == 1


def test_event_without_timestamp_is_skipped(gps_v2_header):
    lines = [
        " 21 12 21  0  0  0.0000000  0  1G07",
        "  20243517.560   106380411.71708",
        "                            4  1",
        "ANTENNA SWAPPED                                             COMMENT",
        " 21 12 21  0  0 30.0000000  0  1G07",
        "  20243518.560   106380412.71708",
    ]
    keys = [key for key, _ in iter_epochs(lines, gps_v2_header)]
    assert [key.flag for key in keys] == [EpochFlag.OK, EpochFlag.OK]


def test_strict_parsing_raises(gps_v2_header):
    lines = [" 21 12 21  0  0  0.0000000  0  xG07", "  20243517.560   106380411.71708"]
    with pytest.raises(NumSatParsingError):
        parse_record(lines, gps_v2_header)


def test_lenient_parsing_skips_bad_epochs(gps_v2_header):
    lines = [
        " 21 12 21  0  0  0.0000000  0  1E07",
        "  20243517.560   106380411.71708",
        " 21 12 21  0  0 30.0000000  0  1G07",
        "  20243518.560   106380412.71708",
    ]
    record = parse_record(lines, gps_v2_header, strict=False)
    assert record.epochs() == [Epoch.from_gregorian(2021, 12, 21, 0, 0, 30, timescale=TimeScale.GPST)]


def test_target_timescale(gps_v2_header):
    lines = [" 21 12 21  0  0  0.0000000  0  1G07", "  20243517.560   106380411.71708"]
    record = parse_record(lines, gps_v2_header, TimeScale.UTC)
    epoch = record.first_epoch()
    assert epoch.timescale == TimeScale.UTC
    assert epoch == Epoch.from_gregorian(2021, 12, 21, 0, 0, 18, timescale=TimeScale.GPST)
