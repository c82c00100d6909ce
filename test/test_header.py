import io
import os

import pytest

from conftest import DATA_DIR

from rinex_obs.gnss.constellation import Constellation
from rinex_obs.rinex_io.errors import HeaderParsingError
from rinex_obs.rinex_io.header import (
    LABEL_COLUMN,
    V2_MIXED_CONSTELLATIONS,
    Version,
    format_header,
    format_system_obs_types,
    format_types_of_observ,
    parse_header,
    parse_system_obs_types,
    parse_types_of_observ,
)
from rinex_obs.time.epoch import Epoch
from rinex_obs.time.timescale import TimeScale


def read_header(filename: str, strict: bool = True):
    with open(os.path.join(DATA_DIR, filename), "r") as f:
        return parse_header(f, strict)


@pytest.mark.parametrize(
    "s, expected",
    [("3.04", Version(3, 4)), ("2.11", Version(2, 11)), ("     2", Version(2, 0)), ("4.00", Version(4, 0))],
)
def test_version(s, expected):
    assert Version.from_str(s) == expected


def test_version_ordering():
    assert Version(2, 11) < Version(3, 0) < Version(3, 4)
    assert str(Version(3, 4)) == "3.04"


def test_invalid_version():
    with pytest.raises(HeaderParsingError):
        Version.from_str("x.y")


def test_v3_header():
    header = read_header("v3_sample.rnx")
    assert header.version == Version(3, 4)
    assert header.constellation == Constellation.MIXED
    assert header.observables == {
        Constellation.GPS: ["C1C", "L1C", "D1C", "S1C"],
        Constellation.GLONASS: ["C1C", "L1C"],
    }
    assert header.time_system == TimeScale.GPST
    assert header.time_of_first_obs == Epoch.from_gregorian(2022, 1, 9, timescale=TimeScale.GPST)
    assert header.comments == ["rinex_obs test dataset"]
    assert header.timescale() == TimeScale.GPST


def test_v2_header():
    header = read_header("v2_sample_a.rnx")
    assert header.version == Version(2, 11)
    assert header.constellation == Constellation.GPS
    assert header.observables == {Constellation.GPS: ["C1", "L1"]}


def test_v2_mixed_table_applies_to_all_constellations():
    lines = [
        f"{'     2.11           OBSERVATION DATA    M (MIXED)': <60}RINEX VERSION / TYPE",
        f"{'     2    C1    L1': <60}# / TYPES OF OBSERV",
        f"{'': <60}END OF HEADER",
    ]
    header = parse_header(lines)
    assert set(header.observables) == set(V2_MIXED_CONSTELLATIONS)
    assert header.observables_for(Constellation.EGNOS) == ["C1", "L1"]


def test_header_leaves_stream_on_first_record_line():
    with open(os.path.join(DATA_DIR, "v2_sample_a.rnx"), "r") as f:
        parse_header(f)
        assert f.readline().startswith(" 21 12 21  0  0  0.0000000")


def test_not_an_observation_file():
    lines = [f"{'     3.04           NAVIGATION DATA     G': <60}RINEX VERSION / TYPE"]
    with pytest.raises(HeaderParsingError):
        parse_header(lines)


def test_missing_end_of_header():
    lines = [f"{'     3.04           OBSERVATION DATA    G': <60}RINEX VERSION / TYPE"]
    with pytest.raises(HeaderParsingError):
        parse_header(lines)
    assert parse_header(lines, strict=False).version == Version(3, 4)


def test_types_of_observ_continuation():
    codes = ["L1", "L2", "C1", "C2", "P1", "P2", "D1", "D2", "S1", "S2", "L5"]
    lines = format_types_of_observ(codes)
    assert len(lines) == 2
    assert lines[0].startswith("    11")
    assert parse_types_of_observ(lines) == codes


def test_system_obs_types_continuation():
    gps_codes = [f"{kind}{band}" for band in ("1C", "2W", "5Q") for kind in "CLDS"] + ["C1W", "L1W", "S1W"]
    entries = {"G": gps_codes, "R": ["C1C", "L1C"]}
    lines = format_system_obs_types(entries)
    assert len(lines) == 3
    assert lines[0][:6] == "G   15"
    assert parse_system_obs_types(lines) == entries


@pytest.mark.parametrize("filename", ["v3_sample.rnx", "v2_sample_a.rnx"])
def test_format_header_round_trip(filename):
    header = read_header(filename)
    lines = format_header(header)
    assert all(len(line) <= LABEL_COLUMN + 20 for line in lines)
    assert parse_header(lines) == header


def test_format_header_writes_labels_at_column_60():
    header = read_header("v3_sample.rnx")
    buffer = io.StringIO("\n".join(format_header(header)))
    for line in buffer:
        assert line[LABEL_COLUMN:].strip() in (
            "RINEX VERSION / TYPE",
            "COMMENT",
            "SYS / # / OBS TYPES",
            "TIME OF FIRST OBS",
            "END OF HEADER",
        )
