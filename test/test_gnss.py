import pytest

from rinex_obs.gnss.constellation import Constellation, sbas_constellation
from rinex_obs.gnss.site import COSPAR, DOMES, DomesTrackingPoint
from rinex_obs.gnss.sv import SV
from rinex_obs.rinex_io.errors import ConstellationParsingError, SvParsingError
from rinex_obs.time.timescale import TimeScale


@pytest.mark.parametrize(
    "s, expected",
    [
        ("G", Constellation.GPS),
        ("GPS", Constellation.GPS),
        ("gps", Constellation.GPS),
        ("R", Constellation.GLONASS),
        ("GLO", Constellation.GLONASS),
        ("Glonass", Constellation.GLONASS),
        ("GAL", Constellation.GALILEO),
        ("BDS", Constellation.BEIDOU),
        ("QZSS", Constellation.QZSS),
        ("IRNSS", Constellation.IRNSS),
        ("S", Constellation.SBAS),
        ("EGNOS", Constellation.EGNOS),
        ("M", Constellation.MIXED),
    ],
)
def test_constellation_from_str(s, expected):
    assert Constellation.from_str(s) == expected


def test_unknown_constellation():
    with pytest.raises(ConstellationParsingError):
        Constellation.from_str("X")


def test_sbas_systems_share_letter():
    assert Constellation.WAAS.letter == "S"
    assert Constellation.EGNOS.is_sbas()
    assert not Constellation.GPS.is_sbas()
    assert Constellation.GALILEO.letter == "E"


def test_constellation_timescale():
    assert Constellation.GLONASS.timescale() == TimeScale.GLONASST
    assert Constellation.BEIDOU.timescale() == TimeScale.BDT
    assert Constellation.EGNOS.timescale() == TimeScale.GPST


@pytest.mark.parametrize(
    "prn, expected",
    [(20, Constellation.EGNOS), (31, Constellation.WAAS), (27, Constellation.GAGAN), (99, Constellation.SBAS)],
)
def test_sbas_constellation(prn, expected):
    assert sbas_constellation(prn) == expected


@pytest.mark.parametrize(
    "s, expected",
    [
        ("G07", SV(Constellation.GPS, 7)),
        ("G 7", SV(Constellation.GPS, 7)),
        (" R15", SV(Constellation.GLONASS, 15)),
        ("E01", SV(Constellation.GALILEO, 1)),
        ("S23", SV(Constellation.EGNOS, 23)),
        ("S90", SV(Constellation.SBAS, 90)),
    ],
)
def test_sv_from_str(s, expected):
    assert SV.from_str(s) == expected


@pytest.mark.parametrize("s", ["", "G", "X01", "M01", "G0x"])
def test_invalid_sv(s):
    with pytest.raises(SvParsingError):
        SV.from_str(s)


def test_sv_str_and_ordering():
    assert str(SV(Constellation.GPS, 3)) == "G03"
    assert str(SV(Constellation.WAAS, 31)) == "S31"
    svs = [SV(Constellation.GLONASS, 1), SV(Constellation.GPS, 10), SV(Constellation.GPS, 2)]
    assert sorted(svs) == [SV(Constellation.GPS, 2), SV(Constellation.GPS, 10), SV(Constellation.GLONASS, 1)]
    assert SV(Constellation.GPS, 2) < SV(Constellation.GPS, 10)


def test_domes():
    domes = DOMES.from_str("10002M006")
    assert domes == DOMES(100, 2, DomesTrackingPoint.MONUMENT, 6)
    assert str(domes) == "10002M006"
    assert DOMES.from_str("40405S031").point == DomesTrackingPoint.INSTRUMENT
    with pytest.raises(ValueError):
        DOMES.from_str("10002X006")


def test_cospar():
    cospar = COSPAR.from_str("2018-080A")
    assert cospar == COSPAR(2018, 80, "A")
    assert str(cospar) == "2018-080A"
    with pytest.raises(ValueError):
        COSPAR.from_str("18-080A")
