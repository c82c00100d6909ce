"""
GNSS constellations, including the regional SBAS systems that all share the
generic `S` RINEX identifier.
"""

from enum import Enum
from typing import Dict

from ..rinex_io.errors import ConstellationParsingError
from ..time.timescale import TimeScale


class Constellation(Enum):
    GPS = "GPS"
    GLONASS = "Glonass"
    GALILEO = "Galileo"
    BEIDOU = "BeiDou"
    QZSS = "QZSS"
    IRNSS = "IRNSS"
    SBAS = "SBAS"
    WAAS = "WAAS"
    EGNOS = "EGNOS"
    MSAS = "MSAS"
    GAGAN = "GAGAN"
    SDCM = "SDCM"
    BDSBAS = "BDSBAS"
    KASS = "KASS"
    SPAN = "SPAN"
    ASBAS = "ASBAS"
    NSAS = "NSAS"
    MIXED = "Mixed"

    @staticmethod
    def from_str(s: str) -> "Constellation":
        """
        Parses a RINEX system letter (`G`), a 3-letter system id (`GPS`,
        `GLO`, ...) or a constellation name (case insensitive).
        """
        key = s.strip().upper()
        if key in SYSTEM_LETTER_TO_CONSTELLATION_MAP:
            return SYSTEM_LETTER_TO_CONSTELLATION_MAP[key]
        if key in SYSTEM_ID_TO_CONSTELLATION_MAP:
            return SYSTEM_ID_TO_CONSTELLATION_MAP[key]
        for constellation in Constellation:
            if constellation.value.upper() == key:
                return constellation
        raise ConstellationParsingError(f"Unknown constellation: `{s}`")

    @property
    def letter(self) -> str:
        if self.is_sbas():
            return "S"
        return CONSTELLATION_TO_SYSTEM_LETTER_MAP[self]

    def is_sbas(self) -> bool:
        return self in SBAS_CONSTELLATIONS

    def is_mixed(self) -> bool:
        return self == Constellation.MIXED

    def timescale(self) -> TimeScale:
        """Time scale RINEX uses by default for single constellation files."""
        return CONSTELLATION_TO_TIMESCALE_MAP.get(self, TimeScale.GPST)


SBAS_CONSTELLATIONS = frozenset([
    Constellation.SBAS,
    Constellation.WAAS,
    Constellation.EGNOS,
    Constellation.MSAS,
    Constellation.GAGAN,
    Constellation.SDCM,
    Constellation.BDSBAS,
    Constellation.KASS,
    Constellation.SPAN,
    Constellation.ASBAS,
    Constellation.NSAS,
])

SYSTEM_LETTER_TO_CONSTELLATION_MAP = {
    "G": Constellation.GPS,
    "R": Constellation.GLONASS,
    "E": Constellation.GALILEO,
    "C": Constellation.BEIDOU,
    "J": Constellation.QZSS,
    "I": Constellation.IRNSS,
    "S": Constellation.SBAS,
    "M": Constellation.MIXED,
}

CONSTELLATION_TO_SYSTEM_LETTER_MAP = {
    constellation: letter for letter, constellation in SYSTEM_LETTER_TO_CONSTELLATION_MAP.items()
}

SYSTEM_ID_TO_CONSTELLATION_MAP = {
    "GLO": Constellation.GLONASS,
    "GAL": Constellation.GALILEO,
    "BDS": Constellation.BEIDOU,
    "QZS": Constellation.QZSS,
    "IRN": Constellation.IRNSS,
    "NAVIC": Constellation.IRNSS,
    "SBS": Constellation.SBAS,
}

CONSTELLATION_TO_TIMESCALE_MAP = {
    Constellation.GPS: TimeScale.GPST,
    Constellation.GLONASS: TimeScale.GLONASST,
    Constellation.GALILEO: TimeScale.GST,
    Constellation.BEIDOU: TimeScale.BDT,
    Constellation.QZSS: TimeScale.QZSST,
    Constellation.IRNSS: TimeScale.IRNSST,
}

# SBAS PRN (RINEX number + 100) -> operating system
SBAS_PRN_TO_CONSTELLATION_MAP: Dict[int, Constellation] = {
    120: Constellation.EGNOS,
    121: Constellation.EGNOS,
    122: Constellation.SPAN,
    123: Constellation.EGNOS,
    124: Constellation.EGNOS,
    125: Constellation.SDCM,
    126: Constellation.EGNOS,
    127: Constellation.GAGAN,
    128: Constellation.GAGAN,
    129: Constellation.MSAS,
    130: Constellation.BDSBAS,
    131: Constellation.WAAS,
    132: Constellation.GAGAN,
    133: Constellation.WAAS,
    134: Constellation.KASS,
    135: Constellation.WAAS,
    136: Constellation.EGNOS,
    137: Constellation.MSAS,
    138: Constellation.WAAS,
    140: Constellation.SDCM,
    141: Constellation.SDCM,
    143: Constellation.BDSBAS,
    144: Constellation.BDSBAS,
    147: Constellation.NSAS,
    148: Constellation.ASBAS,
}


def sbas_constellation(prn: int) -> Constellation:
    """
    Returns the SBAS system broadcasting on RINEX SBAS number `prn` (`S20` is
    PRN 120), or the generic `Constellation.SBAS` when unknown.
    """
    return SBAS_PRN_TO_CONSTELLATION_MAP.get(prn + 100, Constellation.SBAS)
