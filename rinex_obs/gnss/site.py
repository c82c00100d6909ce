"""
Station and spacecraft identifiers that may appear in mask descriptions.
"""

import re
from dataclasses import dataclass
from enum import Enum

_COSPAR_PATTERN = re.compile(r"^(\d{4})-(\d{3})([A-Z]{1,3})$")
_DOMES_PATTERN = re.compile(r"^(\d{3})(\d{2})([MS])(\d{3})$")


@dataclass(frozen=True)
class COSPAR:
    """International designator, e.g. `2018-080A`."""
    launch_year: int
    launch_number: int
    piece: str

    @staticmethod
    def from_str(s: str) -> "COSPAR":
        match = _COSPAR_PATTERN.match(s.strip())
        if match is None:
            raise ValueError(f"Invalid COSPAR designator: `{s}`")
        year, number, piece = match.groups()
        return COSPAR(int(year), int(number), piece)

    def __str__(self) -> str:
        return f"{self.launch_year:04d}-{self.launch_number:03d}{self.piece}"


class DomesTrackingPoint(Enum):
    MONUMENT = "M"
    INSTRUMENT = "S"


@dataclass(frozen=True)
class DOMES:
    """IERS DOMES site number, e.g. `10002M006`."""
    area: int
    site: int
    point: DomesTrackingPoint
    sequential: int

    @staticmethod
    def from_str(s: str) -> "DOMES":
        match = _DOMES_PATTERN.match(s.strip())
        if match is None:
            raise ValueError(f"Invalid DOMES number: `{s}`")
        area, site, point, sequential = match.groups()
        return DOMES(int(area), int(site), DomesTrackingPoint(point), int(sequential))

    def __str__(self) -> str:
        return f"{self.area:03d}{self.site:02d}{self.point.value}{self.sequential:03d}"
