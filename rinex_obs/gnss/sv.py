from dataclasses import dataclass

from ..rinex_io.errors import ConstellationParsingError, SvParsingError
from .constellation import Constellation, sbas_constellation


@dataclass(frozen=True)
class SV:
    """Satellite vehicle: constellation and PRN number."""
    constellation: Constellation
    prn: int

    @staticmethod
    def from_str(s: str) -> "SV":
        """
        Parses a RINEX satellite identifier such as `G07`. Some writers use
        a space instead of a leading zero (`G 7`), which is accepted.
        SBAS identifiers resolve to the system operating that PRN.
        """
        text = s.strip()
        if len(text) < 2:
            raise SvParsingError(f"Invalid satellite identifier: `{s}`")
        try:
            constellation = Constellation.from_str(text[0])
        except ConstellationParsingError:
            raise SvParsingError(f"Invalid satellite identifier: `{s}`")
        if constellation.is_mixed():
            raise SvParsingError(f"Invalid satellite identifier: `{s}`")
        prn_str = text[1:].strip()
        if not prn_str.isdigit():
            raise SvParsingError(f"Invalid satellite identifier: `{s}`")
        prn = int(prn_str)
        if constellation == Constellation.SBAS:
            constellation = sbas_constellation(prn)
        return SV(constellation, prn)

    def _sort_key(self):
        return (self.constellation.letter, self.constellation.value, self.prn)

    def __lt__(self, other: "SV") -> bool:
        return self._sort_key() < other._sort_key()

    def __le__(self, other: "SV") -> bool:
        return self._sort_key() <= other._sort_key()

    def __gt__(self, other: "SV") -> bool:
        return self._sort_key() > other._sort_key()

    def __ge__(self, other: "SV") -> bool:
        return self._sort_key() >= other._sort_key()

    def __str__(self) -> str:
        return f"{self.constellation.letter}{self.prn:02d}"
