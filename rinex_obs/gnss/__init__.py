from .constellation import (
    Constellation,
    SBAS_CONSTELLATIONS,
    SYSTEM_LETTER_TO_CONSTELLATION_MAP,
    sbas_constellation,
)

from .site import COSPAR, DOMES, DomesTrackingPoint

from .sv import SV
