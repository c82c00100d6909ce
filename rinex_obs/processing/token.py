"""
Values a mask filter compares the data against.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
import logging
from typing import Any, List

from ..gnss.constellation import Constellation
from ..gnss.site import COSPAR, DOMES
from ..gnss.sv import SV
from ..time.duration import parse_duration
from ..time.epoch import Epoch
from .errors import (
    InvalidAzimuthError,
    InvalidConstellationError,
    InvalidDOMESError,
    InvalidDurationError,
    InvalidElevationError,
    InvalidEpochError,
    InvalidFrequencyError,
    InvalidMaskError,
)


class TokenKind(Enum):
    EPOCH = "epoch"
    DURATION = "duration"
    ELEVATION = "elevation"  # deg
    AZIMUTH = "azimuth"  # deg
    FREQUENCIES = "frequencies"  # Hz
    SNR = "snr"  # dB-Hz
    SV = "sv"
    COSPAR = "cospar"
    OBSERVABLES = "observables"
    CONSTELLATIONS = "constellations"
    DOMES = "domes"
    STATIONS = "stations"


def _split_list(s: str) -> List[str]:
    return [item.strip() for item in s.strip().split(",")]


@dataclass
class MaskToken:
    kind: TokenKind
    value: Any

    @staticmethod
    def parse_epoch(s: str) -> "MaskToken":
        try:
            return MaskToken(TokenKind.EPOCH, Epoch.from_str(s.strip()))
        except ValueError:
            raise InvalidEpochError(f"Invalid epoch: `{s}`")

    @staticmethod
    def parse_duration(s: str) -> "MaskToken":
        try:
            duration: timedelta = parse_duration(s)
        except ValueError:
            raise InvalidDurationError(f"Invalid duration: `{s}`")
        return MaskToken(TokenKind.DURATION, duration)

    @staticmethod
    def parse_elevation(s: str) -> "MaskToken":
        try:
            elevation = float(s.strip())
        except ValueError:
            raise InvalidElevationError(f"Invalid elevation: `{s}`")
        if not 0.0 <= elevation <= 90.0:
            raise InvalidElevationError(f"Elevation out of [0, 90] deg: {elevation}")
        return MaskToken(TokenKind.ELEVATION, elevation)

    @staticmethod
    def parse_azimuth(s: str) -> "MaskToken":
        try:
            azimuth = float(s.strip())
        except ValueError:
            raise InvalidAzimuthError(f"Invalid azimuth: `{s}`")
        if not 0.0 <= azimuth <= 360.0:
            raise InvalidAzimuthError(f"Azimuth out of [0, 360] deg: {azimuth}")
        return MaskToken(TokenKind.AZIMUTH, azimuth)

    @staticmethod
    def parse_snr(s: str) -> "MaskToken":
        try:
            return MaskToken(TokenKind.SNR, float(s.strip()))
        except ValueError:
            raise InvalidMaskError(f"Invalid SNR: `{s}`")

    @staticmethod
    def parse_frequencies(s: str) -> "MaskToken":
        frequencies: List[float] = []
        for item in _split_list(s):
            try:
                frequencies.append(float(item))
            except ValueError:
                logging.debug(f"Ignoring invalid frequency `{item}`")
        if not frequencies:
            raise InvalidFrequencyError(f"Invalid frequencies: `{s}`")
        return MaskToken(TokenKind.FREQUENCIES, frequencies)

    @staticmethod
    def parse_sv(s: str) -> "MaskToken":
        svs: List[SV] = []
        for item in _split_list(s):
            try:
                svs.append(SV.from_str(item))
            except ValueError:
                logging.debug(f"Ignoring invalid satellite `{item}`")
        if not svs:
            raise InvalidMaskError(f"Invalid satellites: `{s}`")
        return MaskToken(TokenKind.SV, svs)

    @staticmethod
    def parse_cospar(s: str) -> "MaskToken":
        designators: List[COSPAR] = []
        for item in _split_list(s):
            try:
                designators.append(COSPAR.from_str(item))
            except ValueError:
                logging.debug(f"Ignoring invalid COSPAR designator `{item}`")
        if not designators:
            raise InvalidMaskError(f"Invalid COSPAR designators: `{s}`")
        return MaskToken(TokenKind.COSPAR, designators)

    @staticmethod
    def parse_observables(s: str) -> "MaskToken":
        return MaskToken(TokenKind.OBSERVABLES, [item for item in _split_list(s) if item])

    @staticmethod
    def parse_constellations(s: str) -> "MaskToken":
        constellations: List[Constellation] = []
        for item in _split_list(s):
            try:
                constellations.append(Constellation.from_str(item))
            except ValueError:
                logging.debug(f"Ignoring invalid constellation `{item}`")
        if not constellations:
            raise InvalidConstellationError(f"Invalid constellations: `{s}`")
        return MaskToken(TokenKind.CONSTELLATIONS, constellations)

    @staticmethod
    def parse_domes_sites(s: str) -> "MaskToken":
        sites: List[DOMES] = []
        for item in _split_list(s):
            try:
                sites.append(DOMES.from_str(item))
            except ValueError:
                logging.debug(f"Ignoring invalid DOMES number `{item}`")
        if not sites:
            raise InvalidDOMESError(f"Invalid DOMES numbers: `{s}`")
        return MaskToken(TokenKind.DOMES, sites)

    @staticmethod
    def parse_stations(s: str) -> "MaskToken":
        return MaskToken(TokenKind.STATIONS, _split_list(s))
