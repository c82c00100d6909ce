"""
Column layout shared by the V2 and V3 observation grammars, and the codec of
a single observation slot: an F14.3 value followed by the LLI digit and the
signal strength digit.
"""

import logging
from typing import List, Optional

from ..gnss.sv import SV
from ..time.epoch import Epoch
from ..time.timescale import TimeScale
from .errors import EpochParsingError, MissingObservationDescriptionError
from .flags import LliFlags, SNR
from .header import Header
from .record import ObservationData

SV_WIDTH = 3
OBSERVATION_VALUE_WIDTH = 14
OBSERVABLE_WIDTH = 16
LLI_COLUMN = 14
SNR_COLUMN = 15
MISSING_OBSERVATION = " " * OBSERVABLE_WIDTH


def parse_epoch_datetime(field: str, timescale: TimeScale) -> Epoch:
    """
    Parses the `yy mm dd hh mm ss.sssssss` (V2) or `yyyy mm dd hh mm
    ss.sssssss` (V3) epoch fields. Two digit years below 80 are 20xx.
    """
    fields = field.split()
    if len(fields) != 6:
        raise EpochParsingError(f"Invalid epoch: `{field}`")
    try:
        year = int(fields[0])
        if len(fields[0]) <= 2:
            year += 2000 if year < 80 else 1900
        month, day, hour, minute = (int(f) for f in fields[1:5])
        whole, _, frac = fields[5].partition(".")
        second = int(whole)
        nanos = int(frac[:9].ljust(9, "0")) if frac else 0
        return Epoch.from_gregorian(year, month, day, hour, minute, second, nanos, timescale)
    except ValueError as e:
        raise EpochParsingError(f"Invalid epoch: `{field}`: {e}")


def get_observables(header: Header, sv: SV) -> List[str]:
    observables = header.observables_for(sv.constellation)
    if observables is None:
        raise MissingObservationDescriptionError(
            f"No observable table for {sv} ({sv.constellation.value})"
        )
    return observables


def parse_observation_slot(slot: str) -> Optional[ObservationData]:
    """
    Decodes one observation slot. Returns None when the value is blank or
    unparsable; unknown LLI / SNR characters are dropped.
    """
    value_str = slot[:OBSERVATION_VALUE_WIDTH].strip()
    if not value_str:
        return None
    try:
        value = float(value_str)
    except ValueError:
        logging.debug(f"Omitting unparsable observation value `{value_str}`")
        return None
    lli = None
    snr = None
    if len(slot) > LLI_COLUMN:
        lli = LliFlags.from_char(slot[LLI_COLUMN])
        if lli is None and slot[LLI_COLUMN] != " ":
            logging.debug(f"Dropping unknown LLI flag `{slot[LLI_COLUMN]}`")
    if len(slot) > SNR_COLUMN:
        snr = SNR.from_char(slot[SNR_COLUMN])
    return ObservationData(value, lli, snr)


def format_observation_slot(data: Optional[ObservationData]) -> str:
    if data is None:
        return MISSING_OBSERVATION
    lli = f"{int(data.lli):d}" if data.lli is not None else " "
    snr = f"{int(data.snr):d}" if data.snr is not None else " "
    return f"{data.value:14.3f}{lli}{snr}"
