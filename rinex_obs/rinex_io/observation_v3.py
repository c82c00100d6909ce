"""
RINEX 3 (and later) observation record grammar: a `>` epoch line, then one
line per satellite holding the satellite identifier and its 16 column slots
in the order of the header `SYS / # / OBS TYPES` table.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..gnss.sv import SV
from ..time.epoch import Epoch
from ..time.timescale import TimeScale
from .errors import NumSatParsingError
from .flags import EpochFlag
from .header import Header
from .observation_fields import (
    OBSERVABLE_WIDTH,
    OBSERVATION_VALUE_WIDTH,
    SV_WIDTH,
    format_observation_slot,
    get_observables,
    parse_epoch_datetime,
    parse_observation_slot,
)
from .record import ObservationData, ObservationKey, RecordEntry, RecordKey

V3_EPOCH_MARKER = ">"
V3_DATE_END = 29
V3_FLAG_END = 32
V3_NUM_SAT_END = 35
V3_CLOCK_OFFSET_SPACING = 6


def is_new_epoch_v3(line: str) -> bool:
    return line.startswith(V3_EPOCH_MARKER)


def parse_epoch_line_v3(line: str, timescale: TimeScale) -> Tuple[RecordKey, int, Optional[float]]:
    epoch = parse_epoch_datetime(line[len(V3_EPOCH_MARKER):V3_DATE_END], timescale)
    flag = EpochFlag.from_str(line[V3_DATE_END:V3_FLAG_END])
    try:
        num_sat = int(line[V3_FLAG_END:V3_NUM_SAT_END])
    except ValueError:
        raise NumSatParsingError(
            f"Invalid number of satellites: `{line[V3_FLAG_END:V3_NUM_SAT_END]}`"
        )
    clock_offset = None
    if len(line) > V3_NUM_SAT_END:
        clock_offset_str = line[V3_NUM_SAT_END:].strip()
        try:
            clock_offset = float(clock_offset_str) if clock_offset_str else None
        except ValueError:
            logging.debug(f"Omitting unparsable clock offset `{clock_offset_str}`")
    return RecordKey(epoch, flag), num_sat, clock_offset


def parse_observations_v3(header: Header, lines: List[str]) -> Dict[ObservationKey, ObservationData]:
    observations: Dict[ObservationKey, ObservationData] = {}
    for line in lines:
        if not line.strip():
            continue
        sv = SV.from_str(line[:SV_WIDTH])
        observables = get_observables(header, sv)
        content = line[SV_WIDTH:]
        nb_obs = len(content) // OBSERVABLE_WIDTH
        for i in range(min(nb_obs, len(observables))):
            data = parse_observation_slot(content[i * OBSERVABLE_WIDTH : (i + 1) * OBSERVABLE_WIDTH])
            if data is not None:
                observations[ObservationKey(sv, observables[i])] = data
        # trailing slot without its flags
        rem = content[nb_obs * OBSERVABLE_WIDTH :]
        if len(rem) >= OBSERVATION_VALUE_WIDTH and nb_obs < len(observables):
            data = parse_observation_slot(rem)
            if data is not None:
                observations[ObservationKey(sv, observables[nb_obs])] = data
    return observations


def parse_epoch_v3(
    header: Header, lines: List[str], timescale: TimeScale
) -> Tuple[RecordKey, RecordEntry]:
    key, num_sat, clock_offset = parse_epoch_line_v3(lines[0], timescale)
    if not key.flag.has_observations():
        return key, RecordEntry(clock_offset, {})
    observations = parse_observations_v3(header, lines[1:])
    entry = RecordEntry(clock_offset, observations)
    if len(entry.sv()) != num_sat:
        logging.debug(f"{key.epoch}: {num_sat} satellites declared, {len(entry.sv())} observed")
    return key, entry


def format_epoch_line_v3(epoch: Epoch, flag: EpochFlag, num_sat: int, clock_offset: Optional[float]) -> str:
    year, month, day, hour, minute, second, nanos = epoch.to_gregorian()
    line = (
        f"{V3_EPOCH_MARKER} {year:04d} {month:02d} {day:02d} {hour:02d} {minute:02d}"
        f"{second:3d}.{nanos // 100:07d}  {int(flag):d}{num_sat:3d}"
    )
    if clock_offset is not None:
        line += f"{'': <{V3_CLOCK_OFFSET_SPACING}}{clock_offset:15.12f}"
    return line


def format_epoch_v3(header: Header, key: RecordKey, entry: RecordEntry, timescale: TimeScale) -> str:
    svs = entry.sv()
    lines = [
        format_epoch_line_v3(key.epoch.in_timescale(timescale), key.flag, len(svs), entry.clock_offset)
    ]
    for sv in svs:
        observables = get_observables(header, sv)
        lines.append(
            str(sv)
            + "".join(
                format_observation_slot(entry.observations.get(ObservationKey(sv, observable)))
                for observable in observables
            )
        )
    return "\n".join(lines).rstrip()
