"""
RINEX 2 observation record grammar.

The epoch line lists the satellites (12 per line, continuation lines
indented by 32 columns). Each satellite's observations then follow in rows
of at most 5 slots, in the order of the header `# / TYPES OF OBSERV` table.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from ..gnss.sv import SV
from ..time.epoch import Epoch
from ..time.timescale import TimeScale
from .errors import (
    InvalidConstellationDefinitionError,
    MissingObservationDescriptionError,
    MissingSvDescriptionError,
    NumSatParsingError,
    SvParsingError,
)
from .flags import EpochFlag
from .header import Header
from .observation_fields import (
    OBSERVABLE_WIDTH,
    SV_WIDTH,
    format_observation_slot,
    get_observables,
    parse_epoch_datetime,
    parse_observation_slot,
)
from .record import ObservationData, ObservationKey, RecordEntry, RecordKey

V2_DATE_END = 26
V2_FLAG_END = 29
V2_NUM_SAT_END = 32
V2_SV_LIST_END = 68
V2_CLOCK_OFFSET_END = 80
V2_MIN_EPOCH_LINE_WIDTH = 30
V2_SV_PER_LINE = 12
V2_OBSERVABLES_PER_LINE = 5
V2_FIRST_SLOT_WIDTH = 17
V2_SHORT_LINE_WIDTH = 10

V2_EVENT_FLAGS = (
    EpochFlag.ANTENNA_BEING_MOVED,
    EpochFlag.NEW_SITE_OCCUPATION,
    EpochFlag.HEADER_INFORMATION_FOLLOWS,
    EpochFlag.EXTERNAL_EVENT,
)


def is_new_epoch_v2(line: str) -> bool:
    if len(line) < V2_MIN_EPOCH_LINE_WIDTH:
        return False
    date_str = line[:V2_DATE_END]
    try:
        flag = EpochFlag.from_str(line[V2_DATE_END:V2_FLAG_END])
    except ValueError:
        return False
    if not date_str.strip():
        # event markers may come without their own timestamp
        return flag in V2_EVENT_FLAGS
    try:
        parse_epoch_datetime(date_str, TimeScale.GPST)
    except ValueError:
        return False
    return True


def parse_epoch_line_v2(line: str, timescale: TimeScale) -> Tuple[RecordKey, int, Optional[float]]:
    epoch = parse_epoch_datetime(line[:V2_DATE_END], timescale)
    flag = EpochFlag.from_str(line[V2_DATE_END:V2_FLAG_END])
    try:
        num_sat = int(line[V2_FLAG_END:V2_NUM_SAT_END])
    except ValueError:
        raise NumSatParsingError(
            f"Invalid number of satellites: `{line[V2_FLAG_END:V2_NUM_SAT_END]}`"
        )
    clock_offset = None
    if len(line) > V2_SV_LIST_END:
        clock_offset_str = line[V2_SV_LIST_END:V2_CLOCK_OFFSET_END].strip()
        try:
            clock_offset = float(clock_offset_str) if clock_offset_str else None
        except ValueError:
            logging.debug(f"Omitting unparsable clock offset `{clock_offset_str}`")
    return RecordKey(epoch, flag), num_sat, clock_offset


def parse_sv_list_v2(lines: List[str], num_sat: int) -> Tuple[List[str], int]:
    """
    Collects the `num_sat` satellite identifiers of the epoch. Returns them
    with the number of lines consumed.
    """
    num_lines = 1 + (num_sat - 1) // V2_SV_PER_LINE if num_sat > 0 else 1
    if len(lines) < num_lines:
        raise MissingSvDescriptionError(
            f"Expected {num_lines} lines of satellite identifiers, got {len(lines)}"
        )
    sv_ids: List[str] = []
    for line in lines[:num_lines]:
        sv_list = line[V2_NUM_SAT_END:V2_SV_LIST_END]
        for i in range(0, len(sv_list), SV_WIDTH):
            sv_id = sv_list[i : i + SV_WIDTH]
            if sv_id.strip():
                sv_ids.append(sv_id)
    if len(sv_ids) < num_sat:
        raise MissingSvDescriptionError(
            f"Expected {num_sat} satellite identifiers, got {len(sv_ids)}"
        )
    return sv_ids[:num_sat], num_lines


def resolve_sv_v2(sv_id: str, header: Header) -> Optional[SV]:
    """
    Identifies a V2 satellite. Files restricted to one constellation may omit
    the system letter (`" 7"`); the header's constellation is used then.
    Malformed identifiers give None.
    """
    try:
        return SV.from_str(sv_id)
    except SvParsingError:
        prn_str = sv_id.strip()
        if not prn_str.isdigit():
            logging.debug(f"Omitting observations of malformed satellite `{sv_id}`")
            return None
        constellation = header.constellation
        if constellation is None or constellation.is_mixed():
            raise InvalidConstellationDefinitionError(
                f"Satellite `{sv_id}` has no constellation and the header declares none"
            )
        return SV.from_str(f"{constellation.letter}{int(prn_str):02d}")


def shared_observables_v2(header: Header) -> List[str]:
    """V2 headers carry a single table, shared by every constellation."""
    for observables in header.observables.values():
        return observables
    raise MissingObservationDescriptionError("Header declares no observables")


def parse_observations_v2(
    header: Header, sv_ids: List[str], lines: List[str]
) -> Dict[ObservationKey, ObservationData]:
    observations: Dict[ObservationKey, ObservationData] = {}
    if not sv_ids:
        return observations

    def next_sv(index: int) -> Tuple[Optional[SV], List[str]]:
        sv = resolve_sv_v2(sv_ids[index], header)
        if sv is None:
            # rows of the omitted satellite still have to be consumed
            return None, shared_observables_v2(header)
        return sv, get_observables(header, sv)

    sv_index = 0
    sv, observables = next_sv(sv_index)
    obs_ptr = 0

    for line in lines:
        line_width = len(line)
        if line_width < V2_SHORT_LINE_WIDTH:
            # blank row: the remaining slots of this row are missing
            obs_ptr += min(V2_OBSERVABLES_PER_LINE, len(observables) - obs_ptr)
        else:
            nb_obs = math.ceil(line_width / OBSERVABLE_WIDTH)
            for i in range(nb_obs):
                obs_ptr += 1
                if obs_ptr > len(observables):
                    # row is longer than the table
                    break
                if i == 0:
                    slot = line[:V2_FIRST_SLOT_WIDTH]
                else:
                    slot = line[i * OBSERVABLE_WIDTH : (i + 1) * OBSERVABLE_WIDTH]
                data = parse_observation_slot(slot)
                if data is not None and sv is not None:
                    observations[ObservationKey(sv, observables[obs_ptr - 1])] = data
            if nb_obs < V2_OBSERVABLES_PER_LINE:
                obs_ptr += V2_OBSERVABLES_PER_LINE - nb_obs

        if obs_ptr >= len(observables):
            obs_ptr = 0
            sv_index += 1
            if sv_index >= len(sv_ids):
                break
            sv, observables = next_sv(sv_index)

    return observations


def parse_epoch_v2(
    header: Header, lines: List[str], timescale: TimeScale
) -> Tuple[RecordKey, RecordEntry]:
    key, num_sat, clock_offset = parse_epoch_line_v2(lines[0], timescale)
    if not key.flag.has_observations():
        return key, RecordEntry(clock_offset, {})
    sv_ids, num_lines = parse_sv_list_v2(lines, num_sat)
    observations = parse_observations_v2(header, sv_ids, lines[num_lines:])
    return key, RecordEntry(clock_offset, observations)


def format_epoch_line_v2(epoch: Epoch, flag: EpochFlag, num_sat: int) -> str:
    year, month, day, hour, minute, second, nanos = epoch.to_gregorian()
    return (
        f" {year % 100:02d} {month:2d} {day:2d} {hour:2d} {minute:2d}"
        f"{second:3d}.{nanos // 100:07d}  {int(flag):d}{num_sat:3d}"
    )


def format_epoch_v2(header: Header, key: RecordKey, entry: RecordEntry, timescale: TimeScale) -> str:
    svs = entry.sv()
    first_line = format_epoch_line_v2(key.epoch.in_timescale(timescale), key.flag, len(svs))
    lines = []
    for i in range(0, max(len(svs), 1), V2_SV_PER_LINE):
        sv_list = "".join(str(sv) for sv in svs[i : i + V2_SV_PER_LINE])
        if i == 0:
            lines.append(first_line + sv_list)
        else:
            lines.append(f"{'': <{V2_NUM_SAT_END}}{sv_list}")
    if entry.clock_offset is not None:
        lines[0] = f"{lines[0]: <{V2_SV_LIST_END}}{entry.clock_offset:12.9f}"

    for sv in svs:
        observables = get_observables(header, sv)
        for i in range(0, len(observables), V2_OBSERVABLES_PER_LINE):
            lines.append(
                "".join(
                    format_observation_slot(entry.observations.get(ObservationKey(sv, observable)))
                    for observable in observables[i : i + V2_OBSERVABLES_PER_LINE]
                )
            )
    return "\n".join(lines).rstrip()
