"""
Minimal RINEX observation header: the fields the observation record parser
and writer depend on (revision, declared constellation, observable tables,
time system). Other header records are skipped on read.
"""

from dataclasses import dataclass, field
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..gnss.constellation import Constellation
from ..time.epoch import Epoch
from ..time.timescale import TimeScale
from .errors import ConstellationParsingError, HeaderParsingError

LABEL_COLUMN = 60
LABEL_RINEX_VERSION_TYPE = "RINEX VERSION / TYPE"
LABEL_COMMENT = "COMMENT"
LABEL_TYPES_OF_OBSERV = "# / TYPES OF OBSERV"
LABEL_SYS_OBS_TYPES = "SYS / # / OBS TYPES"
LABEL_TIME_OF_FIRST_OBS = "TIME OF FIRST OBS"
LABEL_END_OF_HEADER = "END OF HEADER"

V2_OBS_TYPES_PER_LINE = 9
V3_OBS_TYPES_PER_LINE = 13

# constellations a V2 "Mixed" file may contain; V2 uses one table for all of them
V2_MIXED_CONSTELLATIONS = [
    Constellation.GPS,
    Constellation.GLONASS,
    Constellation.GALILEO,
    Constellation.SBAS,
    Constellation.BEIDOU,
    Constellation.QZSS,
    Constellation.IRNSS,
]


@dataclass(frozen=True, order=True)
class Version:
    major: int
    minor: int = 0

    @staticmethod
    def from_str(s: str) -> "Version":
        text = s.strip()
        try:
            if "." in text:
                major, minor = text.split(".", 1)
                return Version(int(major), int(minor) if minor else 0)
            return Version(int(text), 0)
        except ValueError:
            raise HeaderParsingError(f"Invalid RINEX version: `{s}`")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor:02d}"


@dataclass
class Header:
    version: Version
    constellation: Optional[Constellation]
    # constellation -> observable codes, in file order
    observables: Dict[Constellation, List[str]]
    time_of_first_obs: Optional[Epoch] = None
    time_system: Optional[TimeScale] = None
    comments: List[str] = field(default_factory=list)

    def observables_for(self, constellation: Constellation) -> Optional[List[str]]:
        """Observable table of `constellation`; SBAS systems share the generic SBAS table."""
        if constellation.is_sbas():
            return self.observables.get(Constellation.SBAS)
        return self.observables.get(constellation)

    def timescale(self) -> TimeScale:
        if self.time_system is not None:
            return self.time_system
        if self.constellation is not None:
            return self.constellation.timescale()
        return TimeScale.GPST


def parse_rinex_version_type(line: str) -> Tuple[Version, str, Optional[Constellation]]:
    version = Version.from_str(line[:9])
    file_type = line[20:21].strip()
    system_code = line[40:41].strip()
    constellation = Constellation.from_str(system_code) if system_code else Constellation.GPS
    return version, file_type, constellation


def format_rinex_version_type(version: Version, constellation: Optional[Constellation]) -> str:
    system_code = constellation.letter if constellation is not None else " "
    return f"{str(version):>9}{'': <11}{'O': <20}{system_code: <20}"


def parse_types_of_observ(lines: List[str]) -> List[str]:
    """V2 `# / TYPES OF OBSERV`, one table shared by all constellations."""
    num_obs = int(lines[0][:6])
    obs_codes: List[str] = []
    for line in lines:
        obs_codes.extend(line[6:LABEL_COLUMN].split())
    return obs_codes[:num_obs]


def format_types_of_observ(obs_codes: List[str]) -> List[str]:
    lines = []
    N = V2_OBS_TYPES_PER_LINE
    for i in range(0, max(len(obs_codes), 1), N):
        prefix = f"{len(obs_codes):6d}" if i == 0 else f"{'': <6}"
        line = prefix + "".join(f"{code:>6}" for code in obs_codes[i : i + N])
        lines.append(line)
    return lines


def parse_system_obs_types(lines: List[str]) -> Dict[str, List[str]]:
    entries: Dict[str, List[str]] = {}
    # entries use continuation lines, keep track of the system currently being read
    current_system_code: str | None = None
    current_obs_codes: List[str] = []
    current_num_obs_remaining: int = 0

    for line in lines:
        if current_system_code is None:
            current_system_code = line[0:1].strip()
            current_num_obs_remaining = int(line[3:6])
            current_obs_codes = []
        for obs_code in line[6:LABEL_COLUMN].split():
            current_obs_codes.append(obs_code)
            current_num_obs_remaining -= 1
            if current_num_obs_remaining == 0:
                break
        if current_num_obs_remaining <= 0:
            entries[current_system_code] = current_obs_codes
            current_system_code = None

    return entries


def format_system_obs_types(entries: Dict[str, List[str]]) -> List[str]:
    lines = []
    N = V3_OBS_TYPES_PER_LINE
    for system_code, obs_codes in entries.items():
        for i in range(0, max(len(obs_codes), 1), N):
            prefix = f"{system_code: <3}{len(obs_codes):3d}" if i == 0 else f"{'': <6}"
            lines.append(prefix + "".join(f" {code:>3}" for code in obs_codes[i : i + N]))
    return lines


def parse_time_of_first_obs(line: str) -> Tuple[Optional[Epoch], Optional[TimeScale]]:
    time_system_str = line[48:51].strip()
    time_system = TimeScale.from_str(time_system_str) if time_system_str else None
    try:
        year = int(line[0:6])
        month = int(line[6:12])
        day = int(line[12:18])
        hour = int(line[18:24])
        minute = int(line[24:30])
        whole, _, frac = line[30:43].strip().partition(".")
        second = int(whole)
    except ValueError:
        logging.warning(f"Unable to parse `{LABEL_TIME_OF_FIRST_OBS}`: {line[:43]}")
        return None, time_system
    epoch = Epoch.from_gregorian(
        year,
        month,
        day,
        hour,
        minute,
        second,
        int(frac[:9].ljust(9, "0")) if frac else 0,
        time_system or TimeScale.GPST,
    )
    return epoch, time_system


def format_time_of_first_obs(epoch: Epoch, time_system: Optional[TimeScale]) -> str:
    year, month, day, hour, minute, second, nanos = epoch.to_gregorian()
    code = time_system.rinex_code if time_system is not None else ""
    return (
        f"{year:6d}{month:6d}{day:6d}{hour:6d}{minute:6d}{second:5d}.{nanos // 100:07d}"
        f"{'': <5}{code: <3}"
    )


def parse_header(input: Iterable[str], strict: bool = True) -> Header:
    """
    Reads header lines from `input` up to and including `END OF HEADER`.
    When `input` is a file or an iterator, it is left positioned on the first
    record line.
    """
    lines: Iterator[str] = iter(input)
    version: Version | None = None
    constellation: Constellation | None = None
    time_of_first_obs: Optional[Epoch] = None
    time_system: Optional[TimeScale] = None
    comments: List[str] = []

    # multi-line entries are aggregated and parsed once the end of the header is reached
    types_of_observ_lines: List[str] = []
    sys_obs_types_lines: List[str] = []

    for line in lines:
        line = line.rstrip("\r\n")
        line_label = line[LABEL_COLUMN:].strip()
        if line_label == LABEL_END_OF_HEADER:
            break
        elif line_label == LABEL_RINEX_VERSION_TYPE:
            version, file_type, constellation = parse_rinex_version_type(line)
            if file_type != "O":
                raise HeaderParsingError(f"Not an observation RINEX file: type `{file_type}`")
        elif line_label == LABEL_COMMENT:
            comments.append(line[:LABEL_COLUMN].rstrip())
        elif line_label == LABEL_TYPES_OF_OBSERV:
            types_of_observ_lines.append(line)
        elif line_label == LABEL_SYS_OBS_TYPES:
            sys_obs_types_lines.append(line)
        elif line_label == LABEL_TIME_OF_FIRST_OBS:
            time_of_first_obs, time_system = parse_time_of_first_obs(line)
        else:
            logging.debug(f"Skipping header record `{line_label}`")
    else:
        if strict:
            raise HeaderParsingError(f"Missing `{LABEL_END_OF_HEADER}`")
        logging.warning(f"Missing `{LABEL_END_OF_HEADER}`")

    if version is None:
        raise HeaderParsingError(f"Missing `{LABEL_RINEX_VERSION_TYPE}`")

    observables: Dict[Constellation, List[str]] = {}
    if types_of_observ_lines:
        obs_codes = parse_types_of_observ(types_of_observ_lines)
        if constellation is None or constellation.is_mixed():
            targets = V2_MIXED_CONSTELLATIONS
        elif constellation.is_sbas():
            targets = [Constellation.SBAS]
        else:
            targets = [constellation]
        for target in targets:
            observables[target] = list(obs_codes)
    for system_code, obs_codes in parse_system_obs_types(sys_obs_types_lines).items():
        try:
            observables[Constellation.from_str(system_code)] = obs_codes
        except ConstellationParsingError:
            if strict:
                raise
            logging.warning(f"Skipping observable table of unknown system `{system_code}`")

    return Header(
        version=version,
        constellation=constellation,
        observables=observables,
        time_of_first_obs=time_of_first_obs,
        time_system=time_system,
        comments=comments,
    )


def format_header(header: Header) -> List[str]:
    def labeled(content: str, label: str) -> str:
        return f"{content: <{LABEL_COLUMN}}{label}"

    lines = [labeled(format_rinex_version_type(header.version, header.constellation), LABEL_RINEX_VERSION_TYPE)]
    for comment in header.comments:
        lines.append(labeled(comment, LABEL_COMMENT))
    if header.version.major < 3:
        # V2 files carry a single table
        obs_codes = next(iter(header.observables.values()), [])
        for line in format_types_of_observ(obs_codes):
            lines.append(labeled(line, LABEL_TYPES_OF_OBSERV))
    else:
        entries = {
            constellation.letter: obs_codes
            for constellation, obs_codes in header.observables.items()
        }
        for line in format_system_obs_types(entries):
            lines.append(labeled(line, LABEL_SYS_OBS_TYPES))
    if header.time_of_first_obs is not None:
        lines.append(
            labeled(
                format_time_of_first_obs(header.time_of_first_obs, header.time_system),
                LABEL_TIME_OF_FIRST_OBS,
            )
        )
    lines.append(labeled("", LABEL_END_OF_HEADER))
    return lines
