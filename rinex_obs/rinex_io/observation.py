"""
Observation record entry points: epoch boundary detection, parsing and
formatting of one epoch, and streaming over a whole record. The grammar is
selected by the header's major version (< 3: V2, otherwise V3).
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from ..time.timescale import TimeScale
from .errors import EmptyLineError, RinexObservationError
from .header import Header, Version
from .observation_v2 import V2_DATE_END, format_epoch_v2, is_new_epoch_v2, parse_epoch_v2
from .observation_v3 import V3_DATE_END, format_epoch_v3, is_new_epoch_v3, parse_epoch_v3
from .record import Record, RecordEntry, RecordKey


def is_new_epoch(line: str, version: Version) -> bool:
    """True when `line` opens a new epoch block."""
    if version.major < 3:
        return is_new_epoch_v2(line)
    return is_new_epoch_v3(line)


def has_timestamp(line: str, version: Version) -> bool:
    """Event epochs may be written without a timestamp."""
    if version.major < 3:
        return bool(line[:V2_DATE_END].strip())
    return bool(line[1:V3_DATE_END].strip())


def parse_epoch(
    header: Header, content: str | List[str], timescale: Optional[TimeScale] = None
) -> Tuple[RecordKey, RecordEntry]:
    """
    Parses one epoch block (epoch line(s) followed by its observations).

    Args:
        header: supplies the version and the observable tables
        content: the block, as text or as a list of lines
        timescale: time scale of the epochs, defaults to the header's

    Returns:
        the record key and entry
    """
    lines = content.splitlines() if isinstance(content, str) else [line.rstrip("\r\n") for line in content]
    if not lines or not lines[0].strip():
        raise EmptyLineError()
    if timescale is None:
        timescale = header.timescale()
    if header.version.major < 3:
        return parse_epoch_v2(header, lines, timescale)
    return parse_epoch_v3(header, lines, timescale)


def format_epoch(
    header: Header, key: RecordKey, entry: RecordEntry, timescale: Optional[TimeScale] = None
) -> str:
    """Formats one epoch block; the exact inverse of `parse_epoch`."""
    if timescale is None:
        timescale = header.timescale()
    if header.version.major < 3:
        return format_epoch_v2(header, key, entry, timescale)
    return format_epoch_v3(header, key, entry, timescale)


def iter_epoch_blocks(lines: Iterable[str], version: Version) -> Iterator[List[str]]:
    """Groups record lines into epoch blocks. Lines before the first epoch are dropped."""
    block: List[str] = []
    for line in lines:
        line = line.rstrip("\r\n")
        if is_new_epoch(line, version):
            if block:
                yield block
            block = [line]
        elif block:
            block.append(line)
        elif line.strip():
            logging.debug(f"Skipping line outside of any epoch: `{line}`")
    if block:
        yield block


def iter_epochs(
    lines: Iterable[str],
    header: Header,
    timescale: Optional[TimeScale] = None,
    strict: bool = True,
) -> Iterator[Tuple[RecordKey, RecordEntry]]:
    """
    Parses epochs one at a time from a line source. In non-strict mode,
    epochs that fail to parse are logged and skipped.
    """
    for block in iter_epoch_blocks(lines, header.version):
        if not has_timestamp(block[0], header.version):
            logging.debug(f"Skipping event epoch without timestamp: `{block[0]}`")
            continue
        try:
            yield parse_epoch(header, block, timescale)
        except RinexObservationError as e:
            if strict:
                raise
            logging.warning(f"When parsing epoch `{block[0].strip()}`: {e}")


def parse_record(
    lines: Iterable[str],
    header: Header,
    timescale: Optional[TimeScale] = None,
    strict: bool = True,
) -> Record:
    record = Record()
    for key, entry in iter_epochs(lines, header, timescale, strict):
        if key in record:
            logging.warning(f"Duplicate epoch {key.epoch} (flag {key.flag.name}), keeping the last one")
        record.insert(key, entry)
    return record


def format_record(record: Record, header: Header, timescale: Optional[TimeScale] = None) -> List[str]:
    lines: List[str] = []
    for key, entry in record.items():
        lines.extend(format_epoch(header, key, entry, timescale).split("\n"))
    return lines
