import re
from datetime import timedelta

_DURATION_TERM_PATTERN = re.compile(r"\s*([+-]?\d+(?:\.\d*)?)\s*([A-Za-z]+)\s*")

# unit -> number of microseconds
DURATION_UNITS = {
    "ns": 1e-3,
    "us": 1.0,
    "ms": 1e3,
    "s": 1e6,
    "sec": 1e6,
    "secs": 1e6,
    "second": 1e6,
    "seconds": 1e6,
    "min": 60e6,
    "mins": 60e6,
    "minute": 60e6,
    "minutes": 60e6,
    "h": 3600e6,
    "hr": 3600e6,
    "hrs": 3600e6,
    "hour": 3600e6,
    "hours": 3600e6,
    "d": 86400e6,
    "day": 86400e6,
    "days": 86400e6,
    "w": 604800e6,
    "week": 604800e6,
    "weeks": 604800e6,
}


def parse_duration(s: str) -> timedelta:
    """
    Parses a duration made of one or more `<number> <unit>` terms, e.g.
    `"30 s"`, `"1 hour"` or `"1 h 30 min"`.

    Args:
        s: duration description

    Returns:
        the total duration
    """
    text = s.strip()
    if not text:
        raise ValueError("Empty duration description")
    microseconds = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_TERM_PATTERN.match(text, pos)
        if match is None:
            raise ValueError(f"Invalid duration description: `{s}`")
        value, unit = match.groups()
        if unit.lower() not in DURATION_UNITS:
            raise ValueError(f"Unknown duration unit `{unit}` in `{s}`")
        microseconds += float(value) * DURATION_UNITS[unit.lower()]
        pos = match.end()
    return timedelta(microseconds=microseconds)
