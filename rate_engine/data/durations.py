"""Duration strings used by contract operational terms ("24h", "365d", "instant")."""

import re
from datetime import timedelta

DURATION_RE = re.compile(r"^\s*(\d+)\s*([mhdw])\s*$", re.IGNORECASE)

_UNITS: dict[str, str] = {
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}

IMMEDIATE = ("instant", "immediate", "none", "0")


def parse_duration(value: str) -> timedelta:
    """Parse a duration such as "48h" or "365d" into a timedelta.

    Raises ValueError for anything that is not a count followed by m/h/d/w.
    """
    text = value.strip().lower()
    if text in IMMEDIATE:
        return timedelta(0)
    m = DURATION_RE.match(text)
    if not m:
        raise ValueError(f"Unrecognised duration {value!r} (expected e.g. '24h', '7d', 'instant')")
    amount, unit = int(m.group(1)), m.group(2).lower()
    return timedelta(**{_UNITS[unit]: amount})
