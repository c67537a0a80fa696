"""Time expression parsing and formatting.

Accepted expressions::

    "90", "90.5"            plain seconds
    "1:30", "1:30:45"       MM:SS and HH:MM:SS (fraction allowed)
    "90m", "1h30m45s"       unit-suffixed composites, whitespace allowed
    ""                      zero

A number with no unit inside a composite always counts as seconds, so
``"30m45"`` is 1845.
"""

import math
import re

from clipsmith.errors import InvalidTimeFormatError, InvalidTimeRangeError

UNIT_FACTORS = {"h": 3600.0, "m": 60.0, "s": 1.0}

_DIGITS = "0123456789"
_NUMBER_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)", re.ASCII)
_SINGLE_UNIT_RE = re.compile(r"([0-9.]+)([hms])", re.ASCII)


def _to_number(field: str, original: str) -> float:
    if not _NUMBER_RE.fullmatch(field):
        raise InvalidTimeFormatError(original)
    value = float(field)
    if not math.isfinite(value):
        raise InvalidTimeFormatError(original)
    return value


def _scan_composite(text: str) -> float:
    total = 0.0
    buf = ""
    for ch in text:
        if ch in _DIGITS or ch == ".":
            buf += ch
        elif ch in UNIT_FACTORS:
            if not buf:
                raise InvalidTimeFormatError(text)
            total += _to_number(buf, text) * UNIT_FACTORS[ch]
            buf = ""
        elif ch.isspace():
            continue
        else:
            raise InvalidTimeFormatError(text)

    # Trailing number without a unit
    if buf:
        total += _to_number(buf, text)
    return total


def _parse(text: str) -> float:
    if all(ch in _DIGITS or ch == "." for ch in text):
        return _to_number(text, text)

    if ":" in text:
        parts = text.split(":")
        if len(parts) == 2:
            minutes, seconds = (_to_number(p, text) for p in parts)
            return minutes * 60 + seconds
        if len(parts) == 3:
            hours, minutes, seconds = (_to_number(p, text) for p in parts)
            return hours * 3600 + minutes * 60 + seconds
        raise InvalidTimeFormatError(text)

    units = {ch for ch in text if ch in UNIT_FACTORS}
    if units:
        match = _SINGLE_UNIT_RE.fullmatch(text)
        if len(units) == 1 and match:
            return _to_number(match.group(1), text) * UNIT_FACTORS[match.group(2)]
        return _scan_composite(text)

    return _to_number(text, text)


def parse_time(expr: str) -> float:
    """Convert a time expression to seconds.

    Raises InvalidTimeFormatError when the expression cannot be classified,
    one of its numeric fields is not a number, or the total overflows.
    """
    text = expr.strip()
    if not text:
        return 0.0

    seconds = _parse(text)
    if not math.isfinite(seconds):
        raise InvalidTimeFormatError(text)
    return seconds


def format_compact(seconds: float) -> str:
    """Render as ``MM-SS`` for filenames; minutes are not capped at 59."""
    mins = int(seconds / 60)
    secs = int(seconds % 60)
    return f"{mins:02d}-{secs:02d}"


def format_readable(seconds: float) -> str:
    """Render as ``HH:MM:SS``, or ``MM:SS`` when under an hour."""
    h = int(seconds // 3600)
    m = int((seconds % 3600) // 60)
    s = int(seconds % 60)
    if h > 0:
        return f"{h:02d}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"


def validate_range(start: float, end: float) -> float:
    """Return the clip duration, rejecting empty or inverted ranges."""
    if end <= start:
        raise InvalidTimeRangeError(start=start, end=end)
    return end - start
