"""
Human readable duration parsing.

Accepts one or more ``<number><unit>`` terms, optionally separated by
whitespace: ``10m``, ``1h30m``, ``2 days``, ``10min``, ``1 minute``.
"""

from __future__ import annotations

import re
from datetime import timedelta

from heracles.core.errors import DurationOutOfRange, InvalidDurationSyntax

# Seconds per unit. "m" is minutes and "M" is months.
_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "nsec": 1e-9,
    "us": 1e-6,
    "usec": 1e-6,
    "ms": 1e-3,
    "msec": 1e-3,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
    "M": 2_630_016,  # 30.44 days
    "month": 2_630_016,
    "months": 2_630_016,
    "y": 31_557_600,  # 365.25 days
    "year": 31_557_600,
    "years": 31_557_600,
}

_TERM_RE = re.compile(r"\s*(\d+(?:\.\d+)?)\s*([A-Za-z]+)\s*")


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration string into a timedelta.

    Args:
        text: Duration such as "10m", "1h30m" or "2 days"

    Returns:
        The summed duration

    Raises:
        InvalidDurationSyntax: If the text is empty or contains an unknown unit
        DurationOutOfRange: If the total exceeds what a timedelta can hold
    """
    if text is None or not str(text).strip():
        raise InvalidDurationSyntax("empty duration", {"duration": text})

    text = str(text)
    total_seconds = 0.0
    pos = 0
    while pos < len(text):
        match = _TERM_RE.match(text, pos)
        if not match:
            raise InvalidDurationSyntax(
                f"invalid duration syntax: {text!r}", {"duration": text, "position": pos}
            )
        number, unit = match.groups()
        seconds = _UNIT_SECONDS.get(unit)
        if seconds is None:
            seconds = _UNIT_SECONDS.get(unit.lower())
        if seconds is None:
            raise InvalidDurationSyntax(
                f"unknown duration unit {unit!r} in {text!r}", {"duration": text, "unit": unit}
            )
        total_seconds += float(number) * seconds
        pos = match.end()

    try:
        return timedelta(seconds=total_seconds)
    except OverflowError as exc:
        raise DurationOutOfRange(
            f"duration {text!r} is out of range", {"duration": text}
        ) from exc
