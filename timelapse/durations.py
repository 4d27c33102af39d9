"""
Parse Go-style duration strings such as ``1h``, ``90s``, ``1h30m`` or ``1.5m``.

``timedelta`` stops at microseconds, so the ``ns`` unit is rejected rather
than rounded.
"""

import re
from datetime import timedelta

_UNIT_MICROSECONDS = {
    "us": 1.0,
    "µs": 1.0,
    "μs": 1.0,
    "ms": 1_000.0,
    "s": 1_000_000.0,
    "m": 60_000_000.0,
    "h": 3_600_000_000.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> timedelta:
    text = value.strip()
    if not text:
        raise ValueError("invalid duration: empty string")
    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration: {value!r}")
        number, unit = match.groups()
        if unit == "ns":
            raise ValueError(f"invalid duration: {value!r} (nanoseconds are not supported, use us or larger)")
        total += float(number) * _UNIT_MICROSECONDS[unit]
        pos = match.end()
    if pos == 0:
        raise ValueError(f"invalid duration: {value!r}")
    return sign * timedelta(microseconds=total)
