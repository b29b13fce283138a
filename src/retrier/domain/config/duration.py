"""Duration parsing for configuration values.

Durations are written the way ``time.ParseDuration`` spells them: a sequence
of decimal numbers, each with an optional fraction and a unit suffix, such as
``"300ms"``, ``"1.5s"`` or ``"1h2m3s"``. A bare number is taken as seconds.
All values are converted to float seconds.
"""

import re
import threading
from datetime import timedelta
from typing import Union

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_NUMBER = re.compile(r"^\d+(?:\.\d*)?$|^\.\d+$")

DurationLike = Union[str, int, float, timedelta]

# Longest wait threading primitives accept.
MAX_DURATION = threading.TIMEOUT_MAX


def parse_duration(value: DurationLike) -> float:
    """Convert a duration value to seconds

    Args:
        value: Duration string, number of seconds or timedelta

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the value is malformed, negative or too large
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")

    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        seconds = _parse_string(value)
    else:
        raise ValueError(f"invalid duration: {value!r}")

    if seconds < 0:
        raise ValueError(f"duration must be non-negative: {value!r}")
    if seconds > MAX_DURATION:
        raise ValueError(f"duration too large: {value!r}")
    return seconds


def _parse_string(text: str) -> float:
    stripped = text.strip()
    if not stripped:
        raise ValueError("invalid duration: empty string")
    if stripped.startswith("-") and stripped[1:].strip() not in ("0", ""):
        raise ValueError(f"duration must be non-negative: {text!r}")
    if stripped.startswith(("+", "-")):
        stripped = stripped[1:]

    if stripped == "0" or _NUMBER.match(stripped):
        return float(stripped)

    total = 0.0
    position = 0
    for match in _COMPONENT.finditer(stripped):
        if match.start() != position:
            break
        number, unit = match.groups()
        total += float(number) * _UNITS[unit]
        position = match.end()

    if position != len(stripped) or position == 0:
        raise ValueError(f"invalid duration: {text!r}")
    return total


def format_duration(seconds: float) -> str:
    """Render seconds as a compact duration string (e.g. ``1m30s``)"""
    if seconds <= 0:
        return "0s"
    if seconds < 1:
        return f"{seconds * 1000:g}ms"

    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if minutes:
        parts.append(f"{int(minutes)}m")
    if secs or not parts:
        parts.append(f"{round(secs, 3):g}s")
    return "".join(parts)
