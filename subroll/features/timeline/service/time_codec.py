# File: subroll/features/timeline/service/time_codec.py
"""
Conversion between seconds and the compact display strings used by the editor.

MM:SS is a presentation format only: it floors away sub-second precision, so
nothing in the timeline engine ever parses these strings back for timing.
"""
from subroll.core.errors import ValidationError


def format_time(seconds: float) -> str:
    """Converts 125.9 -> '02:05'. Minutes are not capped at 59."""
    if seconds < 0:
        raise ValidationError(f"Cannot format a negative time: {seconds}")
    total = int(seconds)
    mins, secs = divmod(total, 60)
    return f"{mins:02d}:{secs:02d}"


def format_timestamp(seconds: float) -> str:
    """Converts 125.5 -> 00:02:05"""
    m, s = divmod(seconds, 60)
    h, m = divmod(m, 60)
    return "{:02d}:{:02d}:{:02d}".format(int(h), int(m), int(s))


def parse_time(value: str) -> float:
    """
    Parses 'MM:SS' or 'HH:MM:SS' into seconds.
    Seconds may carry a fractional part ('01:02.5').
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid time string: {value!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValidationError(f"Invalid time string: {value!r}")

    try:
        numbers = [float(p) for p in parts]
    except ValueError:
        raise ValidationError(f"Invalid time string: {value!r}") from None

    if any(n < 0 for n in numbers):
        raise ValidationError(f"Invalid time string: {value!r}")

    if len(numbers) == 2:
        mins, secs = numbers
        return mins * 60 + secs

    hours, mins, secs = numbers
    return hours * 3600 + mins * 60 + secs
