# src/campcheck/timefmt.py
from __future__ import annotations

from typing import Literal

TimeFormat = Literal["12h", "24h"]


def format_minutes(minutes: int | None, fmt: TimeFormat = "12h") -> str:
    """
    @brief
    Render minutes since midnight as a wall-clock label.

    @details
    12h mode follows the camp office convention ("11:00 AM", "12:30 PM").
    Unknown times render as "?" so a label can always be produced.
    """
    if minutes is None:
        return "?"

    hours, mins = divmod(int(minutes), 60)
    if fmt == "24h":
        return f"{hours:02d}:{mins:02d}"

    if hours == 0:
        h12 = 12
    elif hours > 12:
        h12 = hours - 12
    else:
        h12 = hours
    ampm = "PM" if hours >= 12 else "AM"
    return f"{h12}:{mins:02d} {ampm}"


def format_window(start: int | None, end: int | None, fmt: TimeFormat = "12h") -> str:
    """Render a start/end pair as 'start - end'."""
    return f"{format_minutes(start, fmt)} - {format_minutes(end, fmt)}"
