import re
from typing import Optional

CLOCK_PATTERN = re.compile(r"^(\d+):(\d{1,2}):(\d{1,2}(?:\.\d+)?)$")


def parse_time_control(time_control_str: Optional[str]) -> Optional[tuple[float, float]]:
    """
    Parse a PGN TimeControl header into (base_seconds, increment_seconds).

    Handles formats like:
    - "180" (base only)
    - "180+2" (base + increment)
    - "-" or "?" (unknown / untimed), returns None
    - "40/7200:3600" (multi-period), only the first period's base is used
    """
    if not time_control_str:
        return None

    text = time_control_str.strip()
    if text in ("-", "?", ""):
        return None

    period = text.split(":")[0]
    if "/" in period:
        period = period.split("/", 1)[1]

    try:
        if "+" in period:
            base, increment = period.split("+", 1)
            return float(base), float(increment)
        return float(period), 0.0
    except ValueError:
        return None


def parse_clock(clock_str: str) -> Optional[float]:
    """
    Parse a clock reading like "1:10:45.1" or "0:03:00" into seconds.

    Returns:
        Seconds as float, or None if the string is not a clock reading
    """
    match = CLOCK_PATTERN.match(clock_str.strip())
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    if int(minutes) >= 60 or float(seconds) >= 60:
        return None
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def format_clock(seconds: float) -> str:
    """Format seconds as H:MM:SS.t (e.g. "0:00:55.1")."""
    tenths = int(round(max(seconds, 0) * 10))
    hours, tenths = divmod(tenths, 36000)
    minutes, tenths = divmod(tenths, 600)
    secs, tenths = divmod(tenths, 10)
    return f"{hours}:{minutes:02d}:{secs:02d}.{tenths}"


def format_player(
    name: Optional[str] = None,
    title: Optional[str] = None,
    rating: Optional[int] = None,
) -> str:
    """Format player info for a player bar. Missing parts are left out."""
    parts = [p for p in (title, name) if p]
    label = " ".join(parts)
    if rating is not None:
        label = f"{label} ({rating})" if label else f"({rating})"
    return label
