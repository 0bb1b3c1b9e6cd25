from .helpers import parse_time_control, parse_clock, format_clock, format_player

__all__ = [
    "parse_time_control",
    "parse_clock",
    "format_clock",
    "format_player",
]
