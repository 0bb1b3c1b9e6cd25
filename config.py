import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from PIL import ImageColor

from errors import ConfigError

load_dotenv()

# Output
BOARD_SIZE = int(os.getenv("BOARD_SIZE", "640"))
OUTPUT_PATH = os.getenv("OUTPUT_PATH", "chess.gif")

# Delays between frames in milliseconds. FRAME_DELAY_MS may also be "real"
# to use the %clk comments of the PGN.
FRAME_DELAY = os.getenv("FRAME_DELAY_MS", "1000")
FIRST_FRAME_DELAY_MS = int(os.getenv("FIRST_FRAME_DELAY_MS", "0")) or None  # 0 = same as frame delay
LAST_FRAME_DELAY_MS = int(os.getenv("LAST_FRAME_DELAY_MS", "0")) or None  # 0 = same as frame delay

# Default GIF delay when real time is requested but a frame has no usable clock data
DEFAULT_DELAY_MS = 1000

# Max parallel workers for frame rendering (default: CPU count)
MAX_RENDER_WORKERS = int(os.getenv("MAX_RENDER_WORKERS", "0")) or None  # 0 = auto

# Assets: empty = python-chess built-in pieces / Pillow default font
PIECES_PATH = os.getenv("PIECES_PATH", "")
FONT_PATH = os.getenv("FONT_PATH", "")

# Board colors (same palette as the board images we post)
LIGHT_SQUARE_COLOR = os.getenv("LIGHT_SQUARE_COLOR", "#f0d9b5")
DARK_SQUARE_COLOR = os.getenv("DARK_SQUARE_COLOR", "#b58863")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "./logs")

# Performance stats
TRACK_STATS = os.getenv("TRACK_STATS", "false").lower() == "true"
STATS_FILE = os.getenv("STATS_FILE", "./data/performance_stats.json")


class DelayMode:
    FIXED = "fixed"
    REAL = "real"


class Style:
    FULL = "full"
    PLAIN = "plain"
    PLAYER_BARS = "player-bars"
    TERMINATIONS = "terminations"
    COORDINATES = "coordinates"

    ALL = (FULL, PLAIN, PLAYER_BARS, TERMINATIONS, COORDINATES)


def parse_delay(value) -> tuple[str, Optional[int]]:
    """
    Parse a delay setting.

    Accepts "real" for real-time delays or a non-negative number of milliseconds.

    Returns:
        Tuple of (mode, milliseconds). milliseconds is None in real mode.
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text == DelayMode.REAL:
            return DelayMode.REAL, None
        try:
            value = int(text)
        except ValueError:
            raise ConfigError(f"Cannot parse delay: {value!r}")

    if value < 0:
        raise ConfigError(f"Delay must not be negative: {value}")
    return DelayMode.FIXED, value


def parse_color(value: str) -> tuple[int, int, int]:
    """Parse "#rrggbb", a color name or "r,g,b[,a]" into an RGB tuple."""
    text = value.strip()
    try:
        if "," in text:
            parts = [int(p) for p in text.split(",")]
            if len(parts) not in (3, 4) or any(not 0 <= p <= 255 for p in parts):
                raise ValueError(text)
            return tuple(parts[:3])
        return ImageColor.getrgb(text)[:3]
    except ValueError:
        raise ConfigError(f"Cannot parse color: {value!r}")


def style_flags(styles: list[str]) -> dict[str, bool]:
    """Resolve style names into render toggles. "plain" switches everything off."""
    flags = {"player_bars": False, "termination_marker": False, "coordinates": False}
    for style in styles:
        if style == Style.FULL:
            flags = {key: True for key in flags}
        elif style == Style.PLAYER_BARS:
            flags["player_bars"] = True
        elif style == Style.TERMINATIONS:
            flags["termination_marker"] = True
        elif style == Style.COORDINATES:
            flags["coordinates"] = True
        elif style != Style.PLAIN:
            raise ConfigError(f"Unknown style: {style!r}")
    return flags


@dataclass(frozen=True)
class RenderConfig:
    """Settings consumed by the frame renderer and the encoder."""
    size: int = BOARD_SIZE
    player_bars: bool = True
    termination_marker: bool = True
    coordinates: bool = True
    flip: bool = False
    light_color: tuple[int, int, int] = parse_color(LIGHT_SQUARE_COLOR)
    dark_color: tuple[int, int, int] = parse_color(DARK_SQUARE_COLOR)
    delay_mode: str = DelayMode.FIXED
    frame_delay_ms: int = DEFAULT_DELAY_MS  # fixed delay, also the fallback in real mode
    first_frame_delay_ms: Optional[int] = FIRST_FRAME_DELAY_MS
    last_frame_delay_ms: Optional[int] = LAST_FRAME_DELAY_MS
    loop: int = 0  # 0 = infinite
    workers: Optional[int] = MAX_RENDER_WORKERS

    def __post_init__(self):
        if self.size <= 0 or self.size % 8 != 0:
            raise ConfigError(f"Size must be a positive multiple of 8, got {self.size}")
        if self.delay_mode not in (DelayMode.FIXED, DelayMode.REAL):
            raise ConfigError(f"Unknown delay mode: {self.delay_mode!r}")
        for name in ("frame_delay_ms", "first_frame_delay_ms", "last_frame_delay_ms"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ConfigError(f"{name} must not be negative: {value}")
        if self.workers is not None and self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")

    @property
    def square_size(self) -> int:
        return self.size // 8

    @property
    def real_time(self) -> bool:
        return self.delay_mode == DelayMode.REAL

    @classmethod
    def from_env(cls, **overrides) -> "RenderConfig":
        """Build a config from the environment settings, with explicit overrides."""
        mode, delay_ms = parse_delay(FRAME_DELAY)
        settings = {
            "delay_mode": mode,
            "frame_delay_ms": delay_ms if delay_ms is not None else DEFAULT_DELAY_MS,
        }
        settings.update(overrides)
        return cls(**settings)
