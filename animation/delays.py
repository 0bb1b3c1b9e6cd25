"""Per-frame display delays."""

import logging
from typing import Optional

from config import RenderConfig
from game.engine import BoardPosition
from game.record import GameRecord

logger = logging.getLogger(__name__)

# GIF delays are stored in hundredths of a second in an unsigned 16-bit field
TIME_UNIT_MS = 10
MAX_DELAY_MS = 65535 * TIME_UNIT_MS


def quantize(delay_ms: float) -> int:
    """Round a delay to the GIF time unit, never below one unit."""
    units = int(delay_ms / TIME_UNIT_MS + 0.5)
    return min(max(units, 1), 65535) * TIME_UNIT_MS


def real_delay(start: Optional[float], end: Optional[float], fallback_ms: int) -> int:
    """
    Delay for a frame from two clock readings of the side to move.

    Args:
        start: Clock in seconds when the frame is shown
        end: Clock in seconds after the side moved
        fallback_ms: Delay used when a reading is missing or no time was spent

    Returns:
        Quantized delay in milliseconds
    """
    if start is None or end is None:
        return quantize(fallback_ms)
    spent = start - end
    if spent <= 0:
        return quantize(fallback_ms)
    return quantize(spent * 1000)


def plan_delays(
    positions: list[BoardPosition],
    record: Optional[GameRecord],
    config: RenderConfig,
) -> list[int]:
    """
    Assign a delay to every frame.

    In real-time mode a frame stays up for as long as the side to move spent
    on its next move: the mover's previous clock reading (or the time control's
    base time for their first move) plus increment, minus the reading on the
    move. Frames without usable clock data, and the last frame, use the fixed
    delay instead.

    Args:
        positions: All positions, one per frame
        record: Game record, for the time control
        config: Render settings

    Returns:
        Delays in milliseconds, one per position
    """
    fixed = config.frame_delay_ms
    delays = [quantize(fixed)] * len(positions)

    if config.real_time and record is not None:
        time_control = record.time_control
        base, increment = time_control if time_control else (None, 0.0)
        fallbacks = 0
        for i in range(len(positions) - 1):
            # the mover's previous reading is on the position two plies back
            start = positions[i - 1].clock if i >= 2 else base
            if start is not None:
                start += increment
            delays[i] = real_delay(start, positions[i + 1].clock, fixed)
            if start is None or positions[i + 1].clock is None:
                fallbacks += 1
        if fallbacks:
            logger.debug(f"{fallbacks} frame(s) fell back to the fixed delay of {fixed}ms")

    if delays and config.first_frame_delay_ms is not None:
        delays[0] = quantize(config.first_frame_delay_ms)
    if delays and config.last_frame_delay_ms is not None:
        delays[-1] = quantize(config.last_frame_delay_ms)

    return delays
