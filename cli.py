#!/usr/bin/env python3
"""
chess-gif

Turn a chess game in PGN into an animated GIF.
"""

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config import (
    BOARD_SIZE,
    DARK_SQUARE_COLOR,
    DEFAULT_DELAY_MS,
    FIRST_FRAME_DELAY_MS,
    FONT_PATH,
    FRAME_DELAY,
    LAST_FRAME_DELAY_MS,
    LIGHT_SQUARE_COLOR,
    LOG_DIR,
    LOG_LEVEL,
    MAX_RENDER_WORKERS,
    OUTPUT_PATH,
    PIECES_PATH,
    TRACK_STATS,
    RenderConfig,
    Style,
    parse_color,
    parse_delay,
    style_flags,
)
from errors import ChessGifError, ConfigError
from render.assets import AssetBundle, BuiltinPieceSet, DefaultFont, DirectoryPieceSet, TrueTypeFont
from services.gif_generator import generate_game_gif

logger = logging.getLogger(__name__)


def setup_logging(level: str, log_dir: str = LOG_DIR):
    """Configure the root logger with a rotating log file and stderr output."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear any existing handlers to prevent duplicates
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path / "chess-gif.log",
            maxBytes=1024 * 1024,  # 1MB
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turn your chess PGN files into GIFs!")
    parser.add_argument("pgn", nargs="?", help="PGN file to read (default: stdin)")
    parser.add_argument("-o", "--output", default=OUTPUT_PATH, help=f"Output GIF path (default: {OUTPUT_PATH})")
    parser.add_argument("-s", "--size", type=int, default=BOARD_SIZE, help="Board size in pixels, multiple of 8")
    parser.add_argument(
        "-d", "--delay",
        default=FRAME_DELAY,
        help='Delay between frames in ms, or "real" to use the %%clk comments',
    )
    parser.add_argument("--first-frame-delay", type=int, default=FIRST_FRAME_DELAY_MS, help="Delay of the first frame in ms")
    parser.add_argument("--last-frame-delay", type=int, default=LAST_FRAME_DELAY_MS, help="Delay of the last frame in ms")
    parser.add_argument(
        "--style",
        action="append",
        choices=Style.ALL,
        help="Style components to draw, may be repeated (default: full)",
    )
    parser.add_argument("-f", "--flip", action="store_true", help="Render from Black's perspective")
    parser.add_argument("--pieces", default=PIECES_PATH, help="Directory of piece images (wK.svg, bq.png, ...)")
    parser.add_argument("--font", default=FONT_PATH, help="TrueType font for player bars and coordinates")
    parser.add_argument("--light", default=LIGHT_SQUARE_COLOR, help="Light square color")
    parser.add_argument("--dark", default=DARK_SQUARE_COLOR, help="Dark square color")
    parser.add_argument("-w", "--workers", type=int, default=MAX_RENDER_WORKERS, help="Render workers (default: CPU count)")
    parser.add_argument("--log-level", default=LOG_LEVEL, help=f"Logging level (default: {LOG_LEVEL})")
    parser.add_argument("--track-stats", action="store_true", default=TRACK_STATS, help="Record performance stats")
    return parser


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Build the render config from parsed arguments."""
    mode, delay_ms = parse_delay(args.delay)
    flags = style_flags(args.style or [Style.FULL])
    return RenderConfig(
        size=args.size,
        flip=args.flip,
        light_color=parse_color(args.light),
        dark_color=parse_color(args.dark),
        delay_mode=mode,
        frame_delay_ms=delay_ms if delay_ms is not None else DEFAULT_DELAY_MS,
        first_frame_delay_ms=args.first_frame_delay,
        last_frame_delay_ms=args.last_frame_delay,
        workers=args.workers,
        **flags,
    )


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        parser.error(str(e))

    try:
        if args.pgn:
            pgn = Path(args.pgn).read_text(encoding="utf-8")
        else:
            pgn = sys.stdin.read()
    except OSError as e:
        logger.error(f"Failed to read PGN: {e}")
        return 1

    try:
        piece_set = DirectoryPieceSet(args.pieces) if args.pieces else BuiltinPieceSet()
        font_provider = TrueTypeFont(args.font) if args.font else DefaultFont()
        assets = AssetBundle.load(config, piece_set, font_provider)
        output = generate_game_gif(pgn, config, assets=assets, output=args.output, track_stats=args.track_stats)
    except ChessGifError as e:
        logger.error(f"Failed to produce a GIF: {e}")
        return 1

    logger.info(f"Wrote {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
