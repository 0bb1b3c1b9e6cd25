"""GIF generation for chess game replays."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image

from animation.delays import plan_delays
from animation.encoder import Animation, Frame, GifEncoder
from config import RenderConfig
from game.engine import BoardPosition, RulesEngine
from game.pgn import read_record
from game.record import GameRecord
from game.state import GameStateMachine, Termination
from render.assets import AssetBundle
from render.bars import bar_regions
from render.frame import render_frame, ui_palette
from utils.stats import Stage, Timer, get_stats_tracker

logger = logging.getLogger(__name__)


def _render_frame_task(
    args: tuple[int, BoardPosition, bool, GameRecord, Termination, RenderConfig, AssetBundle]
) -> tuple[int, Image.Image]:
    """
    Render a single frame (for parallel processing).

    Returns:
        Tuple of (index, rendered_frame) to maintain order
    """
    idx, position, is_final, record, termination, config, assets = args
    frame = render_frame(
        position,
        config,
        assets,
        record=record,
        termination=termination,
        is_final=is_final,
    )
    return idx, frame


def render_frames_parallel(
    positions: list[BoardPosition],
    record: GameRecord,
    termination: Termination,
    config: RenderConfig,
    assets: AssetBundle,
) -> list[Image.Image]:
    """
    Render all frames in parallel while maintaining order.

    The first failing task cancels the tasks that have not started yet and its
    error is raised; frames already rendered are discarded.

    Args:
        positions: Positions to render, one frame each
        record: Game record, for player bars
        termination: How the game ended, drawn on the last frame
        config: Render settings
        assets: Shared render resources

    Returns:
        List of rendered frames in position order
    """
    last = len(positions) - 1
    tasks = [
        (i, position, i == last, record, termination, config, assets)
        for i, position in enumerate(positions)
    ]

    frames: list[Optional[Image.Image]] = [None] * len(positions)
    max_workers = min(len(tasks), config.workers or os.cpu_count() or 4)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(_render_frame_task, task): task[0] for task in tasks}
        try:
            for future in as_completed(futures):
                idx, frame = future.result()
                frames[idx] = frame
        except Exception:
            executor.shutdown(wait=False, cancel_futures=True)
            raise

    return frames


def build_animation(
    record: GameRecord,
    config: RenderConfig,
    assets: Optional[AssetBundle] = None,
    engine: Optional[RulesEngine] = None,
    track_stats: bool = False,
) -> Animation:
    """
    Play through a game and render every position into a timed frame.

    Raises:
        IllegalMove: if a ply is illegal
        MissingAsset: if a needed piece image or font is unavailable
    """
    machine = GameStateMachine(engine)
    positions = machine.run(record)
    termination = machine.termination(positions, record)

    if assets is None:
        assets = AssetBundle.load(config)

    logger.info(f"Rendering {len(positions)} frames in parallel...")
    with Timer() as timer:
        images = render_frames_parallel(positions, record, termination, config, assets)
    logger.info(f"Frame rendering complete in {timer.elapsed_ms:.0f}ms")
    if track_stats:
        get_stats_tracker().record(Stage.RENDER, len(images), timer.elapsed_ms)

    # bar strips never feed the palette, so toggling bars cannot recolor the board
    top, bottom = bar_regions(config)
    board_box = (0, top[3], config.size, bottom[1]) if top[3] < bottom[1] else None

    delays = plan_delays(positions, record, config)
    return Animation(
        size=(config.size, config.size),
        frames=[Frame(image, delay) for image, delay in zip(images, delays)],
        loop=config.loop,
        reserved_colors=ui_palette(config),
        palette_box=board_box,
    )


def generate_game_gif(
    game: Union[str, GameRecord],
    config: Optional[RenderConfig] = None,
    assets: Optional[AssetBundle] = None,
    engine: Optional[RulesEngine] = None,
    output: Optional[Union[str, Path, BinaryIO]] = None,
    track_stats: bool = False,
) -> Union[bytes, str, Path, BinaryIO]:
    """
    Generate an animated GIF of a chess game.

    Args:
        game: PGN string, or an already parsed GameRecord
        config: Render settings (defaults from the environment)
        assets: Pre-loaded render resources. Loaded from config if None.
        engine: Rules engine (python-chess if None)
        output: Path or binary stream to write to. If None, bytes are returned.
        track_stats: Whether to record performance statistics

    Returns:
        GIF bytes, or the output that was written to

    Raises:
        MalformedRecord, IllegalMove, MissingAsset, EncodingFailure
    """
    config = config or RenderConfig.from_env()

    with Timer() as total:
        record = read_record(game) if isinstance(game, str) else game
        logger.info(f"Generating GIF for {len(record)} plies")

        animation = build_animation(record, config, assets, engine, track_stats)

        with Timer() as timer:
            data = GifEncoder().encode(animation, output)
        if track_stats:
            get_stats_tracker().record(Stage.ENCODE, len(animation.frames), timer.elapsed_ms)

    logger.info(f"GIF generated in {total.elapsed_ms:.0f}ms")
    if track_stats:
        get_stats_tracker().record(Stage.GENERATE, len(animation.frames), total.elapsed_ms)

    return data if output is None else output
