"""Rendering of a single animation frame."""

import logging
from typing import Optional

import chess
from PIL import Image, ImageDraw

from config import RenderConfig
from errors import MissingAsset
from game.engine import BoardPosition
from game.record import GameRecord
from game.state import Termination
from render.assets import AssetBundle
from render.bars import BAR_COLOR, TEXT_COLOR, draw_player_bars
from render.markers import marker_placements

logger = logging.getLogger(__name__)

LAST_MOVE_COLOR = (205, 210, 106, 170)
CHECK_COLOR = (230, 30, 30, 130)


def square_origin(square: chess.Square, square_size: int, flipped: bool = False) -> tuple[int, int]:
    """Top-left pixel of a square. White plays up the board unless flipped."""
    file = chess.square_file(square)
    rank = chess.square_rank(square)
    if flipped:
        return (7 - file) * square_size, rank * square_size
    return file * square_size, (7 - rank) * square_size


def is_dark(square: chess.Square) -> bool:
    return (chess.square_file(square) + chess.square_rank(square)) % 2 == 0


def blend(base: tuple[int, int, int], overlay: tuple[int, int, int, int]) -> tuple[int, int, int]:
    """RGB of a translucent overlay composited over an opaque color."""
    alpha = overlay[3] / 255
    return tuple(int(round(o * alpha + b * (1 - alpha))) for b, o in zip(base, overlay[:3]))


def ui_palette(config: RenderConfig) -> tuple[tuple[int, int, int], ...]:
    """
    Flat colors the renderer paints itself: plain and highlighted squares,
    the same squares under a player bar, and bar text.
    """
    squares = [config.light_color, config.dark_color]
    for highlight in (LAST_MOVE_COLOR, CHECK_COLOR):
        squares += [blend(config.light_color, highlight), blend(config.dark_color, highlight)]
    colors = squares + [blend(color, BAR_COLOR) for color in squares] + [TEXT_COLOR[:3]]
    return tuple(dict.fromkeys(tuple(color) for color in colors))


def render_background(config: RenderConfig) -> Image.Image:
    """Empty board with alternating light and dark squares."""
    canvas = Image.new("RGBA", (config.size, config.size), config.light_color + (255,))
    draw = ImageDraw.Draw(canvas)
    s = config.square_size
    for square in chess.SQUARES:
        if is_dark(square):
            x, y = square_origin(square, s, config.flip)
            draw.rectangle([x, y, x + s - 1, y + s - 1], fill=config.dark_color + (255,))
    return canvas


def draw_highlights(canvas: Image.Image, position: BoardPosition, config: RenderConfig) -> Image.Image:
    """Highlight the last move's squares and a king in check."""
    squares = []
    if position.last_move is not None:
        squares.append((position.last_move.from_square, LAST_MOVE_COLOR))
        squares.append((position.last_move.to_square, LAST_MOVE_COLOR))
    if position.is_check:
        king = position.king_square(position.turn)
        if king is not None:
            squares.append((king, CHECK_COLOR))

    if not squares:
        return canvas

    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    s = config.square_size
    for square, color in squares:
        x, y = square_origin(square, s, config.flip)
        draw.rectangle([x, y, x + s - 1, y + s - 1], fill=color)
    return Image.alpha_composite(canvas, overlay)


def draw_coordinates(
    canvas: Image.Image,
    position: BoardPosition,
    config: RenderConfig,
    assets: AssetBundle,
) -> None:
    """Draw file letters on the bottom row and rank digits on the left column."""
    if assets.coordinate_font is None:
        raise MissingAsset("coordinate font", position.index)
    draw = ImageDraw.Draw(canvas)
    s = config.square_size
    margin = max(1, s // 20)
    bottom_rank = 7 if config.flip else 0
    left_file = 7 if config.flip else 0

    for file in range(8):
        square = chess.square(file, bottom_rank)
        x, y = square_origin(square, s, config.flip)
        color = config.light_color if is_dark(square) else config.dark_color
        draw.text(
            (x + s - margin, y + s - margin),
            chess.FILE_NAMES[file],
            font=assets.coordinate_font,
            fill=color,
            anchor="rd",
        )

    for rank in range(8):
        square = chess.square(left_file, rank)
        x, y = square_origin(square, s, config.flip)
        color = config.light_color if is_dark(square) else config.dark_color
        draw.text(
            (x + margin, y + margin),
            chess.RANK_NAMES[rank],
            font=assets.coordinate_font,
            fill=color,
            anchor="la",
        )


def draw_pieces(
    canvas: Image.Image,
    position: BoardPosition,
    config: RenderConfig,
    assets: AssetBundle,
) -> None:
    """
    Draw every piece of the position.

    Raises:
        MissingAsset: if there is no artwork for a piece on the board
    """
    for square in sorted(position.pieces):
        piece = position.pieces[square]
        image = assets.piece_image(piece)
        if image is None:
            name = chess.piece_name(piece.piece_type)
            raise MissingAsset(f"artwork for {name} ({piece.symbol()})", position.index)
        canvas.alpha_composite(image, dest=square_origin(square, config.square_size, config.flip))


def draw_termination_markers(
    canvas: Image.Image,
    position: BoardPosition,
    termination: Termination,
    config: RenderConfig,
    assets: AssetBundle,
) -> None:
    """Put termination markers in the top-right corner of the kings' squares."""
    s = config.square_size
    for name, square in marker_placements(termination, position.king_squares):
        marker = assets.markers.get(name)
        if marker is None:
            raise MissingAsset(f"{name} marker", position.index)
        x, y = square_origin(square, s, config.flip)
        inset = max(1, s // 32)
        canvas.alpha_composite(marker, dest=(x + s - marker.width - inset, y + inset))


def render_frame(
    position: BoardPosition,
    config: RenderConfig,
    assets: AssetBundle,
    record: Optional[GameRecord] = None,
    termination: Optional[Termination] = None,
    is_final: bool = False,
) -> Image.Image:
    """
    Render one position into a frame.

    Layers, bottom to top: board, last move / check highlights, coordinates,
    pieces, player bars, termination markers (final frame only).

    Args:
        position: Board position to draw
        config: Render settings
        assets: Shared piece, font and marker images
        record: Game record for player bars, may be None
        termination: How the game ended, used on the final frame
        is_final: Whether this is the last frame of the animation

    Returns:
        RGB image of config.size x config.size
    """
    canvas = render_background(config)
    canvas = draw_highlights(canvas, position, config)
    if config.coordinates:
        draw_coordinates(canvas, position, config, assets)
    draw_pieces(canvas, position, config, assets)

    if config.player_bars and record is not None:
        canvas = draw_player_bars(canvas, position, record, config, assets)

    if is_final and config.termination_marker and termination is not None and termination.has_marker:
        draw_termination_markers(canvas, position, termination, config, assets)

    return canvas.convert("RGB")
