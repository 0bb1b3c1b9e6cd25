import logging

import chess
from PIL import Image, ImageDraw

from config import RenderConfig
from errors import MissingAsset
from game.engine import BoardPosition
from game.record import GameRecord
from render.assets import AssetBundle, bar_height
from utils.helpers import format_clock, format_player

logger = logging.getLogger(__name__)

BAR_COLOR = (33, 33, 33, 200)
TEXT_COLOR = (224, 224, 224, 255)


def bar_regions(config: RenderConfig) -> tuple[tuple[int, int, int, int], tuple[int, int, int, int]]:
    """(top, bottom) bar boxes as (left, upper, right, lower)."""
    height = bar_height(config.size)
    top = (0, 0, config.size, height)
    bottom = (0, config.size - height, config.size, config.size)
    return top, bottom


def bar_text(record: GameRecord, position: BoardPosition, color: chess.Color) -> tuple[str, str]:
    """Player label and running clock for one side. Missing parts are empty strings."""
    player = record.player(color)
    label = format_player(player.name, player.title, player.rating)
    clock = position.clock_of(color)
    return label, format_clock(clock) if clock is not None else ""


def draw_player_bars(
    canvas: Image.Image,
    position: BoardPosition,
    record: GameRecord,
    config: RenderConfig,
    assets: AssetBundle,
) -> Image.Image:
    """
    Overlay the player bars along the top and bottom edges of the board.

    The bottom bar belongs to the side playing up the board (White unless flipped).

    Returns:
        The composited canvas
    """
    if not record.has_players:
        return canvas
    if assets.bar_font is None:
        raise MissingAsset("player bar font", position.index)

    bottom_color = chess.BLACK if config.flip else chess.WHITE
    top_box, bottom_box = bar_regions(config)
    padding = max(2, config.square_size // 10)

    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    for color, box in ((not bottom_color, top_box), (bottom_color, bottom_box)):
        draw.rectangle([box[0], box[1], box[2] - 1, box[3] - 1], fill=BAR_COLOR)
        label, clock = bar_text(record, position, color)
        middle = (box[1] + box[3]) // 2
        if label:
            draw.text((padding, middle), label, font=assets.bar_font, fill=TEXT_COLOR, anchor="lm")
        if clock:
            draw.text((box[2] - padding, middle), clock, font=assets.bar_font, fill=TEXT_COLOR, anchor="rm")

    return Image.alpha_composite(canvas, overlay)
