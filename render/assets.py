"""Piece artwork, fonts and markers, loaded once per run and shared read-only."""

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import cairosvg
import chess
import chess.svg
from PIL import Image, ImageFont

from config import RenderConfig
from errors import MissingAsset
from render.markers import GLYPHS, marker_svg

logger = logging.getLogger(__name__)

PIECE_TYPES = (chess.PAWN, chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN, chess.KING)
COLORS = (chess.WHITE, chess.BLACK)


def svg_to_image(svg_data: str, width: int, height: int) -> Image.Image:
    """Rasterize an SVG document to an RGBA image of the given size."""
    png_data = cairosvg.svg2png(
        bytestring=svg_data.encode("utf-8"),
        output_width=width,
        output_height=height,
    )
    return Image.open(io.BytesIO(png_data)).convert("RGBA")


def load_markers(size: int) -> dict[str, Image.Image]:
    """Rasterize every termination marker to a size x size RGBA image."""
    return {kind: svg_to_image(marker_svg(kind), size, size) for kind in GLYPHS}


def piece_file_stem(piece: chess.Piece) -> str:
    """File name stem for a piece, e.g. "wK" or "bN"."""
    return ("w" if piece.color == chess.WHITE else "b") + piece.symbol().upper()


class PieceSet(ABC):
    """Provides artwork for pieces."""

    @abstractmethod
    def image(self, piece: chess.Piece, size: int) -> Optional[Image.Image]:
        """Return a size x size RGBA image of the piece, or None if unavailable."""
        pass


class BuiltinPieceSet(PieceSet):
    """The cburnett pieces shipped with python-chess."""

    def image(self, piece: chess.Piece, size: int) -> Optional[Image.Image]:
        return svg_to_image(chess.svg.piece(piece, size=size), size, size)


class DirectoryPieceSet(PieceSet):
    """Pieces read from a directory of wK.svg / bq.png style files."""

    def __init__(self, path):
        self.path = Path(path)
        if not self.path.is_dir():
            raise MissingAsset(f"pieces directory {self.path}")

    def image(self, piece: chess.Piece, size: int) -> Optional[Image.Image]:
        stem = piece_file_stem(piece)
        svg_path = self.path / f"{stem}.svg"
        png_path = self.path / f"{stem}.png"

        if svg_path.exists():
            return svg_to_image(svg_path.read_text(encoding="utf-8"), size, size)
        if png_path.exists():
            with Image.open(png_path) as img:
                return img.convert("RGBA").resize((size, size), Image.Resampling.LANCZOS)

        logger.debug(f"No artwork for {stem} in {self.path}")
        return None


class FontProvider(ABC):
    """Provides fonts for bar and coordinate text."""

    @abstractmethod
    def font(self, size: int) -> ImageFont.FreeTypeFont:
        pass


class DefaultFont(FontProvider):
    """Pillow's bundled default font."""

    def font(self, size: int) -> ImageFont.FreeTypeFont:
        return ImageFont.load_default(size=size)


class TrueTypeFont(FontProvider):
    """A TrueType/OpenType font file."""

    def __init__(self, path):
        self.path = Path(path)

    def font(self, size: int) -> ImageFont.FreeTypeFont:
        if not self.path.is_file():
            raise MissingAsset(f"font {self.path}")
        try:
            return ImageFont.truetype(str(self.path), size)
        except OSError as e:
            raise MissingAsset(f"font {self.path}") from e


def bar_height(size: int) -> int:
    """Height of each player bar for a board of the given size."""
    return max(8, size // 24)


@dataclass(frozen=True)
class AssetBundle:
    """Immutable set of render resources, built once and shared by every render task."""
    square_size: int
    pieces: Mapping[tuple[chess.PieceType, chess.Color], Image.Image]
    markers: Mapping[str, Image.Image]
    bar_font: Optional[ImageFont.FreeTypeFont] = None
    coordinate_font: Optional[ImageFont.FreeTypeFont] = None

    def piece_image(self, piece: chess.Piece) -> Optional[Image.Image]:
        return self.pieces.get((piece.piece_type, piece.color))

    @classmethod
    def load(
        cls,
        config: RenderConfig,
        piece_set: Optional[PieceSet] = None,
        font_provider: Optional[FontProvider] = None,
    ) -> "AssetBundle":
        """
        Render all piece artwork and markers at the configured square size.

        Pieces the set cannot provide are left out; rendering a position that
        needs one raises MissingAsset.

        Raises:
            MissingAsset: if a font is needed by an enabled feature but unavailable
        """
        piece_set = piece_set or BuiltinPieceSet()
        font_provider = font_provider or DefaultFont()
        square_size = config.square_size

        pieces = {}
        for color in COLORS:
            for piece_type in PIECE_TYPES:
                image = piece_set.image(chess.Piece(piece_type, color), square_size)
                if image is not None:
                    pieces[(piece_type, color)] = image
        logger.info(f"Loaded {len(pieces)} piece images at {square_size}px")

        markers = load_markers(max(1, square_size * 2 // 5)) if config.termination_marker else {}

        bar_font = None
        if config.player_bars:
            bar_font = font_provider.font(max(6, bar_height(config.size) * 7 // 10))

        coordinate_font = None
        if config.coordinates:
            coordinate_font = font_provider.font(max(6, square_size // 5))

        return cls(
            square_size=square_size,
            pieces=MappingProxyType(pieces),
            markers=MappingProxyType(markers),
            bar_font=bar_font,
            coordinate_font=coordinate_font,
        )
