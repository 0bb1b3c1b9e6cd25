"""GIF encoding of rendered frames."""

import io
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image

from errors import EncodingFailure

logger = logging.getLogger(__name__)

# Frames sampled to build the global palette
PALETTE_SAMPLE_FRAMES = 16


@dataclass
class Frame:
    """A rendered frame and how long it stays on screen."""
    image: Image.Image
    delay_ms: int


@dataclass
class Animation:
    """
    Ordered frames plus the global GIF parameters.

    reserved_colors are given exact palette entries. When palette_box is set,
    only that part of each frame feeds the rest of the palette.
    """
    size: tuple[int, int]
    frames: list[Frame] = field(default_factory=list)
    loop: int = 0  # 0 = infinite
    reserved_colors: tuple[tuple[int, int, int], ...] = ()
    palette_box: Optional[tuple[int, int, int, int]] = None

    @property
    def delays(self) -> list[int]:
        return [frame.delay_ms for frame in self.frames]


def build_global_palette(
    images: list[Image.Image],
    max_colors: int = 256,
    reserved_colors: tuple[tuple[int, int, int], ...] = (),
    box: Optional[tuple[int, int, int, int]] = None,
) -> Image.Image:
    """
    Build one palette for the whole animation.

    Frames, cropped to box when given, are tiled into a mosaic (sampled evenly
    when there are many) which is quantized once. The reserved colors follow
    as exact entries. Every frame is then mapped to the same colors.

    Args:
        images: Frames in display order
        max_colors: Palette size, reserved colors included
        reserved_colors: RGB colors that must be reproduced exactly
        box: (left, upper, right, lower) region of each frame to sample

    Returns:
        A P-mode image whose palette is the global palette

    Raises:
        ValueError: if the reserved colors leave no room in the palette
    """
    reserved = list(dict.fromkeys(tuple(color) for color in reserved_colors))
    free = max_colors - len(reserved)
    if free < 1:
        raise ValueError(f"{len(reserved)} reserved colors do not fit a {max_colors} color palette")

    sources = [image.crop(box) for image in images] if box else images
    frame_w, frame_h = sources[0].size
    sample_indices = list(range(len(images)))
    if len(images) > PALETTE_SAMPLE_FRAMES:
        step = len(images) / PALETTE_SAMPLE_FRAMES
        sample_indices = [int(i * step) for i in range(PALETTE_SAMPLE_FRAMES)]
        if sample_indices[-1] != len(images) - 1:
            sample_indices[-1] = len(images) - 1  # keep the final frame's markers

    cols = min(len(sample_indices), 4)
    rows = math.ceil(len(sample_indices) / cols)
    mosaic = Image.new("RGB", (frame_w * cols, frame_h * rows))
    for idx, frame_idx in enumerate(sample_indices):
        r, c = divmod(idx, cols)
        mosaic.paste(sources[frame_idx].convert("RGB"), (c * frame_w, r * frame_h))

    quantized = mosaic.quantize(
        colors=free,
        method=Image.Quantize.MEDIANCUT,
        dither=Image.Dither.NONE,
    )
    entries = quantized.getpalette()[: 3 * free]
    for color in reserved:
        entries.extend(color)

    palette = Image.new("P", (1, 1))
    palette.putpalette(entries)
    return palette


class GifEncoder:
    """Encodes an Animation as a GIF, strictly in frame order."""

    def __init__(self, max_colors: int = 256):
        self.max_colors = max_colors

    def _quantize_frames(self, animation: Animation) -> list[Image.Image]:
        images = []
        for n, frame in enumerate(animation.frames):
            if frame.image.size != animation.size:
                raise EncodingFailure(
                    f"Frame {n} is {frame.image.size[0]}x{frame.image.size[1]}, "
                    f"expected {animation.size[0]}x{animation.size[1]}"
                )
            images.append(frame.image)

        palette = build_global_palette(
            images,
            self.max_colors,
            animation.reserved_colors,
            animation.palette_box,
        )
        return [img.convert("RGB").quantize(palette=palette, dither=Image.Dither.NONE) for img in images]

    def encode(
        self,
        animation: Animation,
        output: Optional[Union[str, Path, BinaryIO]] = None,
    ) -> Optional[bytes]:
        """
        Write the animation as a looping GIF.

        Args:
            animation: Frames in display order
            output: File path or binary stream. If None the GIF is returned as bytes.

        Returns:
            GIF bytes when no output was given, otherwise None

        Raises:
            EncodingFailure: if the frames cannot be encoded or written
        """
        if not animation.frames:
            raise EncodingFailure("No frames to encode")

        try:
            p_frames = self._quantize_frames(animation)
            target = io.BytesIO() if output is None else output
            if isinstance(target, Path):
                target = str(target)

            first, rest = p_frames[0], p_frames[1:]
            first.save(
                target,
                format="GIF",
                save_all=True,
                append_images=rest,
                duration=animation.delays,  # per-frame durations (ms)
                loop=animation.loop,
                optimize=False,
            )
        except (OSError, ValueError) as e:
            raise EncodingFailure(f"Failed to encode GIF: {e}") from e

        logger.info(f"Encoded {len(p_frames)} frames ({animation.size[0]}x{animation.size[1]})")

        if output is None:
            return target.getvalue()
        return None
