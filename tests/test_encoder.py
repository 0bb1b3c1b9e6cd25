"""Tests for GIF encoding."""

import io

import pytest
from PIL import Image, ImageSequence

from animation.encoder import Animation, Frame, GifEncoder, build_global_palette
from errors import EncodingFailure


def _solid(color, size=(32, 32)) -> Image.Image:
    return Image.new("RGB", size, color)


def _animation(colors, delays, loop=0) -> Animation:
    return Animation(
        size=(32, 32),
        frames=[Frame(_solid(color), delay) for color, delay in zip(colors, delays)],
        loop=loop,
    )


class TestGifEncoder:
    def test_frames_and_delays_in_order(self) -> None:
        colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255)]
        data = GifEncoder().encode(_animation(colors, [100, 250, 1000]))

        with Image.open(io.BytesIO(data)) as gif:
            assert gif.format == "GIF"
            assert gif.n_frames == 3
            assert gif.info["loop"] == 0
            durations = []
            pixels = []
            for frame in ImageSequence.Iterator(gif):
                durations.append(frame.info["duration"])
                pixels.append(frame.convert("RGB").getpixel((5, 5)))

        assert durations == [100, 250, 1000]
        assert pixels == colors

    def test_single_frame(self) -> None:
        data = GifEncoder().encode(_animation([(10, 20, 30)], [500]))
        with Image.open(io.BytesIO(data)) as gif:
            assert gif.n_frames == 1
            assert gif.size == (32, 32)

    def test_writes_to_path(self, tmp_path) -> None:
        target = tmp_path / "game.gif"
        result = GifEncoder().encode(_animation([(0, 0, 0), (255, 255, 255)], [100, 100]), target)

        assert result is None
        with Image.open(target) as gif:
            assert gif.n_frames == 2

    def test_writes_to_stream(self) -> None:
        stream = io.BytesIO()
        GifEncoder().encode(_animation([(0, 0, 0), (255, 255, 255)], [100, 100]), stream)
        assert stream.getvalue().startswith(b"GIF89a")

    def test_no_frames(self) -> None:
        with pytest.raises(EncodingFailure):
            GifEncoder().encode(Animation(size=(32, 32)))

    def test_mismatched_frame_size(self) -> None:
        animation = _animation([(0, 0, 0)], [100])
        animation.frames.append(Frame(_solid((255, 255, 255), (16, 16)), 100))
        with pytest.raises(EncodingFailure):
            GifEncoder().encode(animation)

    def test_unwritable_path(self, tmp_path) -> None:
        target = tmp_path / "missing" / "game.gif"
        with pytest.raises(EncodingFailure) as exc_info:
            GifEncoder().encode(_animation([(0, 0, 0), (255, 255, 255)], [100, 100]), target)
        assert isinstance(exc_info.value.__cause__, OSError)


class TestGlobalPalette:
    def test_covers_every_frame(self) -> None:
        colors = [(i * 12, 255 - i * 12, 40) for i in range(20)]
        palette = build_global_palette([_solid(color) for color in colors])

        entries = palette.getpalette()[: 3 * 256]
        rgb = {tuple(entries[i:i + 3]) for i in range(0, len(entries), 3)}
        # the final frame is always sampled
        assert colors[-1] in rgb
        assert palette.mode == "P"

    def test_reserved_colors_are_exact_entries(self) -> None:
        reserved = ((17, 34, 51), (200, 100, 50))
        palette = build_global_palette([_solid((0, 128, 255))], max_colors=8, reserved_colors=reserved)

        entries = palette.getpalette()
        rgb = [tuple(entries[i:i + 3]) for i in range(0, len(entries), 3)]
        assert list(reserved) == [color for color in rgb if color in reserved]

    def test_box_limits_sampled_region(self) -> None:
        image = _solid((10, 200, 10))
        image.paste((250, 0, 250), (0, 0, 32, 4))
        palette = build_global_palette([image], max_colors=4, box=(0, 4, 32, 32))

        entries = palette.getpalette()
        rgb = {tuple(entries[i:i + 3]) for i in range(0, len(entries), 3)}
        assert (10, 200, 10) in rgb
        assert (250, 0, 250) not in rgb

    def test_too_many_reserved_colors(self) -> None:
        reserved = tuple((i, i, i) for i in range(4))
        with pytest.raises(ValueError):
            build_global_palette([_solid((0, 0, 0))], max_colors=4, reserved_colors=reserved)

        animation = Animation(size=(32, 32), frames=[Frame(_solid((0, 0, 0)), 100)], reserved_colors=reserved)
        with pytest.raises(EncodingFailure):
            GifEncoder(max_colors=4).encode(animation)

    def test_reserved_color_survives_encoding(self) -> None:
        board = (240, 217, 181)
        image = _solid((12, 34, 56))
        image.paste(board, (0, 0, 16, 32))
        animation = Animation(size=(32, 32), frames=[Frame(image, 100)], reserved_colors=(board,))

        data = GifEncoder().encode(animation)
        with Image.open(io.BytesIO(data)) as gif:
            assert gif.convert("RGB").getpixel((0, 0)) == board
