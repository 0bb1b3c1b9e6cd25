"""Shared pytest fixtures used across the test suite."""

import pytest

from config import RenderConfig
from render.assets import AssetBundle

SCHOLARS_OPENING = "1. e4 e5 *"

FOOLS_MATE = """[Event "Casual game"]
[White "Patzer"]
[Black "Shark"]
[Result "0-1"]

1. f3 e5 2. g4 Qh4# 0-1
"""

TIME_FORFEIT = """[Event "Blitz"]
[White "Alice"]
[Black "Bob"]
[Result "0-1"]
[Termination "Time forfeit"]

1. e4 e5 2. Nf3 Nc6 3. Bc4 0-1
"""

CLOCKED = """[Event "Rated Blitz game"]
[White "Alice"]
[WhiteElo "2100"]
[WhiteTitle "FM"]
[Black "Bob"]
[BlackElo "1950"]
[TimeControl "180+2"]
[Result "1/2-1/2"]
[Termination "Game drawn by agreement"]

1. e4 { [%clk 0:03:00] } 1... e5 { [%clk 0:02:58] } 2. Nf3 { [%clk 0:02:55.5] } 2... Nc6 { [%clk 0:02:50] } 1/2-1/2
"""

SMALL_SIZE = 128


@pytest.fixture
def small_config() -> RenderConfig:
    """Fixed 100ms delays on a small board, everything drawn."""
    return RenderConfig(
        size=SMALL_SIZE,
        frame_delay_ms=100,
        first_frame_delay_ms=None,
        last_frame_delay_ms=None,
        workers=2,
    )


@pytest.fixture
def plain_config() -> RenderConfig:
    return RenderConfig(
        size=SMALL_SIZE,
        player_bars=False,
        termination_marker=False,
        coordinates=False,
        frame_delay_ms=100,
        first_frame_delay_ms=None,
        last_frame_delay_ms=None,
        workers=2,
    )


@pytest.fixture(scope="session")
def small_assets() -> AssetBundle:
    """Every asset loaded once at the small board size."""
    config = RenderConfig(size=SMALL_SIZE, first_frame_delay_ms=None, last_frame_delay_ms=None)
    return AssetBundle.load(config)
