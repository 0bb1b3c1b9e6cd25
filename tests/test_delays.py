"""Tests for frame delay planning."""

import pytest

from animation.delays import MAX_DELAY_MS, plan_delays, quantize, real_delay
from config import DelayMode, RenderConfig
from conftest import CLOCKED
from game.pgn import read_record
from game.state import GameStateMachine


def _config(**overrides) -> RenderConfig:
    settings = {
        "size": 128,
        "frame_delay_ms": 100,
        "first_frame_delay_ms": None,
        "last_frame_delay_ms": None,
    }
    settings.update(overrides)
    return RenderConfig(**settings)


def _plan(pgn: str, config: RenderConfig) -> list[int]:
    record = read_record(pgn)
    positions = GameStateMachine().run(record)
    return plan_delays(positions, record, config)


class TestQuantize:
    @pytest.mark.parametrize(
        ("delay_ms", "expected"),
        [(100, 100), (104, 100), (105, 110), (0, 10), (3, 10), (1500.4, 1500)],
    )
    def test_rounds_to_time_unit(self, delay_ms: float, expected: int) -> None:
        assert quantize(delay_ms) == expected

    def test_clamped_to_max(self) -> None:
        assert quantize(10_000_000) == MAX_DELAY_MS


class TestRealDelay:
    def test_spent_time(self) -> None:
        assert real_delay(180.0, 175.5, 100) == 4500

    def test_missing_reading_falls_back(self) -> None:
        assert real_delay(None, 175.0, 100) == 100
        assert real_delay(180.0, None, 100) == 100

    def test_no_time_spent_falls_back(self) -> None:
        assert real_delay(170.0, 170.0, 250) == 250
        assert real_delay(170.0, 171.0, 250) == 250


class TestPlanDelays:
    def test_fixed(self) -> None:
        assert _plan("1. e4 e5 *", _config()) == [100, 100, 100]

    def test_first_and_last_overrides(self) -> None:
        config = _config(first_frame_delay_ms=2000, last_frame_delay_ms=5000)
        assert _plan("1. e4 e5 2. Nf3 *", config) == [2000, 100, 100, 5000]

    def test_real_time_with_increment(self) -> None:
        # 180+2: clocks 3:00, 2:58, 2:55.5, 2:50
        delays = _plan(CLOCKED, _config(delay_mode=DelayMode.REAL))

        assert delays == [
            2000,  # white: 180 + 2 - 180
            4000,  # black: 180 + 2 - 178
            6500,  # white: 180 + 2 - 175.5
            10000,  # black: 178 + 2 - 170
            100,  # last frame
        ]

    def test_real_time_without_clocks_uses_fixed(self) -> None:
        assert _plan("1. e4 e5 *", _config(delay_mode=DelayMode.REAL)) == [100, 100, 100]

    def test_real_time_single_missing_reading(self) -> None:
        pgn = "[TimeControl \"60\"]\n\n1. e4 { [%clk 0:00:58] } 1... e5 2. Nf3 { [%clk 0:00:50] } *"
        delays = _plan(pgn, _config(delay_mode=DelayMode.REAL))
        # frame 1 waits on black's unclocked e5
        assert delays == [2000, 100, 8000, 100]
