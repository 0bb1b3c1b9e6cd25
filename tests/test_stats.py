"""Tests for pipeline stage timings."""

import json

import pytest

from conftest import SCHOLARS_OPENING
from services.gif_generator import generate_game_gif
from utils import stats
from utils.stats import Stage, StageStats, StatsTracker, Timer, get_system_specs


class TestStageStats:
    def test_add_accumulates(self) -> None:
        stage = StageStats()
        stage.add(10, 500.0)
        stage.add(5, 50.0)

        assert (stage.runs, stage.frames, stage.total_ms) == (2, 15, 550.0)
        assert stage.fastest_ms_per_frame == 10.0
        assert stage.ms_per_frame == pytest.approx(550.0 / 15)
        assert stage.last_run is not None

    def test_empty_run_keeps_fastest_unset(self) -> None:
        stage = StageStats()
        stage.add(0, 3.0)
        assert stage.fastest_ms_per_frame is None
        assert stage.ms_per_frame == 0.0


class TestStatsTracker:
    def test_records_and_persists(self, tmp_path) -> None:
        stats_file = tmp_path / "stats.json"
        tracker = StatsTracker(stats_file)
        tracker.record(Stage.RENDER, 10, 500.0)
        tracker.record(Stage.RENDER, 5, 100.0)

        render = tracker.get(Stage.RENDER)
        assert render.runs == 2
        assert render.frames == 15
        assert render.fastest_ms_per_frame == 20.0

        saved = json.loads(stats_file.read_text())
        assert set(saved) == set(Stage.ALL)
        assert saved[Stage.RENDER]["frames"] == 15

        reloaded = StatsTracker(stats_file)
        assert reloaded.get(Stage.RENDER).total_ms == 600.0
        assert reloaded.get(Stage.ENCODE).runs == 0

    def test_get_returns_snapshot(self, tmp_path) -> None:
        tracker = StatsTracker(tmp_path / "stats.json")
        snapshot = tracker.get(Stage.ENCODE)
        tracker.record(Stage.ENCODE, 3, 30.0)
        assert snapshot.runs == 0

    def test_unknown_stage(self, tmp_path) -> None:
        tracker = StatsTracker(tmp_path / "stats.json")
        with pytest.raises(ValueError):
            tracker.record("upload", 1, 1.0)

    def test_reset(self, tmp_path) -> None:
        stats_file = tmp_path / "stats.json"
        tracker = StatsTracker(stats_file)
        tracker.record(Stage.ENCODE, 3, 30.0)
        tracker.reset()

        assert tracker.get(Stage.ENCODE).runs == 0
        assert json.loads(stats_file.read_text())[Stage.ENCODE]["fastest_ms_per_frame"] is None

    def test_without_file(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        tracker = StatsTracker(None)
        tracker.record(Stage.GENERATE, 2, 20.0)
        assert tracker.get(Stage.GENERATE).runs == 1
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.parametrize("content", ["{not json", '{"render": {"speed": 3}}'])
    def test_unreadable_file_starts_fresh(self, tmp_path, content: str) -> None:
        stats_file = tmp_path / "stats.json"
        stats_file.write_text(content)
        assert StatsTracker(stats_file).get(Stage.RENDER).runs == 0

    def test_generation_records_every_stage(self, tmp_path, monkeypatch, small_config, small_assets) -> None:
        tracker = StatsTracker(tmp_path / "stats.json")
        monkeypatch.setattr(stats, "_stats_tracker", tracker)

        generate_game_gif(SCHOLARS_OPENING, small_config, assets=small_assets, track_stats=True)

        assert tracker.get(Stage.RENDER).frames == 3
        assert tracker.get(Stage.ENCODE).frames == 3
        assert tracker.get(Stage.GENERATE).runs == 1

    def test_generation_without_tracking(self, tmp_path, monkeypatch, small_config, small_assets) -> None:
        tracker = StatsTracker(tmp_path / "stats.json")
        monkeypatch.setattr(stats, "_stats_tracker", tracker)

        generate_game_gif(SCHOLARS_OPENING, small_config, assets=small_assets)

        assert all(tracker.get(stage).runs == 0 for stage in Stage.ALL)


def test_timer_measures_elapsed() -> None:
    with Timer() as timer:
        sum(range(1000))
    assert timer.elapsed_ms >= 0


def test_system_specs() -> None:
    specs = get_system_specs()
    assert "platform" in specs
