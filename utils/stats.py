"""
Per-stage timings of the PGN to GIF pipeline, kept across runs in a JSON file.
"""

import dataclasses
import json
import logging
import platform
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import psutil

from config import STATS_FILE

logger = logging.getLogger(__name__)


class Stage:
    RENDER = "render"  # positions to RGB frames
    ENCODE = "encode"  # frames to GIF bytes
    GENERATE = "generate"  # PGN text to GIF, end to end
    ALL = (RENDER, ENCODE, GENERATE)


@dataclass
class StageStats:
    """Accumulated timings of one pipeline stage."""
    runs: int = 0
    frames: int = 0
    total_ms: float = 0.0
    fastest_ms_per_frame: Optional[float] = None
    last_run: Optional[str] = None

    @property
    def ms_per_frame(self) -> float:
        return self.total_ms / self.frames if self.frames else 0.0

    def add(self, frames: int, time_ms: float):
        self.runs += 1
        self.frames += frames
        self.total_ms += time_ms
        self.last_run = datetime.now(timezone.utc).isoformat()
        if frames > 0:
            per_frame = time_ms / frames
            if self.fastest_ms_per_frame is None or per_frame < self.fastest_ms_per_frame:
                self.fastest_ms_per_frame = per_frame


class StatsTracker:
    """
    Thread-safe stage timings, saved after every record.

    Args:
        stats_file: JSON file to load from and save to. Nothing is persisted if None.
    """

    def __init__(self, stats_file: Optional[Union[str, Path]] = STATS_FILE):
        self._stats_file = Path(stats_file) if stats_file else None
        self._lock = threading.Lock()
        self._stages = self._load()

    def _load(self) -> dict[str, StageStats]:
        stages = {stage: StageStats() for stage in Stage.ALL}
        if self._stats_file is None or not self._stats_file.exists():
            return stages
        try:
            data = json.loads(self._stats_file.read_text())
            for stage in Stage.ALL:
                if stage in data:
                    stages[stage] = StageStats(**data[stage])
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring unreadable stats file {self._stats_file}: {e}")
            return {stage: StageStats() for stage in Stage.ALL}
        return stages

    def _save(self):
        if self._stats_file is None:
            return
        data = {stage: dataclasses.asdict(stats) for stage, stats in self._stages.items()}
        try:
            self._stats_file.parent.mkdir(parents=True, exist_ok=True)
            self._stats_file.write_text(json.dumps(data, indent=2))
        except OSError as e:
            logger.error(f"Failed to save stats file: {e}")

    def record(self, stage: str, frames: int, time_ms: float):
        """
        Add one run of a stage.

        Raises:
            ValueError: if stage is not one of Stage.ALL
        """
        if stage not in Stage.ALL:
            raise ValueError(f"Unknown pipeline stage {stage!r}")
        with self._lock:
            self._stages[stage].add(frames, time_ms)
            self._save()
        logger.debug(f"{stage}: {frames} frames in {time_ms:.0f}ms")

    def get(self, stage: str) -> StageStats:
        """Snapshot of one stage's timings."""
        with self._lock:
            return dataclasses.replace(self._stages[stage])

    def reset(self):
        with self._lock:
            self._stages = {stage: StageStats() for stage in Stage.ALL}
            self._save()


_stats_tracker: Optional[StatsTracker] = None


def get_stats_tracker() -> StatsTracker:
    """Get or create the process-wide tracker."""
    global _stats_tracker
    if _stats_tracker is None:
        _stats_tracker = StatsTracker()
    return _stats_tracker


def get_system_specs() -> dict:
    """Machine details printed alongside benchmark results."""
    try:
        cpu_freq = psutil.cpu_freq()
        memory = psutil.virtual_memory()
        return {
            "platform": platform.system(),
            "python_version": platform.python_version(),
            "cpu_cores_logical": psutil.cpu_count(logical=True),
            "cpu_freq_mhz": int(cpu_freq.current) if cpu_freq else None,
            "memory_total_gb": round(memory.total / (1024**3), 1),
        }
    except (OSError, RuntimeError) as e:
        logger.error(f"Error getting system specs: {e}")
        return {"platform": platform.system(), "error": str(e)}


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000
