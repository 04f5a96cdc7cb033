"""Line-buffered CSV writer for emitted gaze samples."""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from domain.models import GazeSample

logger = logging.getLogger(__name__)

_SAMPLE_FIELDS = [
    "timestamp_mono", "timestamp_wall",
    "head_x", "head_y", "head_z",
    "dir_x", "dir_y", "dir_z",
    "gaze_x", "gaze_y", "gaze_z",
    "frame", "screen_u", "screen_v", "on_screen",
]


class GazeLogWriter:
    """Writes one CSV row per gaze sample, line-buffered so data is not lost
    if the process crashes."""

    def __init__(self, log_dir: Path, filename: Optional[str] = None) -> None:
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        name = filename or datetime.now().strftime("gaze_%Y-%m-%d_%H-%M-%S.csv")
        self.path = self.log_dir / name

        self._fh = open(self.path, "w", newline="", buffering=1, encoding="utf-8")
        self._writer = csv.DictWriter(self._fh, fieldnames=_SAMPLE_FIELDS)
        self._writer.writeheader()
        self._rows = 0
        self._closed = False
        logger.info("GazeLogWriter opened at %s", self.path)

    def write_sample(self, s: GazeSample) -> None:
        if self._closed:
            return
        row = {
            "timestamp_mono": f"{s.timestamp_mono:.6f}",
            "timestamp_wall": f"{s.timestamp_wall:.6f}",
            "frame": s.frame,
            "screen_u": "" if s.screen_u is None else f"{s.screen_u:.4f}",
            "screen_v": "" if s.screen_v is None else f"{s.screen_v:.4f}",
            "on_screen": int(s.on_screen),
        }
        for prefix, vec in (("head", s.head_position), ("dir", s.direction), ("gaze", s.gaze_point)):
            row[f"{prefix}_x"] = f"{vec.x:.6f}"
            row[f"{prefix}_y"] = f"{vec.y:.6f}"
            row[f"{prefix}_z"] = f"{vec.z:.6f}"
        self._writer.writerow(row)
        self._rows += 1

    @property
    def rows_written(self) -> int:
        return self._rows

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._fh.close()
        logger.info("GazeLogWriter closed (%d rows).", self._rows)
