"""Tests for the CSV gaze log."""

import csv

from domain.models import GazeSample, Vector3
from storage.gaze_log_writer import GazeLogWriter


def _sample(t: float) -> GazeSample:
    return GazeSample(
        timestamp_mono=t,
        timestamp_wall=t + 1000,
        head_position=Vector3(0.0, 0.0, 600.0),
        direction=Vector3(0.0, 0.0, -1.0),
        gaze_point=Vector3(0.0, 247.5, 247.5),
        frame="world",
        screen_u=0.0,
        screen_v=350.0,
        on_screen=True,
    )


def test_rows_and_header(tmp_path):
    writer = GazeLogWriter(tmp_path, filename="gaze.csv")
    writer.write_sample(_sample(1.0))
    writer.write_sample(_sample(2.0))
    writer.close()

    with open(tmp_path / "gaze.csv", newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    assert writer.rows_written == 2
    assert [r["timestamp_mono"] for r in rows] == ["1.000000", "2.000000"]
    assert rows[0]["head_z"] == "600.000000"
    assert rows[0]["frame"] == "world"


def test_write_after_close_is_ignored(tmp_path):
    writer = GazeLogWriter(tmp_path, filename="gaze.csv")
    writer.close()
    writer.write_sample(_sample(1.0))
    writer.close()
    assert writer.rows_written == 0


def test_missing_screen_coordinates_written_blank(tmp_path):
    writer = GazeLogWriter(tmp_path / "logs", filename="gaze.csv")
    sample = _sample(1.0)
    sample.screen_u = None
    sample.screen_v = None
    sample.on_screen = False
    writer.write_sample(sample)
    writer.close()

    with open(tmp_path / "logs" / "gaze.csv", newline="", encoding="utf-8") as fh:
        row = next(csv.DictReader(fh))
    assert row["screen_u"] == ""
    assert row["on_screen"] == "0"
