"""Core data models for the gaze-point estimator."""

from __future__ import annotations

import dataclasses
import math
import numbers
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

import numpy as np


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> "Vector3":
        if isinstance(values, (str, bytes, Mapping)):
            raise TypeError(f"Vector3 needs a sequence of numbers, got {type(values).__name__}")
        items = []
        for v in values:
            if isinstance(v, bool) or not isinstance(v, numbers.Real):
                raise TypeError(f"Vector3 component must be a number, got {v!r}")
            items.append(float(v))
        if len(items) != 3:
            raise ValueError(f"Vector3 needs exactly 3 components, got {len(items)}")
        return cls(*items)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Vector3":
        return cls.from_iterable(np.asarray(arr, dtype=np.float64).reshape(-1))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z))


@dataclass(frozen=True)
class ScreenConfig:
    """Planar target: tilt from vertical (radians), width and height in the
    same linear units as the head-position input."""

    angle: float
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in ("angle", "width", "height"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"ScreenConfig.{name} must be finite")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Screen size must be positive (width={self.width}, height={self.height})"
            )


@dataclass
class GazeSample:
    """Result emitted by the controller for each gaze-direction update."""

    timestamp_mono: float  # time.monotonic()
    timestamp_wall: float  # time.time()
    head_position: Vector3  # sensor frame
    direction: Vector3      # sensor frame
    gaze_point: Vector3
    frame: str              # "world" or "sensor"
    # Screen-local coordinates of the point (world units along bottom edge / tilted up axis)
    screen_u: Optional[float] = None
    screen_v: Optional[float] = None
    on_screen: bool = False

    def to_dict(self) -> dict:
        data = dataclasses.asdict(self)
        for key in ("head_position", "direction", "gaze_point"):
            data[key] = list(getattr(self, key).as_tuple())
        return data
