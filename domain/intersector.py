"""Intersect a head-anchored gaze ray with the configured screen plane."""

from __future__ import annotations

import logging
import threading
from typing import Optional

import numpy as np

from domain.errors import DegenerateGeometryError, NotReadyError
from domain.geometry import (
    build_frame_transform,
    is_on_screen,
    line_plane_parameter,
    screen_bottom_corners,
    screen_coordinates,
)
from domain.models import ScreenConfig, Vector3

logger = logging.getLogger(__name__)

FRAMES = ("world", "sensor")


class GazeIntersector:
    """Pairs the latest head position with each incoming gaze direction and
    returns where the resulting ray meets the screen plane.

    Head position and gaze direction arrive as separate updates. The head
    position is cached under a lock; ``compute_gaze_point`` takes a snapshot
    and computes outside it, so a direction processed while a new head
    position is being stored may still use the previous one.
    """

    def __init__(
        self,
        screen: ScreenConfig,
        ray_scale: float = 100.0,
        parallel_epsilon: float = 1e-9,
        output_frame: str = "world",
    ) -> None:
        if ray_scale <= 0:
            raise ValueError(f"ray_scale must be positive, got {ray_scale}")
        if output_frame not in FRAMES:
            raise ValueError(f"output_frame must be one of {FRAMES}, got {output_frame!r}")

        self.screen = screen
        self.ray_scale = float(ray_scale)
        self.parallel_epsilon = float(parallel_epsilon)
        self.output_frame = output_frame

        self.transform = build_frame_transform(screen)
        self._right_corner, self._left_corner = screen_bottom_corners(screen)

        self._lock = threading.Lock()
        self._head_position: Optional[Vector3] = None

    # ------------------------------------------------------------------
    # Head position cache
    # ------------------------------------------------------------------

    def set_head_position(self, p: Vector3) -> None:
        with self._lock:
            self._head_position = p

    @property
    def head_position(self) -> Optional[Vector3]:
        with self._lock:
            return self._head_position

    @property
    def has_head_position(self) -> bool:
        return self.head_position is not None

    def reset(self) -> None:
        with self._lock:
            self._head_position = None

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def compute_gaze_point(self, direction: Vector3) -> Vector3:
        """Return the ray/screen intersection in ``output_frame``.

        Raises:
            NotReadyError: no head position has been cached yet.
            DegenerateGeometryError: zero or non-finite direction, or a ray
                parallel to the screen plane.
        """
        return self.trace(direction)[1]

    def trace(self, direction: Vector3) -> tuple[Vector3, Vector3]:
        """Like ``compute_gaze_point`` but also return the head position used."""
        head = self.head_position
        if head is None:
            raise NotReadyError("No head position received yet.")
        if not head.is_finite() or not direction.is_finite():
            raise DegenerateGeometryError("Head position and direction must be finite.")

        d_sensor = direction.as_array()
        if not np.any(d_sensor):
            raise DegenerateGeometryError("Gaze direction is the zero vector.")

        return head, Vector3.from_array(self._intersect(head.as_array(), d_sensor))

    def _intersect(self, head_sensor: np.ndarray, d_sensor: np.ndarray) -> np.ndarray:
        g_w = self._world_intersection(head_sensor, d_sensor)
        if self.output_frame == "sensor":
            return self.transform.point_to_sensor(g_w)
        return g_w

    def _world_intersection(self, head_sensor: np.ndarray, d_sensor: np.ndarray) -> np.ndarray:
        p_w = self.transform.point_to_world(head_sensor)
        d_w = self.transform.vector_to_world(d_sensor)
        q_w = p_w + self.ray_scale * d_w

        plane = (self.transform.sensor_position, self._right_corner, self._left_corner)
        t = line_plane_parameter(plane, p_w, q_w, epsilon=self.parallel_epsilon)

        g_w = p_w + t * (q_w - p_w)
        if not np.all(np.isfinite(g_w)):
            raise DegenerateGeometryError(f"Non-finite gaze point: {g_w}")
        logger.debug("Gaze point (world): %s  t=%.4f", np.round(g_w, 3), t)
        return g_w

    # ------------------------------------------------------------------
    # Screen-local view of a result
    # ------------------------------------------------------------------

    def locate_on_screen(self, gaze_point: Vector3) -> tuple[float, float, bool]:
        """Return (u, v, on_screen) for a point produced by ``compute_gaze_point``."""
        g = gaze_point.as_array()
        if self.output_frame == "sensor":
            g = self.transform.point_to_world(g)
        u, v = screen_coordinates(self.screen, g)
        return u, v, is_on_screen(self.screen, u, v)
