"""Sensor/world frame transform and line–plane intersection helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from domain.errors import DegenerateGeometryError
from domain.models import ScreenConfig

# Fixed axis swap from the sensor frame into the world frame, in which the
# screen's bottom edge lies on the x axis.
_SENSOR_TO_WORLD_ROTATION = np.array(
    [
        [-1.0, 0.0, 0.0],
        [0.0, 0.0, -1.0],
        [0.0, -1.0, 0.0],
    ],
    dtype=np.float64,
)


@dataclass(frozen=True, eq=False)
class FrameTransform:
    """Rigid transform sensor → world: ``p_w = R·p_s + T``."""

    rotation: np.ndarray     # (3, 3)
    translation: np.ndarray  # (3,)

    @property
    def inverse_rotation(self) -> np.ndarray:
        return self.rotation.T

    @property
    def sensor_position(self) -> np.ndarray:
        """World position of the sensor origin."""
        return self.translation.copy()

    # ------------------------------------------------------------------
    # Points use the full rigid transform, directions only the rotation
    # ------------------------------------------------------------------

    def point_to_world(self, p: np.ndarray) -> np.ndarray:
        return self.rotation @ p + self.translation

    def point_to_sensor(self, p: np.ndarray) -> np.ndarray:
        return self.inverse_rotation @ (p - self.translation)

    def vector_to_world(self, v: np.ndarray) -> np.ndarray:
        # The axis swap is an involution, so R⁻¹ and R agree here.
        return self.inverse_rotation @ v

    def vector_to_sensor(self, v: np.ndarray) -> np.ndarray:
        return self.rotation @ v


def build_frame_transform(screen: ScreenConfig) -> FrameTransform:
    """Place the sensor on the screen's top edge, ``height`` up the tilted face."""
    translation = np.array(
        [0.0, math.sin(screen.angle) * screen.height, math.cos(screen.angle) * screen.height],
        dtype=np.float64,
    )
    return FrameTransform(rotation=_SENSOR_TO_WORLD_ROTATION.copy(), translation=translation)


def screen_bottom_corners(screen: ScreenConfig) -> tuple[np.ndarray, np.ndarray]:
    """Return (right, left) bottom corners in world frame.

    World x grows towards the left corner.
    """
    half = screen.width / 2.0
    right = np.array([-half, 0.0, 0.0], dtype=np.float64)
    left = np.array([half, 0.0, 0.0], dtype=np.float64)
    return right, left


def screen_up_axis(screen: ScreenConfig) -> np.ndarray:
    """Unit vector along the tilted screen face, from bottom edge to top edge."""
    return np.array([0.0, math.sin(screen.angle), math.cos(screen.angle)], dtype=np.float64)


def line_plane_parameter(
    plane_points: tuple[np.ndarray, np.ndarray, np.ndarray],
    line_start: np.ndarray,
    line_end: np.ndarray,
    epsilon: float = 1e-9,
) -> float:
    """Intersection parameter ``t`` of the line ``start + t·(end - start)``
    with the plane through three points.

    Uses the homogeneous 4×4 determinant form::

        t = -det(M1) / det(M2)

    where M1 holds the three plane points and the line start as columns (with a
    homogeneous weight row of ones) and M2 swaps the last column for the free
    vector ``end - start`` (weight 0).

    Raises:
        DegenerateGeometryError: the line is parallel to the plane (relative to
            *epsilon*) or the plane points are collinear.
    """
    a, b, c = plane_points
    displacement = line_end - line_start

    m1 = np.ones((4, 4), dtype=np.float64)
    m1[1:, 0] = a
    m1[1:, 1] = b
    m1[1:, 2] = c
    m1[1:, 3] = line_start

    m2 = m1.copy()
    m2[0, 3] = 0.0
    m2[1:, 3] = displacement

    det1 = float(np.linalg.det(m1))
    det2 = float(np.linalg.det(m2))

    # det(M2) is the triple product of the displacement with the two plane edges
    scale = (
        float(np.linalg.norm(b - a))
        * float(np.linalg.norm(c - a))
        * float(np.linalg.norm(displacement))
    )
    if scale == 0.0 or abs(det2) <= epsilon * scale:
        raise DegenerateGeometryError(
            f"Line is parallel to the reference plane (det={det2:.3e}, scale={scale:.3e})"
        )

    t = -det1 / det2
    if not math.isfinite(t):
        raise DegenerateGeometryError(f"Non-finite intersection parameter: {t}")
    return t


# ------------------------------------------------------------------
# Screen-local coordinates
# ------------------------------------------------------------------

def screen_coordinates(screen: ScreenConfig, point_world: np.ndarray) -> tuple[float, float]:
    """Project a world-frame point onto (u, v) screen axes.

    ``u`` runs along the bottom edge (world x), ``v`` up the tilted face from
    the bottom edge.
    """
    u = float(point_world[0])
    v = float(np.dot(point_world, screen_up_axis(screen)))
    return u, v


def is_on_screen(screen: ScreenConfig, u: float, v: float) -> bool:
    """Rectangle hit test in screen axes; points on the edge count as inside."""
    half = screen.width / 2.0
    return -half <= u <= half and 0.0 <= v <= screen.height
