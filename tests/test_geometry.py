"""Tests for the sensor/world frame transform and line–plane helpers."""

import math

import numpy as np
import pytest

from domain.errors import DegenerateGeometryError
from domain.geometry import (
    build_frame_transform,
    is_on_screen,
    line_plane_parameter,
    screen_bottom_corners,
    screen_coordinates,
)
from domain.models import ScreenConfig

_SCREEN = ScreenConfig(angle=math.pi / 4, width=520.0, height=350.0)

_VECTORS = [
    np.array([1.0, 0.0, 0.0]),
    np.array([0.3, -2.5, 7.0]),
    np.array([-120.0, 45.5, 610.25]),
]


def test_rotation_is_orthonormal():
    tf = build_frame_transform(_SCREEN)
    assert np.allclose(tf.rotation @ tf.inverse_rotation, np.eye(3))
    assert np.linalg.det(tf.rotation) == pytest.approx(1.0)


@pytest.mark.parametrize("v", _VECTORS)
def test_vector_round_trip(v):
    tf = build_frame_transform(_SCREEN)
    assert np.allclose(tf.vector_to_sensor(tf.vector_to_world(v)), v)


@pytest.mark.parametrize("p", _VECTORS)
def test_point_round_trip(p):
    tf = build_frame_transform(_SCREEN)
    assert np.allclose(tf.point_to_sensor(tf.point_to_world(p)), p)


def test_vectors_ignore_translation():
    tf = build_frame_transform(_SCREEN)
    assert np.allclose(tf.vector_to_world(np.zeros(3)), np.zeros(3))


def test_sensor_sits_on_top_edge():
    tf = build_frame_transform(_SCREEN)
    half_diag = 175.0 * math.sqrt(2.0)
    assert list(tf.sensor_position) == pytest.approx([0.0, half_diag, half_diag])
    assert np.allclose(tf.point_to_world(np.zeros(3)), tf.sensor_position)
    assert float(np.linalg.norm(tf.sensor_position)) == pytest.approx(350.0)


def test_bottom_corners():
    right, left = screen_bottom_corners(_SCREEN)
    assert list(right) == pytest.approx([-260.0, 0.0, 0.0])
    assert list(left) == pytest.approx([260.0, 0.0, 0.0])


def test_line_plane_parameter_simple_plane():
    plane = (np.zeros(3), np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))
    t = line_plane_parameter(plane, np.array([0.0, 0.0, 5.0]), np.array([0.0, 0.0, 4.0]))
    assert t == pytest.approx(5.0)


def test_line_plane_parameter_parallel_raises():
    plane = (np.zeros(3), np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))
    with pytest.raises(DegenerateGeometryError):
        line_plane_parameter(plane, np.array([0.0, 0.0, 5.0]), np.array([3.0, 1.0, 5.0]))


def test_line_plane_parameter_collinear_plane_raises():
    plane = (np.zeros(3), np.array([1.0, 0.0, 0.0]), np.array([2.0, 0.0, 0.0]))
    with pytest.raises(DegenerateGeometryError):
        line_plane_parameter(plane, np.array([0.0, 0.0, 5.0]), np.array([0.0, 0.0, 4.0]))


def test_screen_coordinates_of_top_centre():
    tf = build_frame_transform(_SCREEN)
    u, v = screen_coordinates(_SCREEN, tf.sensor_position)
    assert u == pytest.approx(0.0)
    assert v == pytest.approx(350.0)


def test_on_screen_inside_and_outside():
    assert is_on_screen(_SCREEN, 0.0, 100.0) is True
    assert is_on_screen(_SCREEN, 300.0, 100.0) is False
    assert is_on_screen(_SCREEN, 0.0, -1.0) is False


def test_on_screen_edge_considered_inside():
    assert is_on_screen(_SCREEN, 260.0, 100.0) is True


def test_on_screen_exact_for_large_units():
    # Half-width 2**24 + 1 is not representable in float32.
    half = float(2 ** 24 + 1)
    screen = ScreenConfig(angle=math.pi / 4, width=2.0 * half, height=350.0)
    assert is_on_screen(screen, half - 0.5, 100.0) is True
    assert is_on_screen(screen, half, 100.0) is True
    assert is_on_screen(screen, half + 0.5, 100.0) is False
