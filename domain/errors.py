"""Exceptions raised by the gaze-point computation."""

from __future__ import annotations


class GazePointError(Exception):
    """Base class for errors local to a single gaze-point computation."""


class NotReadyError(GazePointError, RuntimeError):
    """A gaze direction arrived before any head position was cached."""


class DegenerateGeometryError(GazePointError, ValueError):
    """The gaze ray has no well-defined intersection with the screen plane."""
