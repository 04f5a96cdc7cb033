"""Message-delivery controller – feeds transport updates into the intersector."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from app.config import Config
from domain.errors import GazePointError
from domain.intersector import GazeIntersector
from domain.models import GazeSample, Vector3
from storage.gaze_log_writer import GazeLogWriter

logger = logging.getLogger(__name__)

VectorLike = Union[Vector3, Iterable[float]]


def _as_vector(value: VectorLike) -> Vector3:
    if isinstance(value, Vector3):
        return value
    return Vector3.from_iterable(value)


class Controller:
    """Owns the intersector and the optional gaze log.

    The transport calls ``on_head_position`` and ``on_gaze_direction`` as
    updates arrive; every successful gaze-direction update is handed to
    ``emit``. Updates are expected one at a time; the intersector's lock makes
    a multi-threaded transport safe but does not order its updates.
    """

    def __init__(
        self,
        config: Config,
        emit: Optional[Callable[[GazeSample], None]] = None,
    ) -> None:
        self.config = config
        self.intersector = GazeIntersector(
            config.screen(),
            ray_scale=config.ray_scale,
            parallel_epsilon=config.parallel_epsilon,
            output_frame=config.output_frame,
        )
        self.emit = emit

        self._writer: Optional[GazeLogWriter] = None
        self._emitted = 0
        self._dropped = 0

    # ------------------------------------------------------------------
    # Startup / Shutdown
    # ------------------------------------------------------------------

    def start_logging(self, log_dir: Union[str, Path, None] = None) -> Optional[Path]:
        target = log_dir if log_dir is not None else self.config.log_dir
        if target is None:
            return None
        self.stop_logging()
        self._writer = GazeLogWriter(Path(target))
        return self._writer.path

    def stop_logging(self) -> None:
        if self._writer:
            self._writer.close()
            self._writer = None

    def close(self) -> None:
        self.stop_logging()
        logger.info(
            "Controller closed.  Emitted=%d  Dropped=%d", self._emitted, self._dropped
        )

    # ------------------------------------------------------------------
    # Transport callbacks
    # ------------------------------------------------------------------

    def on_head_position(self, value: VectorLike) -> None:
        try:
            position = _as_vector(value)
        except (TypeError, ValueError) as exc:
            self._dropped += 1
            logger.warning("Ignoring malformed head position %r: %s", value, exc)
            return
        self.intersector.set_head_position(position)

    def on_gaze_direction(self, value: VectorLike) -> Optional[GazeSample]:
        """Compute and emit one gaze sample; return it, or None if dropped."""
        try:
            direction = _as_vector(value)
        except (TypeError, ValueError) as exc:
            self._dropped += 1
            logger.warning("Ignoring malformed gaze direction %r: %s", value, exc)
            return None

        try:
            head, point = self.intersector.trace(direction)
        except GazePointError as exc:
            self._dropped += 1
            logger.warning("Gaze point dropped: %s", exc)
            return None

        u, v, on_screen = self.intersector.locate_on_screen(point)
        sample = GazeSample(
            timestamp_mono=time.monotonic(),
            timestamp_wall=time.time(),
            head_position=head,
            direction=direction,
            gaze_point=point,
            frame=self.intersector.output_frame,
            screen_u=u,
            screen_v=v,
            on_screen=on_screen,
        )

        if self._writer:
            self._writer.write_sample(sample)
        if self.emit:
            self.emit(sample)
        self._emitted += 1
        return sample

    @property
    def emitted(self) -> int:
        return self._emitted

    @property
    def dropped(self) -> int:
        return self._dropped
