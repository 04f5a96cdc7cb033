"""Application-wide configuration with typed fields and sane defaults."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional, Union

from domain.models import ScreenConfig

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path("config.json")


@dataclass
class Config:
    # Screen geometry (fixed for the process lifetime)
    screen_angle: float = math.pi / 4  # radians tilt from vertical
    screen_width: float = 520.0        # same linear units as head position
    screen_height: float = 350.0

    # Intersection
    ray_scale: float = 100.0           # auxiliary k for the second ray point
    parallel_epsilon: float = 1e-9     # relative threshold for "ray parallel to plane"
    output_frame: str = "world"        # "world" or "sensor"

    # Logging of emitted gaze points (CSV); disabled when None
    log_dir: Optional[str] = None

    def screen(self) -> ScreenConfig:
        return ScreenConfig(
            angle=float(self.screen_angle),
            width=float(self.screen_width),
            height=float(self.screen_height),
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: Union[str, Path, None] = None) -> None:
        target = Path(path) if path is not None else _CONFIG_PATH
        with open(target, "w", encoding="utf-8") as fh:
            json.dump(asdict(self), fh, indent=2)
        logger.debug("Config saved to %s", target)

    @classmethod
    def load(cls, path: Union[str, Path, None] = None) -> "Config":
        source = Path(path) if path is not None else _CONFIG_PATH
        if not source.exists():
            return cls()
        try:
            with open(source, encoding="utf-8") as fh:
                data = json.load(fh)
            cfg = cls()
            for k, v in data.items():
                if not hasattr(cfg, k):
                    logger.warning("Ignoring unknown config key '%s'.", k)
                    continue
                try:
                    setattr(cfg, k, _coerce(k, v))
                except (TypeError, ValueError) as exc:
                    logger.warning("Ignoring config key '%s' (%s); keeping default.", k, exc)
            logger.debug("Config loaded from %s", source)
            return cfg
        except (OSError, json.JSONDecodeError, AttributeError) as exc:
            logger.warning("Could not load config (%s); using defaults.", exc)
            return cls()


_FLOAT_KEYS = {"screen_angle", "screen_width", "screen_height", "ray_scale", "parallel_epsilon"}
_STR_KEYS = {"output_frame"}
_OPTIONAL_STR_KEYS = {"log_dir"}


def _coerce(key: str, value: Any) -> Any:
    """Convert a JSON value to the type of the field it is loaded into."""
    if key in _FLOAT_KEYS:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise TypeError(f"expected a number, got {type(value).__name__}")
        return float(value)
    if key in _STR_KEYS or key in _OPTIONAL_STR_KEYS:
        if value is None and key in _OPTIONAL_STR_KEYS:
            return None
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {type(value).__name__}")
        return value
    return value
