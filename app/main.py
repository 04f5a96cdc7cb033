"""Application entry point.

Reads JSON lines from stdin, one update per line::

    {"head_position": [x, y, z]}
    {"gaze_direction": [x, y, z]}

and writes one JSON line per emitted gaze sample to stdout.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

# Ensure project root is on the path when running as `python app/main.py`
_ROOT = Path(__file__).parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.config import Config
from app.controller import Controller
from domain.intersector import FRAMES
from domain.models import GazeSample

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="gaze-point",
        description="Intersect head-anchored gaze rays with a fixed screen plane.",
    )
    parser.add_argument("--config", type=Path, default=None, help="JSON config file")
    parser.add_argument("--output-frame", choices=FRAMES, default=None)
    parser.add_argument("--log-dir", default=None, help="write a CSV gaze log here")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def process_stream(controller: Controller, lines: Iterable[str]) -> int:
    """Feed JSON-line updates to *controller*; return the number of lines skipped.

    Stops early on Ctrl-C and returns the count so far.
    """
    skipped = 0
    try:
        for lineno, line in enumerate(lines, start=1):
            skipped += _handle_line(controller, lineno, line)
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    return skipped


def _handle_line(controller: Controller, lineno: int, line: str) -> int:
    """Dispatch one line; return 1 if it was skipped, else 0."""
    line = line.strip()
    if not line:
        return 0
    try:
        message = json.loads(line)
    except json.JSONDecodeError as exc:
        logger.warning("Line %d: invalid JSON (%s); skipped.", lineno, exc)
        return 1

    if not isinstance(message, dict):
        logger.warning("Line %d: expected an object; skipped.", lineno)
        return 1
    if "head_position" in message:
        controller.on_head_position(message["head_position"])
    elif "gaze_direction" in message:
        controller.on_gaze_direction(message["gaze_direction"])
    else:
        logger.warning("Line %d: unknown message keys %s; skipped.", lineno, sorted(message))
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)
    _configure_logging(args.verbose)
    logger.info("Gaze point – starting up.")

    config = Config.load(args.config)
    if args.output_frame:
        config.output_frame = args.output_frame
    if args.log_dir:
        config.log_dir = args.log_dir

    def emit(sample: GazeSample) -> None:
        sys.stdout.write(json.dumps(sample.to_dict()) + "\n")
        sys.stdout.flush()

    try:
        controller = Controller(config, emit=emit)
    except (TypeError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(2)

    log_path = controller.start_logging()
    if log_path:
        logger.info("Logging gaze samples to %s", log_path)

    try:
        skipped = process_stream(controller, sys.stdin)
    finally:
        controller.close()

    logger.info("Exiting.  Skipped lines: %d", skipped)


if __name__ == "__main__":
    main()
