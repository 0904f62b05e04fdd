#!/usr/bin/env python3
"""
Episode Mood Command

Prints the mood of one episode as a single JSON line:

    $ episode-mood b0abcdef
    {"chillFactor":0.7222222222222222,"happinessFactor":0.315}

On failure prints {"error": "<message>"} and exits 1.

Or run as a module:
    python -m episode_mood.scripts.episode_mood --config ./config.json b0abcdef
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from typing import List, NoReturn, Optional, TextIO

from episode_mood.config import load_config
from episode_mood.core.mood.models import ErrorResponse
from episode_mood.core.mood.pipeline import compute_episode_mood
from episode_mood.errors import MoodError

logger = logging.getLogger(__name__)

USAGE_ERROR = "Invalid number of arguments"
INTERNAL_ERROR = "Internal error"


class UsageError(Exception):
    pass


class JSONArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing usage and exiting."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_parser() -> JSONArgumentParser:
    parser = JSONArgumentParser(
        prog="episode-mood",
        description="Compute the happiness and chill factor of an episode's music",
    )
    parser.add_argument("episode_id", help="Episode identifier")
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to config.json (default: $EPISODE_MOOD_CONFIG or ./config.json)",
    )
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="End-to-end deadline in seconds (overrides the config file)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug)",
    )
    return parser


def setup_logging(verbosity: int = 0) -> None:
    """Log to stderr; stdout carries only the JSON result."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def emit_error(message: str, out: TextIO) -> int:
    print(ErrorResponse(error=message).model_dump_json(), file=out)
    return 1


def main(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    try:
        args = build_parser().parse_args(argv)
    except UsageError:
        return emit_error(USAGE_ERROR, out)

    if args.timeout is not None and not (math.isfinite(args.timeout) and args.timeout > 0):
        return emit_error("Timeout must be a positive finite number of seconds", out)

    setup_logging(args.verbose)

    try:
        config = load_config(args.config)
        mood = compute_episode_mood(config, args.episode_id, timeout=args.timeout)
    except MoodError as e:
        logger.error(f"Mood computation failed [{e.code}]: {e.message}")
        return emit_error(e.message, out)
    except Exception:
        logger.exception("Unexpected failure")
        return emit_error(INTERNAL_ERROR, out)

    for failure in mood.failed_tracks:
        logger.info(f"Excluded track {failure.track_id}: {failure.reason}")

    print(mood.to_response().model_dump_json(by_alias=True), file=out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
