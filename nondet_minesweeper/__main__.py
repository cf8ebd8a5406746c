"""Command-line entry point: ``python -m nondet_minesweeper``."""

import argparse
import logging
from typing import List, Optional

from .config import (
    DEFAULT_LEVEL,
    DIFFICULTY_LEVELS,
    clamp_settings,
    format_seed,
    make_rng,
    parse_seed,
    random_seed,
)
from .engine import Minesweeper, play_cli

logger = logging.getLogger("nondet_minesweeper")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nondet_minesweeper",
        description="Play Minesweeper where mines move away whenever the clues allow it.",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(DIFFICULTY_LEVELS),
        default=DEFAULT_LEVEL,
        help="Board size and mine count preset (default: %(default)s).",
    )
    parser.add_argument("--width", type=int, help="Override the preset width.")
    parser.add_argument("--height", type=int, help="Override the preset height.")
    parser.add_argument("--mines", type=int, help="Override the preset mine count.")
    parser.add_argument(
        "--seed",
        type=parse_seed,
        help="64 hex digits; replays a previous session when combined with the same moves.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: %(default)s).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    width, height, mines = DIFFICULTY_LEVELS[args.preset]
    width, height, mines = clamp_settings(
        args.width if args.width is not None else width,
        args.height if args.height is not None else height,
        args.mines if args.mines is not None else mines,
    )

    if args.seed is None:
        seed = random_seed()
        print(f"Using random seed: {format_seed(seed)}")
    else:
        seed = args.seed
        print("Using provided seed.")
    logger.info("Seed %s", format_seed(seed))

    play_cli(Minesweeper(width, height, mines, rng=make_rng(seed)))


if __name__ == "__main__":
    main()
