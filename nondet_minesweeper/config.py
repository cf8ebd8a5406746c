"""Board presets and random seed handling."""

import secrets
from typing import Dict, Optional, Tuple

import numpy as np

# Standard difficulty levels: name -> (width, height, mines)
DIFFICULTY_LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (30, 16, 99),
}
DEFAULT_LEVEL = "expert"

MIN_SIDE = 2
MAX_SIDE = 255
SEED_BYTES = 32

# Simulation budget: random play can merge clues into components too large
# to enumerate, so analysis runs abandon such games.
ANALYSIS_MAX_SEARCH_STATES = 10_000


def clamp_settings(width: int, height: int, mines: int) -> Tuple[int, int, int]:
    """Clamp board settings to what the game accepts; at least one cell stays free."""
    width = min(max(width, MIN_SIDE), MAX_SIDE)
    height = min(max(height, MIN_SIDE), MAX_SIDE)
    mines = min(max(mines, 0), width * height - 1)
    return width, height, mines


def parse_seed(text: str) -> int:
    """
    Parse a hex-encoded 32-byte seed.

    Raises:
        ValueError: If the text is not exactly 64 hex digits.
    """
    text = text.strip().lower()
    if len(text) != 2 * SEED_BYTES:
        raise ValueError(f"Seed must be {2 * SEED_BYTES} hex digits, got {len(text)}.")
    return int.from_bytes(bytes.fromhex(text), "big")


def format_seed(seed: int) -> str:
    return f"{seed:0{2 * SEED_BYTES}x}"


def random_seed() -> int:
    return int.from_bytes(secrets.token_bytes(SEED_BYTES), "big")


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Build the game's random generator; a None seed draws fresh entropy."""
    return np.random.default_rng(seed)
