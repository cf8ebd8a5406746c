from typing import Callable, List

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from nondet_minesweeper.engine import FieldCounters, Minesweeper, Tile  # noqa: E402
from nondet_minesweeper.grid import Grid  # noqa: E402


def build_game(rows: List[str], seed: int = 0) -> Minesweeper:
    """Game with a fixed layout; '*' marks a mine, anything else is empty."""
    height, width = len(rows), len(rows[0])
    tiles = [Tile(ch == "*") for line in rows for ch in line]
    mines = sum(tile.is_mine for tile in tiles)

    game = Minesweeper(width, height, mines, seed=seed)
    game.grid = Grid.from_list(width, height, FieldCounters(mines), tiles)
    return game


@pytest.fixture
def layout_game() -> Callable[..., Minesweeper]:
    return build_game
