"""Neighborhood helpers shared by the game engine and the solver."""

from typing import Dict, Iterator, Tuple

# Unit offsets (drow, dcol) in the fixed enumeration order.
_DELTAS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)

# Module-level cache: (width, height) -> {(row, col): ((nr, nc), ...), ...}
_NEIGHBORHOODS_CACHE: Dict[
    Tuple[int, int],
    Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]]
] = {}


def iter_neighbors(
    row: int, col: int, width: int, height: int
) -> Iterator[Tuple[int, int]]:
    """
    Lazily yield the 8-connected neighbors of (row, col) inside the board.

    Calling it again with the same arguments yields the same sequence.
    """
    for drow, dcol in _DELTAS:
        nrow = row + drow
        if nrow < 0 or nrow >= height:
            continue
        ncol = col + dcol
        if ncol < 0 or ncol >= width:
            continue
        yield nrow, ncol


def get_neighborhoods(
    width: int, height: int
) -> Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]]:
    """
    Precompute and cache 8-connected neighbor coordinates for every cell in a grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Mapping from each cell (row, col) to a tuple of valid neighboring
        coordinates, in the same order as iter_neighbors().

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]] = {
        (row, col): tuple(iter_neighbors(row, col, width, height))
        for row in range(height)
        for col in range(width)
    }

    _NEIGHBORHOODS_CACHE[key] = neighborhoods
    return neighborhoods
