"""Dense row-major grid whose writes are reported to a counters object."""

from typing import Generic, Iterator, List, Protocol, TypeVar

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


class GridCounters(Protocol[T_contra]):
    """Aggregates kept up to date from individual cell writes."""

    def notify_change(self, old: T_contra, new: T_contra) -> None:
        ...


class NoCounters:
    """Counters object for grids that need no aggregates."""

    def notify_change(self, old: object, new: object) -> None:
        pass


class Grid(Generic[T]):
    """
    Fixed-size two-dimensional container indexed by (row, col).

    Every write goes through set(), which hands (old, new) to
    ``counters.notify_change`` before storing the value.
    """

    def __init__(
        self,
        width: int,
        height: int,
        counters: GridCounters[T],
        default_value: T,
    ) -> None:
        self._setup(width, height, counters, [default_value] * (width * height))

    @classmethod
    def from_list(
        cls, width: int, height: int, counters: GridCounters[T], data: List[T]
    ) -> "Grid[T]":
        """Build a grid over row-major ``data``; counters are not notified."""
        grid = cls.__new__(cls)
        grid._setup(width, height, counters, list(data))
        return grid

    def _setup(
        self, width: int, height: int, counters: GridCounters[T], data: List[T]
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Grid dimensions must be positive.")
        if len(data) != width * height:
            raise ValueError(
                f"Expected {width * height} cells for a {width}x{height} grid, "
                f"got {len(data)}."
            )
        self.counters = counters
        self._width: int = width
        self._height: int = height
        self._data: List[T] = data

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def _to_idx(self, row: int, col: int) -> int:
        if not (0 <= row < self._height and 0 <= col < self._width):
            raise ValueError(
                f"Cell ({row}, {col}) is outside the {self._width}x{self._height} grid."
            )
        return row * self._width + col

    def get(self, row: int, col: int) -> T:
        return self._data[self._to_idx(row, col)]

    def set(self, row: int, col: int, value: T) -> None:
        idx = self._to_idx(row, col)
        self.counters.notify_change(self._data[idx], value)
        self._data[idx] = value

    def rows(self) -> Iterator[List[T]]:
        """Yield each row as a list, top to bottom."""
        for start in range(0, len(self._data), self._width):
            yield self._data[start:start + self._width]
