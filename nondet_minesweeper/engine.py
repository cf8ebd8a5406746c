"""Minesweeper game engine whose mine layout adapts to keep the player alive."""

import logging
from typing import FrozenSet, List, NamedTuple, Optional, Tuple

import numpy as np

from .config import make_rng
from .components import ComponentCache
from .grid import Grid
from .solver import PartialSolution
from .utils import get_neighborhoods

logger = logging.getLogger(__name__)

# Player markings on hidden tiles, in cycling order.
NO_MARK = ""
FLAG = "F"
QUESTION = "?"
_NEXT_MARK = {NO_MARK: FLAG, FLAG: QUESTION, QUESTION: NO_MARK}


class Tile(NamedTuple):
    """Content of one board cell; ``clue`` is None while the tile is hidden."""

    is_mine: bool
    marking: str = NO_MARK
    clue: Optional[int] = None

    @property
    def revealed(self) -> bool:
        return self.clue is not None


class FieldCounters:
    """Running totals over the tile grid, updated on every tile write."""

    def __init__(self, mine_count: int) -> None:
        self.flag_count: int = 0
        self.revealed_count: int = 0
        self.mine_count: int = mine_count

    def notify_change(self, old: Tile, new: Tile) -> None:
        self.flag_count += (new.marking == FLAG) - (old.marking == FLAG)
        self.revealed_count += new.revealed - old.revealed
        self.mine_count += new.is_mine - old.is_mine


class Minesweeper:
    """
    Non-deterministic Minesweeper game.

    Mines are laid out at random when the game is created, but the layout is
    only binding where the revealed clues force it. Whenever the player
    reveals a mine that some layout consistent with every revealed clue
    would have kept empty, the engine switches to such a layout first.
    """

    def __init__(
        self,
        width: int,
        height: int,
        mines_count: int,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        components: Optional[ComponentCache] = None,
    ) -> None:
        """
        Initialize a game.

        Args:
            width: Board width (number of columns), must be > 0.
            height: Board height (number of rows), must be > 0.
            mines_count: Total number of mines, between 0 and width * height.
            rng: Random generator used for the initial layout and every
                reconciliation. Takes precedence over ``seed``.
            seed: Seed for a fresh generator when ``rng`` is not given.
            components: Component cache for the solver; a
                FullRescanComponentCache without a search limit by default.

        Raises:
            ValueError: If dimensions or the mine count are invalid.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")
        if mines_count > width * height:
            raise ValueError("More mines than fit in the field.")

        self.width: int = width
        self.height: int = height
        self.mines_count: int = mines_count
        self.rng: np.random.Generator = rng if rng is not None else make_rng(seed)

        layout = self.rng.permutation(width * height) < mines_count
        self.grid: Grid[Tile] = Grid.from_list(
            width,
            height,
            FieldCounters(mines_count),
            [Tile(bool(is_mine)) for is_mine in layout],
        )
        self.solution = PartialSolution(width, height, mines_count, components)

        self.game_over: bool = False
        self.lost: bool = False
        self.reveal_moves_count: int = 0
        self.reaccommodation_count: int = 0

        self._neighborhoods = get_neighborhoods(width, height)

        logger.info("New %dx%d game with %d mines", width, height, mines_count)

    def neighbors(self, row: int, col: int) -> Tuple[Tuple[int, int], ...]:
        """Return precomputed neighbor coordinates for a cell."""
        return self._neighborhoods[(row, col)]

    @property
    def counters(self) -> FieldCounters:
        return self.grid.counters  # type: ignore[return-value]

    @property
    def flag_count(self) -> int:
        return self.counters.flag_count

    @property
    def revealed_count(self) -> int:
        return self.counters.revealed_count

    def is_all_revealed(self) -> bool:
        return self.revealed_count + self.mines_count == self.width * self.height

    def tile(self, row: int, col: int) -> Tile:
        return self.grid.get(row, col)

    def mine_positions(self) -> FrozenSet[Tuple[int, int]]:
        """Cells that hold a mine in the current layout."""
        return frozenset(
            (row, col)
            for row, tiles in enumerate(self.grid.rows())
            for col, tile in enumerate(tiles)
            if tile.is_mine
        )

    # -------------------------------------------------------------------------
    # Player actions
    # -------------------------------------------------------------------------

    def reveal(self, row: int, col: int) -> bool:
        """
        Reveal a cell, adapting the mine layout first if that can save the player.

        Args:
            row: Row of the cell to reveal.
            col: Column of the cell to reveal.

        Returns:
            False if the cell holds a mine in every layout consistent with the
            revealed clues (the game is lost), True otherwise. Once the game
            is over the call does nothing and repeats the final outcome.

        Raises:
            ValueError: If coordinates are out of bounds.
            SearchLimitExceeded: If the component cache has a search limit and
                a component outgrows it. The game must not be used again.
        """
        tile = self.grid.get(row, col)
        if self.game_over:
            return not self.lost
        if tile.revealed:
            return True

        self.reveal_moves_count += 1

        if tile.is_mine:
            if not self.solution.try_make_safe(
                [(row, col)], self._reconfigure_tile, self.rng
            ):
                self.game_over = True
                self.lost = True
                logger.info(
                    "Mine at (%d, %d) is unavoidable; game lost after %d reveals",
                    row,
                    col,
                    self.reveal_moves_count,
                )
                return False

            self.reaccommodation_count += 1
            if self.counters.mine_count != self.mines_count:
                raise RuntimeError(
                    f"Layout holds {self.counters.mine_count} mines, "
                    f"expected {self.mines_count}."
                )
            logger.debug("Moved the mine away from (%d, %d)", row, col)

        self.flood_reveal(row, col)
        self.solution.find_graph_solutions()

        if self.is_all_revealed():
            self.game_over = True
            logger.info("Game won after %d reveals", self.reveal_moves_count)
        return True

    def mark(self, row: int, col: int) -> None:
        """Cycle a hidden tile's marking: none -> flag -> question mark -> none."""
        tile = self.grid.get(row, col)
        if self.game_over or tile.revealed:
            return
        self.grid.set(row, col, tile._replace(marking=_NEXT_MARK[tile.marking]))

    def _reconfigure_tile(self, row: int, col: int, is_mine: bool) -> None:
        tile = self.grid.get(row, col)
        if tile.revealed:
            raise RuntimeError(f"Cannot move mines on revealed tile ({row}, {col}).")
        if tile.is_mine != is_mine:
            self.grid.set(row, col, tile._replace(is_mine=is_mine))

    def flood_reveal(self, row: int, col: int) -> List[Tuple[int, int, int]]:
        """
        Reveal (row, col) and, through zero clues, the region around it.

        Flagged tiles stop the flood. Each newly revealed clue is handed to
        the solver.

        Returns:
            Newly revealed cells as (row, col, clue).
        """
        stack: List[Tuple[int, int]] = [(row, col)]
        revealed_cells: List[Tuple[int, int, int]] = []

        while stack:
            crow, ccol = stack.pop()
            tile = self.grid.get(crow, ccol)
            if tile.revealed:
                continue
            if tile.is_mine:
                raise RuntimeError(f"Flood reveal reached the mine at ({crow}, {ccol}).")

            clue = sum(1 for nrow, ncol in self.neighbors(crow, ccol)
                       if self.grid.get(nrow, ncol).is_mine)
            self.grid.set(crow, ccol, Tile(False, NO_MARK, clue))
            self.solution.add_clue((crow, ccol), clue)
            revealed_cells.append((crow, ccol, clue))

            if clue == 0:
                for nrow, ncol in self.neighbors(crow, ccol):
                    ntile = self.grid.get(nrow, ncol)
                    if not ntile.revealed and ntile.marking != FLAG:
                        stack.append((nrow, ncol))

        return revealed_cells

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    def tile_display(self, row: int, col: int, reveal_all: bool = False) -> str:
        """
        One-character view of a tile.

        Hidden tiles show their marking ("." when unmarked), revealed tiles
        their clue. With ``reveal_all`` mines show as "M" and flags on empty
        tiles as "X".
        """
        tile = self.grid.get(row, col)
        if tile.revealed:
            return str(tile.clue)
        if reveal_all:
            if tile.is_mine:
                return FLAG if tile.marking == FLAG else "M"
            if tile.marking == FLAG:
                return "X"
        return tile.marking or "."

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show mines and wrongly placed flags.
            color: If False, emit no ANSI escape codes.

        Returns:
            A formatted multi-line string with coordinate labels and the board grid.
        """
        c = self._c if color else str
        m = self._m if color else str

        def cell_str(row: int, col: int) -> str:
            s = self.tile_display(row, col, reveal_all=reveal_all)
            return m(s) if s in ("M", "X") else s

        header_cells = " ".join(f"{col:2d}" for col in range(self.width))
        out = [c("   ") + c(header_cells)]
        out.append(c("   " + "-" * (3 * self.width - 1)))

        for row in range(self.height):
            row_cells = " ".join(f" {cell_str(row, col)}" for col in range(self.width))
            out.append(c(f"{row:2d} ") + c("|") + row_cells)

        return "\n".join(out)

    def print_board(self) -> None:
        """Print the current visible board state to stdout."""
        print(self.format_board(reveal_all=False))


def play_cli(game: Minesweeper) -> None:
    """
    Run a simple terminal UI for playing non-deterministic Minesweeper.

    Args:
        game: A Minesweeper instance to play against.
    """
    print(
        "Non-deterministic Minesweeper (enter: r row col | m row col). "
        "Coordinates are 0-based. Type 'q' to quit.\n"
    )
    print(game.format_board(reveal_all=False))

    while True:
        s = input("\nMove: ").strip()
        if s.lower() in {"q", "quit", "exit"}:
            print("Quit.")
            return

        parts = s.replace(",", " ").split()
        if len(parts) == 2:
            parts.insert(0, "r")
        if len(parts) != 3 or parts[0].lower() not in {"r", "m"}:
            print("Invalid input. Example: r 3 5")
            continue

        try:
            row = int(parts[1])
            col = int(parts[2])
        except ValueError:
            print("Invalid input. Coordinates must be integers.")
            continue

        if not (0 <= row < game.height and 0 <= col < game.width):
            print("Invalid input. Cell is outside the board.")
            continue

        if parts[0].lower() == "m":
            game.mark(row, col)
            print(game.format_board(reveal_all=False))
            print(f"Flags: {game.flag_count}/{game.mines_count}")
            continue

        survived = game.reveal(row, col)

        print(f"\nYou decided to reveal ({row}, {col}).\n")
        print(game.format_board(reveal_all=False))

        if not survived:
            print("\nYou hit a mine. You lost.")
            print("\nFull board:")
            print(game.format_board(reveal_all=True))
            return

        if game.is_all_revealed():
            print("\nYou revealed all safe cells. You won!")
            print("\nFull board:")
            print(game.format_board(reveal_all=True))
            return
