"""Partial knowledge of the mine layout, kept consistent with every revealed clue."""

import itertools
import logging
from collections import defaultdict, deque
from typing import (
    Callable,
    DefaultDict,
    Deque,
    Dict,
    Iterable,
    List,
    Optional,
    Set,
    Tuple,
)

import numpy as np

from .components import ComponentCache, FullRescanComponentCache
from .grid import Grid
from .search import Assignment, count_mines
from .states import (
    CONSTRAINED,
    EMPTY,
    MINE,
    UNCONSTRAINED,
    CellState,
    is_clue,
    is_positive_clue,
)
from .utils import get_neighborhoods

logger = logging.getLogger(__name__)

Key = Tuple[int, int]
CommitCallback = Callable[[int, int, bool], None]

# Propagation actions
CHECK_MINES = "check_mines"      # clue may now be saturated by its open neighbors
TO_MINE = "to_mine"
CHECK_EMPTIES = "check_empties"  # clue reached 0, its open neighbors are empty
TO_EMPTY = "to_empty"


class SolutionCounters:
    """Free-pool size and undeduced mine budget, driven by grid writes."""

    def __init__(self, unconstrained_count: int, remaining_mine_count: int) -> None:
        self.unconstrained_count = unconstrained_count
        self.remaining_mine_count = remaining_mine_count

    def notify_change(self, old: CellState, new: CellState) -> None:
        if old == UNCONSTRAINED and new != UNCONSTRAINED:
            self.unconstrained_count -= 1
        elif new == UNCONSTRAINED and old != UNCONSTRAINED:
            raise RuntimeError(f"A cell in state {old!r} cannot become unconstrained.")

        if new == MINE and old != MINE:
            if self.remaining_mine_count == 0:
                raise RuntimeError("Deduced more mines than the board holds.")
            self.remaining_mine_count -= 1


class PartialSolution:
    """
    Solver-side view of the board.

    Cells start unconstrained. Revealed clues are added with add_clue(), which
    propagates every logically forced mine or empty cell. Whatever is left
    undecided next to the clues is split into components by
    find_graph_solutions(), and try_make_safe() picks a full layout from those
    components and the free pool when a reveal needs one.
    """

    def __init__(
        self,
        width: int,
        height: int,
        mines_count: int,
        components: Optional[ComponentCache] = None,
    ) -> None:
        if mines_count < 0 or mines_count > width * height:
            raise ValueError("mines_count must be between 0 and width * height.")

        self.width: int = width
        self.height: int = height
        self.counters = SolutionCounters(width * height, mines_count)
        self.grid: Grid[CellState] = Grid(width, height, self.counters, UNCONSTRAINED)
        self.components: ComponentCache = (
            components if components is not None else FullRescanComponentCache()
        )

        # Cached 8-neighborhoods: (row, col) -> ((nr, nc), ...)
        self._neighborhoods: Dict[Key, Tuple[Key, ...]] = get_neighborhoods(
            width, height
        )

    @property
    def unconstrained_count(self) -> int:
        return self.counters.unconstrained_count

    @property
    def remaining_mine_count(self) -> int:
        return self.counters.remaining_mine_count

    def neighbors(self, row: int, col: int) -> Tuple[Key, ...]:
        """Return precomputed neighbor coordinates for a cell."""
        return self._neighborhoods[(row, col)]

    def state(self, row: int, col: int) -> CellState:
        return self.grid.get(row, col)

    # -------------------------------------------------------------------------
    # Deduction
    # -------------------------------------------------------------------------

    def add_clue(self, cell: Key, clue: int) -> None:
        """
        Record a revealed clue and propagate what it forces.

        Args:
            cell: (row, col) of the revealed cell.
            clue: Number of mines around the cell, as displayed.

        Raises:
            ValueError: If the clue value is outside 0..8.
            RuntimeError: If the cell is already a clue or a known mine, or
                the clue contradicts what is already known.
        """
        if not 0 <= clue <= 8:
            raise ValueError(f"Clue value must be between 0 and 8, got {clue}.")

        row, col = cell
        state = self.grid.get(row, col)
        if is_clue(state):
            raise RuntimeError(f"Cell {cell} is already revealed.")
        if state == MINE:
            raise RuntimeError(f"Cell {cell} is a known mine and cannot hold a clue.")
        if state == CONSTRAINED:
            # Neighboring clues did not know this cell is empty.
            self._breadth_first_update(TO_EMPTY, [cell])

        unknowns: List[Key] = []
        for nrow, ncol in self.neighbors(row, col):
            nstate = self.grid.get(nrow, ncol)
            if nstate == UNCONSTRAINED:
                self.grid.set(nrow, ncol, CONSTRAINED)
                unknowns.append((nrow, ncol))
            elif nstate == CONSTRAINED:
                unknowns.append((nrow, ncol))
            elif nstate == MINE:
                clue -= 1

        if clue < 0 or clue > len(unknowns):
            raise RuntimeError(
                f"Clue at {cell} owes {clue} mines among {len(unknowns)} unknown neighbors."
            )

        self.grid.set(row, col, clue)

        if not unknowns:
            return
        if clue == 0:
            self._breadth_first_update(TO_EMPTY, unknowns)
        elif clue == len(unknowns):
            self._breadth_first_update(TO_MINE, unknowns)

    def _open_neighbors(self, row: int, col: int) -> List[Key]:
        """Constrained neighbors of a clue; an unconstrained one is an error."""
        unknowns: List[Key] = []
        for nrow, ncol in self.neighbors(row, col):
            nstate = self.grid.get(nrow, ncol)
            if nstate == CONSTRAINED:
                unknowns.append((nrow, ncol))
            elif nstate == UNCONSTRAINED:
                raise RuntimeError(
                    f"Unconstrained cell ({nrow}, {ncol}) next to clue ({row}, {col})."
                )
        return unknowns

    def _breadth_first_update(self, action: str, seed: Iterable[Key]) -> None:
        """Apply ``action`` to the seed cells and everything it forces, to a fixpoint."""
        queue: Deque[Tuple[Key, str]] = deque()
        is_queued: Set[Tuple[Key, str]] = set()

        def try_enqueue(cell: Key, act: str) -> None:
            if (cell, act) not in is_queued:
                is_queued.add((cell, act))
                queue.append((cell, act))

        for cell in seed:
            try_enqueue(cell, action)

        steps = 0
        while queue:
            cell, act = queue.popleft()
            is_queued.discard((cell, act))
            row, col = cell
            state = self.grid.get(row, col)
            steps += 1

            if act == CHECK_MINES:
                if not is_clue(state):
                    raise RuntimeError(f"Expected a clue at {cell}, found {state!r}.")
                unknowns = self._open_neighbors(row, col)
                owed = int(state)
                if len(unknowns) < owed:
                    raise RuntimeError(
                        f"Clue at {cell} owes {owed} mines but has "
                        f"{len(unknowns)} open neighbors."
                    )
                if owed > 0 and len(unknowns) == owed:
                    self.grid.set(row, col, 0)
                    for unknown in unknowns:
                        try_enqueue(unknown, TO_MINE)

            elif act == TO_MINE:
                if state != CONSTRAINED:
                    raise RuntimeError(f"Only constrained cells become mines, {cell} is {state!r}.")
                self.grid.set(row, col, MINE)

                for nrow, ncol in self.neighbors(row, col):
                    nstate = self.grid.get(nrow, ncol)
                    if is_positive_clue(nstate):
                        owed = int(nstate) - 1
                        self.grid.set(nrow, ncol, owed)
                        if owed == 0:
                            try_enqueue((nrow, ncol), CHECK_EMPTIES)

            elif act == CHECK_EMPTIES:
                if state != 0:
                    raise RuntimeError(f"Only a satisfied clue frees its neighbors, {cell} is {state!r}.")
                for unknown in self._open_neighbors(row, col):
                    try_enqueue(unknown, TO_EMPTY)

            elif act == TO_EMPTY:
                if state != CONSTRAINED:
                    raise RuntimeError(f"Only constrained cells become empty, {cell} is {state!r}.")
                self.grid.set(row, col, EMPTY)

                for nrow, ncol in self.neighbors(row, col):
                    if is_positive_clue(self.grid.get(nrow, ncol)):
                        try_enqueue((nrow, ncol), CHECK_MINES)

            else:
                raise ValueError(f"Unknown propagation action: {act!r}")

        logger.debug("Propagated %s in %d steps", action, steps)

    # -------------------------------------------------------------------------
    # Components
    # -------------------------------------------------------------------------

    def find_graph_solutions(self) -> None:
        """Recompute the components of the undecided frontier and their alternatives."""
        self.components.rebuild(self)

    def min_component_mines(self) -> int:
        """Fewest mines the current components can hold together."""
        return sum(
            min(count_mines(alt) for alt in component.alternatives)
            for component in self.components
        )

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def try_make_safe(
        self,
        revealed: Iterable[Key],
        reconfigure_tile: CommitCallback,
        rng: np.random.Generator,
    ) -> bool:
        """
        Pick a full mine layout in which every cell of ``revealed`` is empty.

        The layout is reported cell by cell through ``reconfigure_tile(row,
        col, is_mine)`` for every constrained cell in a component, every
        requested free cell, and every cell still in the free pool. This
        object is updated assuming success; after a False result it must not
        be used again.

        Args:
            revealed: Cells that must end up empty.
            reconfigure_tile: Commit callback for the chosen layout.
            rng: Source of every random choice made here.

        Returns:
            True if a layout was found and committed, False if every layout
            consistent with the clues puts a mine on a requested cell.

        Raises:
            RuntimeError: If a requested cell is already revealed.
        """
        unconstrained_revealed: List[Key] = []

        for row, col in revealed:
            state = self.grid.get(row, col)
            if state == CONSTRAINED:
                component = self.components.component_of((row, col))
                if component is None:
                    raise RuntimeError(
                        f"Constrained cell ({row}, {col}) belongs to no component."
                    )
                if component.exclude_mine_at((row, col)) == 0:
                    logger.debug("No alternative keeps (%d, %d) empty", row, col)
                    return False
            elif state == UNCONSTRAINED:
                # Leaves the free pool whatever the outcome.
                self.grid.set(row, col, EMPTY)
                unconstrained_revealed.append((row, col))
            elif state == MINE:
                return False
            elif is_clue(state):
                raise RuntimeError(f"Tried to reveal an already revealed cell ({row}, {col}).")

        components = list(self.components)
        mine_counts: List[DefaultDict[int, List[Assignment]]] = []
        for component in components:
            counts: DefaultDict[int, List[Assignment]] = defaultdict(list)
            for alt in component.alternatives:
                counts[count_mines(alt)].append(alt)
            mine_counts.append(counts)

        remaining = self.remaining_mine_count
        free = self.unconstrained_count

        combinations = [
            combination
            for combination in itertools.product(*(sorted(c) for c in mine_counts))
            if sum(combination) <= remaining and remaining - sum(combination) <= free
        ]
        if not combinations:
            logger.debug(
                "No mine count combination fits %d mines and %d free cells",
                remaining,
                free,
            )
            return False

        # Uniform over count combinations, then uniform within each count.
        combination = combinations[int(rng.integers(len(combinations)))]
        replaced_mines = 0
        for mine_count, per_count, component in zip(combination, mine_counts, components):
            replaced_mines += mine_count
            options = per_count[mine_count]
            alternative = options[int(rng.integers(len(options)))]
            for (row, col), is_mine in component.cells_of(alternative):
                reconfigure_tile(row, col, is_mine)

        for row, col in unconstrained_revealed:
            reconfigure_tile(row, col, False)

        leftover = remaining - replaced_mines
        shuffled_mines = np.zeros(free, dtype=bool)
        shuffled_mines[:leftover] = True
        rng.shuffle(shuffled_mines)

        placed = 0
        for row, states in enumerate(self.grid.rows()):
            for col, state in enumerate(states):
                if state == UNCONSTRAINED:
                    reconfigure_tile(row, col, bool(shuffled_mines[placed]))
                    placed += 1
        if placed != free:
            raise RuntimeError(
                f"Free pool holds {placed} cells but the counter says {free}."
            )

        logger.debug(
            "Reconciled from %d combinations: %d component mines, %d free mines",
            len(combinations),
            replaced_mines,
            leftover,
        )
        return True

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def format_state(self) -> str:
        """
        Render solver states, one character per cell.

        Constrained cells show the index of their component (mod 10), positive
        clues show what they still owe, and satisfied clues are blank.
        """
        owners: Dict[Key, int] = {}
        for i, component in enumerate(self.components):
            for cell in component.tile_map:
                owners[cell] = i

        lines: List[str] = []
        for row, states in enumerate(self.grid.rows()):
            chars: List[str] = []
            for col, state in enumerate(states):
                if is_clue(state):
                    chars.append(str(state) if state > 0 else " ")
                elif state == CONSTRAINED and (row, col) in owners:
                    chars.append(str(owners[(row, col)] % 10))
                else:
                    chars.append(str(state))
            lines.append("".join(chars))
        return "\n".join(lines)
