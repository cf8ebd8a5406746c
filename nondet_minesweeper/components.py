"""Decomposition of the constrained frontier into independent components."""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import (
    TYPE_CHECKING,
    Deque,
    Dict,
    Iterator,
    List,
    Optional,
    Tuple,
)

from .search import Assignment, ClueConstraint, Topology, find_solutions
from .states import CONSTRAINED, is_positive_clue

if TYPE_CHECKING:
    from .solver import PartialSolution

logger = logging.getLogger(__name__)

Key = Tuple[int, int]


class Component:
    """
    One connected cluster of constrained cells and the positive clues around them.

    Attributes:
        tile_map: Constrained cell -> dense index into every alternative.
        topology: Clue constraints over those indices.
        alternatives: Every assignment that satisfies all clues; filtered in
            place while a reveal is being reconciled.
    """

    def __init__(
        self,
        tile_map: Dict[Key, int],
        topology: Topology,
        alternatives: Deque[Assignment],
    ) -> None:
        self.tile_map = tile_map
        self.topology = topology
        self.alternatives = alternatives

    def __len__(self) -> int:
        return len(self.tile_map)

    def __contains__(self, cell: object) -> bool:
        return cell in self.tile_map

    def exclude_mine_at(self, cell: Key) -> int:
        """Drop every alternative that puts a mine on ``cell``; return how many remain."""
        idx = self.tile_map[cell]
        self.alternatives = deque(alt for alt in self.alternatives if not alt[idx])
        return len(self.alternatives)

    def cells_of(self, alternative: Assignment) -> Iterator[Tuple[Key, bool]]:
        for cell, idx in self.tile_map.items():
            yield cell, alternative[idx]


class ComponentCache(ABC):
    """Interface for keeping the component decomposition of a partial solution."""

    @abstractmethod
    def rebuild(self, solution: "PartialSolution") -> None:
        ...

    @abstractmethod
    def component_of(self, cell: Key) -> Optional[Component]:
        ...

    @abstractmethod
    def __iter__(self) -> Iterator[Component]:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


class FullRescanComponentCache(ComponentCache):
    """
    Recomputes every component from a full board scan on each rebuild.

    ``max_states`` bounds each component's enumeration (see find_solutions).
    """

    def __init__(self, max_states: Optional[int] = None) -> None:
        self.max_states = max_states
        self._components: List[Component] = []
        self._owner: Dict[Key, int] = {}

    def __iter__(self) -> Iterator[Component]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def component_of(self, cell: Key) -> Optional[Component]:
        idx = self._owner.get(cell)
        return None if idx is None else self._components[idx]

    def rebuild(self, solution: "PartialSolution") -> None:
        height, width = solution.height, solution.width
        visited: List[List[bool]] = [[False] * width for _ in range(height)]

        components: List[Component] = []
        owner: Dict[Key, int] = {}

        for row, states in enumerate(solution.grid.rows()):
            for col, state in enumerate(states):
                if visited[row][col] or not is_positive_clue(state):
                    continue
                visited[row][col] = True

                tile_map, topology = _extract_topology(solution, (row, col), visited)
                alternatives = find_solutions(topology, self.max_states)
                if not alternatives:
                    raise RuntimeError(
                        f"Component seeded at ({row}, {col}) has no satisfying assignment."
                    )

                for cell in tile_map:
                    owner[cell] = len(components)
                components.append(Component(tile_map, topology, alternatives))

        self._components = components
        self._owner = owner

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Rebuilt %d components (sizes %s, alternatives %s)",
                len(components),
                [len(c) for c in components],
                [len(c.alternatives) for c in components],
            )


def _extract_topology(
    solution: "PartialSolution", start: Key, visited: List[List[bool]]
) -> Tuple[Dict[Key, int], Topology]:
    """
    Breadth-first walk from a positive clue over clue/constrained adjacency.

    Constrained cells get dense indices in the order they are first seen.
    """
    queue: Deque[Key] = deque([start])
    unk_map: Dict[Key, int] = {}
    clues: List[ClueConstraint] = []

    def try_enqueue(cell: Key) -> None:
        r, c = cell
        if not visited[r][c]:
            visited[r][c] = True
            queue.append(cell)

    while queue:
        row, col = queue.popleft()
        state = solution.grid.get(row, col)

        if is_positive_clue(state):
            adjacency: List[int] = []
            for cell in solution.neighbors(row, col):
                if solution.grid.get(*cell) != CONSTRAINED:
                    continue
                adjacency.append(unk_map.setdefault(cell, len(unk_map)))
                try_enqueue(cell)
            clues.append(ClueConstraint(int(state), tuple(adjacency)))

        elif state == CONSTRAINED:
            for cell in solution.neighbors(row, col):
                if is_positive_clue(solution.grid.get(*cell)):
                    try_enqueue(cell)

        else:
            raise RuntimeError(
                f"Cell ({row}, {col}) in state {state!r} cannot be part of a component."
            )

    return unk_map, Topology(len(unk_map), tuple(clues))
