"""Exhaustive enumeration of mine assignments for one constraint component."""

from collections import deque
from typing import Deque, List, NamedTuple, Optional, Sequence, Tuple

Assignment = Tuple[bool, ...]


class SearchLimitExceeded(RuntimeError):
    """Raised when an enumeration holds more partial assignments than allowed."""


class ClueConstraint(NamedTuple):
    """A positive clue: ``mine_count`` mines among the unknowns in ``adjacency``."""

    mine_count: int
    adjacency: Tuple[int, ...]


class Topology(NamedTuple):
    """Unknowns are numbered 0..unknown_count-1; clues refer to those indices."""

    unknown_count: int
    clues: Tuple[ClueConstraint, ...]


def _is_still_possible(
    topology: Topology, clue_indices: Sequence[int], prefix: Assignment
) -> bool:
    """
    Check the clues touching the newest prefix entry.

    A clue fails when it already has more mines than it owes, or when its
    undecided neighbors can no longer make up the difference.
    """
    decided = len(prefix)
    for clue_idx in clue_indices:
        clue = topology.clues[clue_idx]
        mines = 0
        undecided = 0
        for unk_idx in clue.adjacency:
            if unk_idx >= decided:
                undecided += 1
            elif prefix[unk_idx]:
                mines += 1
                if mines > clue.mine_count:
                    return False
        if mines + undecided < clue.mine_count:
            return False
    return True


def find_solutions(
    topology: Topology, max_states: Optional[int] = None
) -> Deque[Assignment]:
    """
    Enumerate every assignment to the topology's unknowns that satisfies all clues.

    Prefixes are extended one index at a time in breadth-first order, so the
    queue only ever holds prefixes that passed every clue check so far. When
    the head of the queue is complete, every remaining entry is complete too.

    Args:
        topology: Unknown count and clue adjacency of one component.
        max_states: Largest number of queued prefixes allowed; None for no
            limit. The enumeration stays exact; it is abandoned instead.

    Returns:
        Deque of assignments; ``assignment[i]`` is True when unknown ``i`` is
        a mine. Empty when the clues are unsatisfiable.

    Raises:
        SearchLimitExceeded: If the queue grows past ``max_states``.
    """
    unknowns_to_clues: List[List[int]] = [[] for _ in range(topology.unknown_count)]
    for i, clue in enumerate(topology.clues):
        for unk_idx in clue.adjacency:
            unknowns_to_clues[unk_idx].append(i)

    solutions: Deque[Assignment] = deque([()])
    while solutions:
        prefix = solutions.popleft()
        if len(prefix) >= topology.unknown_count:
            solutions.appendleft(prefix)
            break

        touched = unknowns_to_clues[len(prefix)]
        for value in (False, True):
            candidate = prefix + (value,)
            if _is_still_possible(topology, touched, candidate):
                solutions.append(candidate)

        if max_states is not None and len(solutions) > max_states:
            raise SearchLimitExceeded(
                f"More than {max_states} partial assignments over "
                f"{topology.unknown_count} unknowns."
            )

    return solutions


def count_mines(assignment: Assignment) -> int:
    return sum(assignment)


def satisfies(topology: Topology, assignment: Assignment) -> bool:
    """True when every clue sees exactly its owed number of mines."""
    if len(assignment) != topology.unknown_count:
        return False
    return all(
        sum(1 for idx in clue.adjacency if assignment[idx]) == clue.mine_count
        for clue in topology.clues
    )
