"""Per-cell solver states.

A solver cell holds one of the string markers below, or an ``int`` for a
revealed clue, in which case the value is the number of mines the clue still
owes among its undecided neighbors.
"""

from typing import Union

UNCONSTRAINED = "U"  # no adjacent clue; part of the free pool
CONSTRAINED = "C"    # next to a clue, tracked by a component
MINE = "M"
EMPTY = "E"          # known empty, not revealed yet

CellState = Union[str, int]


def is_clue(state: CellState) -> bool:
    return isinstance(state, int)


def is_positive_clue(state: CellState) -> bool:
    return isinstance(state, int) and state > 0
