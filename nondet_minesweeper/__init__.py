"""
Non-deterministic Minesweeper

A Minesweeper engine whose mine layout is only fixed where revealed clues
force it:
- Constraint propagation: forced mines and empties from each new clue
- Component enumeration: every assignment of each independent frontier cluster
- Reconciliation: a random consistent layout that keeps the revealed cell safe
"""

from .engine import Minesweeper, Tile, play_cli
from .solver import PartialSolution
from .components import Component, ComponentCache, FullRescanComponentCache
from .grid import Grid
from .search import ClueConstraint, SearchLimitExceeded, Topology, find_solutions
from .config import DIFFICULTY_LEVELS, make_rng, parse_seed
from .analysis import (
    run_random_play_game,
    run_many_games,
    run_level_analysis,
    plot_level_summary,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Minesweeper",
    "Tile",
    "PartialSolution",
    "Component",
    "ComponentCache",
    "FullRescanComponentCache",
    "Grid",
    # Component search
    "ClueConstraint",
    "Topology",
    "find_solutions",
    "SearchLimitExceeded",
    # Configuration
    "DIFFICULTY_LEVELS",
    "make_rng",
    "parse_seed",
    # CLI
    "play_cli",
    # Analysis functions
    "run_random_play_game",
    "run_many_games",
    "run_level_analysis",
    "plot_level_summary",
]
