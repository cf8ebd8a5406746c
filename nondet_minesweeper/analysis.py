"""Simulation and plotting tools for the non-deterministic engine."""

import logging
from collections import defaultdict
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np

from .components import FullRescanComponentCache
from .config import ANALYSIS_MAX_SEARCH_STATES, DIFFICULTY_LEVELS
from .engine import Minesweeper
from .search import SearchLimitExceeded

logger = logging.getLogger(__name__)


STATUS_WIN = 1
STATUS_LOSS = -1
STATUS_ABORTED = 0


def hidden_cells_mask(game: Minesweeper) -> np.ndarray:
    """Boolean (height, width) array, True where the tile is still hidden."""
    return np.array(
        [[not tile.revealed for tile in tiles] for tiles in game.grid.rows()],
        dtype=bool,
    )


def run_random_play_game(
    width: int,
    height: int,
    mines_count: int,
    *,
    seed: Optional[int] = None,
    max_moves: Optional[int] = None,
    max_search_states: Optional[int] = ANALYSIS_MAX_SEARCH_STATES,
    show_board: bool = False,
) -> Dict[str, int]:
    """
    Play one game revealing uniformly random hidden cells until it ends.

    The game and the player draw from independent streams spawned from
    ``seed``, so a fixed seed replays the same game. Scattered random reveals
    can join clues into components too large to enumerate; such a game, or
    one that runs out of moves, is abandoned and reported as aborted.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        seed: Seed for both random streams; None draws fresh entropy.
        max_moves: Reveal budget; None for no limit.
        max_search_states: Enumeration limit per component; None for no limit.
        show_board: If True, print the final board.

    Returns:
        Dict with "status" (STATUS_WIN, STATUS_LOSS or STATUS_ABORTED),
        "reveal_moves_count", "reaccommodation_count" and
        "revealed_cells_count".
    """
    game_seq, player_seq = np.random.SeedSequence(seed).spawn(2)
    game = Minesweeper(
        width,
        height,
        mines_count,
        rng=np.random.default_rng(game_seq),
        components=FullRescanComponentCache(max_search_states),
    )
    player = np.random.default_rng(player_seq)

    status = STATUS_WIN
    while not game.is_all_revealed():
        if max_moves is not None and game.reveal_moves_count >= max_moves:
            status = STATUS_ABORTED
            break
        candidates = np.flatnonzero(hidden_cells_mask(game))
        idx = int(candidates[player.integers(len(candidates))])
        row, col = divmod(idx, width)
        try:
            survived = game.reveal(row, col)
        except SearchLimitExceeded as exc:
            logger.info(
                "Abandoned game after %d reveals: %s", game.reveal_moves_count, exc
            )
            status = STATUS_ABORTED
            break
        if not survived:
            status = STATUS_LOSS
            break

    if show_board:
        print(game.format_board(reveal_all=True))

    return {
        "status": status,
        "reveal_moves_count": game.reveal_moves_count,
        "reaccommodation_count": game.reaccommodation_count,
        "revealed_cells_count": game.revealed_count,
    }


def run_many_games(
    width: int,
    height: int,
    mines_count: int,
    runs: int,
    *,
    seed: Optional[int] = None,
    max_moves: Optional[int] = None,
    max_search_states: Optional[int] = ANALYSIS_MAX_SEARCH_STATES,
) -> Dict[str, float]:
    """
    Run many random-play games and return averaged metrics plus win rate.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        runs: Number of independent games to run, must be positive.
        seed: Seed from which one seed per game is derived.
        max_moves: Reveal budget per game, see run_random_play_game().
        max_search_states: Enumeration limit per component.

    Returns:
        "win_rate", "abort_rate" and the per-game averages of every numeric
        payload key, prefixed with "avg_".
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    game_seeds = np.random.SeedSequence(seed).generate_state(runs, dtype=np.uint64)

    sums: Dict[str, float] = defaultdict(float)
    wins = 0
    aborted = 0
    for game_seed in game_seeds:
        payload = run_random_play_game(
            width,
            height,
            mines_count,
            seed=int(game_seed),
            max_moves=max_moves,
            max_search_states=max_search_states,
        )
        if payload["status"] == STATUS_WIN:
            wins += 1
        elif payload["status"] == STATUS_ABORTED:
            aborted += 1
        for k, v in payload.items():
            if k != "status":
                sums[f"avg_{k}"] += float(v)

    out: Dict[str, float] = {k: total / runs for k, total in sums.items()}
    out["win_rate"] = wins / runs
    out["abort_rate"] = aborted / runs

    logger.info(
        "%dx%d/%d: win rate %.3f, abort rate %.3f over %d runs",
        width,
        height,
        mines_count,
        out["win_rate"],
        out["abort_rate"],
        runs,
    )
    return out


def run_level_analysis(
    runs: int,
    *,
    seed: Optional[int] = None,
    max_moves: Optional[int] = None,
    show_plots: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run random-play statistics on every difficulty preset and optionally plot them.

    Every game runs under the default enumeration limit, so the expert
    preset finishes in bounded time; abandoned games count in "abort_rate".

    Returns:
        Mapping from level name to the dict returned by run_many_games().
    """
    results: Dict[str, Dict[str, float]] = {}
    for level, (w, h, m) in DIFFICULTY_LEVELS.items():
        results[level] = run_many_games(w, h, m, runs, seed=seed, max_moves=max_moves)

    if show_plots:
        plot_level_summary(results)
        plt.show()  # type: ignore[misc]

    return results


def plot_level_summary(results: Dict[str, Dict[str, float]]) -> plt.Figure:
    """
    Draw win rate and average reaccommodations per level side by side.

    Returns:
        The created figure; the caller decides whether to show or save it.
    """
    level_names = list(results.keys())
    x = np.arange(len(level_names))

    win_rates = np.array([results[n]["win_rate"] for n in level_names])
    reaccommodations = np.array(
        [results[n]["avg_reaccommodation_count"] for n in level_names]
    )
    moves = np.array([results[n]["avg_reveal_moves_count"] for n in level_names])

    fig, (ax_win, ax_moves) = plt.subplots(1, 2, figsize=(10, 4))

    ax_win.bar(x, win_rates)
    ax_win.set_xticks(x, level_names)
    ax_win.set_ylabel("Win rate")
    ax_win.set_ylim(0.0, 1.0)
    ax_win.set_title("Random play win rate by level")

    bar_w = 0.35
    ax_moves.bar(x - bar_w / 2, moves, width=bar_w, label="reveals")
    ax_moves.bar(x + bar_w / 2, reaccommodations, width=bar_w, label="mines moved")
    ax_moves.set_xticks(x, level_names)
    ax_moves.set_ylabel("Average count per game")
    ax_moves.set_title("Reveals and reaccommodations")
    ax_moves.legend()

    fig.tight_layout()
    return fig
