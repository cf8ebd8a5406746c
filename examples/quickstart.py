"""
Quickstart example for non-deterministic Minesweeper.

This script demonstrates basic usage of the engine.
"""

from nondet_minesweeper import (
    Minesweeper,
    make_rng,
    run_many_games,
)


def main():
    print("=" * 60)
    print("Non-deterministic Minesweeper - Quickstart Example")
    print("=" * 60)

    # Example 1: Reveal a few cells on a seeded game
    print("\n1. Revealing the corners of a seeded Beginner game (9x9, 10 mines)...")
    print("-" * 60)

    game = Minesweeper(width=9, height=9, mines_count=10, rng=make_rng(2024))

    for row, col in [(0, 0), (0, 8), (8, 0), (8, 8)]:
        survived = game.reveal(row, col)
        print(f"Reveal ({row}, {col}): {'survived' if survived else 'hit a mine'}")
        if not survived:
            break

    print(f"Cells revealed: {game.revealed_count}")
    print(f"Mines moved away: {game.reaccommodation_count}")

    # Example 2: Show board state, then the solver's view of it
    print("\n2. Board state:")
    print("-" * 60)
    print(game.format_board(reveal_all=False))
    print("\nSolver states (U free, C constrained, M mine, E empty):")
    print(game.solution.format_state())

    # Example 3: Random play statistics
    print("\n3. Running 50 random-play games on Beginner...")
    print("-" * 60)

    results = run_many_games(9, 9, 10, runs=50, seed=7)

    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Average moves per game: {results['avg_reveal_moves_count']:.1f}")
    print(f"Average mines moved per game: {results['avg_reaccommodation_count']:.1f}")

    print("\n" + "=" * 60)
    print("Done! Run `python -m nondet_minesweeper` to play in the terminal.")
    print("=" * 60)


if __name__ == "__main__":
    main()
