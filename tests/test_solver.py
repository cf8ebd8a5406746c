from typing import Dict, Tuple

import numpy as np
import pytest

from nondet_minesweeper.components import ComponentCache
from nondet_minesweeper.search import satisfies
from nondet_minesweeper.solver import PartialSolution
from nondet_minesweeper.states import CONSTRAINED, EMPTY, MINE, UNCONSTRAINED


class Recorder:
    """Collects commit callbacks as {cell: is_mine}."""

    def __init__(self) -> None:
        self.commits: Dict[Tuple[int, int], bool] = {}

    def __call__(self, row: int, col: int, is_mine: bool) -> None:
        assert (row, col) not in self.commits
        self.commits[(row, col)] = is_mine


def one_two_one_row() -> PartialSolution:
    """
    Top row of a 5x2 board revealed as 1 1 2 1 1.

    No single clue forces anything, but the only consistent layout has mines
    at (1, 1) and (1, 3).
    """
    solution = PartialSolution(5, 2, 2)
    for col, clue in enumerate([1, 1, 2, 1, 1]):
        solution.add_clue((0, col), clue)
    solution.find_graph_solutions()
    return solution


class TestAddClue:
    def test_zero_clue_frees_all_neighbors(self):
        solution = PartialSolution(3, 3, 0)
        solution.add_clue((1, 1), 0)

        assert solution.state(1, 1) == 0
        for row in range(3):
            for col in range(3):
                if (row, col) != (1, 1):
                    assert solution.state(row, col) == EMPTY
        assert solution.unconstrained_count == 0

    def test_saturated_clue_marks_all_neighbors_as_mines(self):
        solution = PartialSolution(3, 3, 8)
        solution.add_clue((1, 1), 8)

        assert solution.state(1, 1) == 0
        assert solution.remaining_mine_count == 0
        assert sum(
            solution.state(r, c) == MINE for r in range(3) for c in range(3)
        ) == 8

    def test_neighbors_become_constrained(self):
        solution = PartialSolution(5, 1, 2)
        solution.add_clue((0, 2), 1)

        assert solution.state(0, 1) == CONSTRAINED
        assert solution.state(0, 3) == CONSTRAINED
        assert solution.state(0, 0) == UNCONSTRAINED
        assert solution.unconstrained_count == 2
        assert solution.remaining_mine_count == 2

    def test_known_mines_reduce_the_owed_count(self):
        solution = PartialSolution(3, 1, 1)
        solution.add_clue((0, 0), 1)
        assert solution.state(0, 1) == MINE

        solution.add_clue((0, 2), 1)
        assert solution.state(0, 2) == 0

    def test_revealing_a_constrained_cell_propagates_first(self):
        solution = PartialSolution(4, 1, 2)
        solution.add_clue((0, 1), 1)
        solution.add_clue((0, 0), 0)

        assert solution.state(0, 0) == 0
        assert solution.state(0, 1) == 0
        assert solution.state(0, 2) == MINE
        assert solution.state(0, 3) == UNCONSTRAINED
        assert solution.remaining_mine_count == 1
        assert solution.unconstrained_count == 1

    def test_clues_never_leave_zero_to_eight(self):
        solution = one_two_one_row()
        for states in solution.grid.rows():
            for state in states:
                if isinstance(state, int):
                    assert 0 <= state <= 8


class TestContractViolations:
    def test_clue_on_revealed_cell(self):
        solution = PartialSolution(3, 3, 0)
        solution.add_clue((1, 1), 0)
        with pytest.raises(RuntimeError):
            solution.add_clue((1, 1), 0)

    def test_clue_on_known_mine(self):
        solution = PartialSolution(3, 1, 1)
        solution.add_clue((0, 0), 1)
        with pytest.raises(RuntimeError):
            solution.add_clue((0, 1), 0)

    @pytest.mark.parametrize("clue", [-1, 9])
    def test_clue_out_of_range(self, clue):
        with pytest.raises(ValueError):
            PartialSolution(3, 3, 1).add_clue((1, 1), clue)

    def test_clue_larger_than_open_neighbors(self):
        with pytest.raises(RuntimeError):
            PartialSolution(2, 1, 1).add_clue((0, 0), 2)

    def test_more_deduced_mines_than_budget(self):
        with pytest.raises(RuntimeError):
            PartialSolution(3, 1, 0).add_clue((0, 0), 1)

    def test_cell_cannot_return_to_unconstrained(self):
        solution = PartialSolution(5, 1, 1)
        solution.add_clue((0, 2), 1)
        with pytest.raises(RuntimeError):
            solution.grid.set(0, 1, UNCONSTRAINED)

    def test_too_many_mines_for_board(self):
        with pytest.raises(ValueError):
            PartialSolution(2, 2, 5)


class TestComponents:
    def test_single_component_alternatives(self):
        solution = PartialSolution(5, 1, 2)
        solution.add_clue((0, 2), 1)
        solution.find_graph_solutions()

        components = list(solution.components)
        assert len(components) == 1
        assert set(components[0].tile_map) == {(0, 1), (0, 3)}
        assert len(components[0].alternatives) == 2
        assert solution.min_component_mines() == 1

    def test_unique_layout_found_beyond_single_clue_deduction(self):
        solution = one_two_one_row()

        assert all(solution.state(1, col) == CONSTRAINED for col in range(5))
        components = list(solution.components)
        assert len(components) == 1
        (alternative,) = components[0].alternatives
        mines = {cell for cell, is_mine in components[0].cells_of(alternative) if is_mine}
        assert mines == {(1, 1), (1, 3)}

    def test_alternatives_satisfy_their_topology(self):
        solution = one_two_one_row()
        for component in solution.components:
            for alternative in component.alternatives:
                assert satisfies(component.topology, alternative)

    def test_each_constrained_cell_has_one_owner(self):
        solution = PartialSolution(7, 1, 3)
        solution.add_clue((0, 1), 1)
        solution.add_clue((0, 5), 1)
        solution.find_graph_solutions()

        assert len(solution.components) == 2
        first = solution.components.component_of((0, 0))
        second = solution.components.component_of((0, 6))
        assert first is not None and second is not None
        assert first is not second
        assert solution.components.component_of((0, 3)) is None

    def test_format_state(self):
        solution = PartialSolution(5, 1, 2)
        solution.add_clue((0, 2), 1)
        solution.find_graph_solutions()
        assert solution.format_state() == "U010U"


class TestTryMakeSafe:
    def test_constrained_target_keeps_matching_alternative(self):
        solution = PartialSolution(5, 1, 2)
        solution.add_clue((0, 2), 1)
        solution.find_graph_solutions()
        recorder = Recorder()

        assert solution.try_make_safe([(0, 1)], recorder, np.random.default_rng(0))

        assert recorder.commits[(0, 1)] is False
        assert recorder.commits[(0, 3)] is True
        assert recorder.commits[(0, 0)] + recorder.commits[(0, 4)] == 1
        assert sum(recorder.commits.values()) == 2

    def test_forced_mine_cannot_be_made_safe(self):
        solution = one_two_one_row()
        assert not solution.try_make_safe([(1, 1)], Recorder(), np.random.default_rng(0))

    def test_forced_layout_is_committed(self):
        solution = one_two_one_row()
        recorder = Recorder()

        assert solution.try_make_safe([(1, 0)], recorder, np.random.default_rng(0))
        assert recorder.commits == {
            (1, 0): False,
            (1, 1): True,
            (1, 2): False,
            (1, 3): True,
            (1, 4): False,
        }

    def test_known_mine_fails(self):
        solution = PartialSolution(3, 1, 1)
        solution.add_clue((0, 0), 1)
        solution.find_graph_solutions()
        assert not solution.try_make_safe([(0, 1)], Recorder(), np.random.default_rng(0))

    def test_revealed_target_is_a_contract_violation(self):
        solution = PartialSolution(3, 3, 0)
        solution.add_clue((1, 1), 0)
        with pytest.raises(RuntimeError):
            solution.try_make_safe([(1, 1)], Recorder(), np.random.default_rng(0))

    def test_free_target_moves_its_mine_into_the_pool(self):
        solution = PartialSolution(3, 3, 1)
        recorder = Recorder()

        assert solution.try_make_safe([(1, 1)], recorder, np.random.default_rng(0))

        assert recorder.commits.pop((1, 1)) is False
        assert len(recorder.commits) == 8
        assert sum(recorder.commits.values()) == 1
        assert solution.state(1, 1) == EMPTY
        assert solution.unconstrained_count == 8

    def test_no_free_cell_left_for_the_mine(self):
        solution = PartialSolution(1, 1, 1)
        assert not solution.try_make_safe([(0, 0)], Recorder(), np.random.default_rng(0))

    def test_same_seed_same_layout(self):
        layouts = []
        for _ in range(2):
            solution = PartialSolution(6, 6, 10)
            solution.add_clue((0, 0), 1)
            solution.find_graph_solutions()
            recorder = Recorder()
            assert solution.try_make_safe([(1, 1)], recorder, np.random.default_rng(42))
            layouts.append(recorder.commits)
        assert layouts[0] == layouts[1]


def shared_pair_board(mines_count: int) -> PartialSolution:
    """
    3x2 board with clues 1 at (0, 0) and (0, 2), and no free cells.

    The component's alternatives are a single mine at (0, 1) or (1, 1), or
    two mines at (1, 0) and (1, 2).
    """
    solution = PartialSolution(3, 2, mines_count)
    solution.add_clue((0, 0), 1)
    solution.add_clue((0, 2), 1)
    solution.find_graph_solutions()
    return solution


class TestMineBudget:
    def test_alternatives_span_two_mine_counts(self):
        solution = shared_pair_board(2)
        (component,) = solution.components
        assert sorted(sum(alt) for alt in component.alternatives) == [1, 1, 2]
        assert solution.unconstrained_count == 0

    @pytest.mark.parametrize("seed", range(4))
    def test_only_the_count_within_budget_is_chosen(self, seed):
        solution = shared_pair_board(1)
        recorder = Recorder()

        assert solution.try_make_safe([(0, 1)], recorder, np.random.default_rng(seed))
        assert recorder.commits == {
            (0, 1): False,
            (1, 0): False,
            (1, 1): True,
            (1, 2): False,
        }

    @pytest.mark.parametrize("seed", range(4))
    def test_mines_without_free_cells_must_sit_in_the_component(self, seed):
        solution = shared_pair_board(2)
        recorder = Recorder()

        assert solution.try_make_safe([(0, 1)], recorder, np.random.default_rng(seed))
        assert recorder.commits == {
            (0, 1): False,
            (1, 0): True,
            (1, 1): False,
            (1, 2): True,
        }

    def test_no_count_fits_the_budget(self):
        assert not shared_pair_board(0).try_make_safe(
            [(1, 0)], Recorder(), np.random.default_rng(0)
        )


def test_component_cache_requires_every_operation():
    class RebuildOnly(ComponentCache):
        def rebuild(self, solution):
            pass

    with pytest.raises(TypeError):
        RebuildOnly()
