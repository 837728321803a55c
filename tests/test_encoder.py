# tests/test_encoder.py
import pytest

from sudoku_encoder import NO_SOLUTION_MESSAGE, ConstraintEncoder, lit, var_index
from sudoku_solver import verify_solution
from sudoku_types import (
    Cage,
    Cell,
    InequalityConstraint,
    InequalityType,
    Puzzle,
    SudokuType,
)

GT = InequalityType.GREATER_THAN
LT = InequalityType.LESS_THAN


def _is_latin_with_boxes(grid):
    full = set(range(1, 10))
    rows = all(set(row) == full for row in grid)
    cols = all({grid[r][c] for r in range(9)} == full for c in range(9))
    boxes = all(
        {grid[br + dr][bc + dc] for dr in range(3) for dc in range(3)} == full
        for br in (0, 3, 6)
        for bc in (0, 3, 6)
    )
    return rows and cols and boxes


# ---------- variable mapping ----------
def test_variable_mapping_is_a_bijection():
    seen = {var_index(r, c, d) for r in range(9) for c in range(9) for d in range(1, 10)}
    assert seen == set(range(729))
    assert var_index(0, 0, 1) == 0
    assert var_index(8, 8, 9) == 728
    assert lit(0, 0, 1) == 1
    assert lit(0, 0, 1, positive=False) == -1


# ---------- standard ----------
@pytest.mark.parametrize("backend", ["g3", "z3"])
def test_empty_grid_is_solvable(backend):
    encoder = ConstraintEncoder(backend)
    solution = encoder.encode_and_solve(Puzzle())
    assert solution.solved
    assert _is_latin_with_boxes(solution.grid)


def test_empty_grid_statistics():
    encoder = ConstraintEncoder()
    encoder.encode_and_solve(Puzzle())
    assert encoder.num_variables == 729
    # 324 exactly-one groups of 9: 1 ALO + 36 pairwise AMO clauses each
    assert encoder.num_clauses == 324 * 37


@pytest.mark.parametrize("backend", ["g3", "z3"])
def test_classic_puzzle_canonical_completion(backend, wiki_puzzle, canonical_grid):
    solution = ConstraintEncoder(backend).encode_and_solve(wiki_puzzle)
    assert solution.solved
    assert solution.grid == canonical_grid
    assert solution.solve_time_ms > 0
    assert verify_solution(wiki_puzzle, solution)


@pytest.mark.parametrize("encoding", ["seq", "cardnet"])
def test_auxiliary_amo_encodings_agree(encoding, wiki_puzzle, canonical_grid):
    encoder = ConstraintEncoder(amo_encoding=encoding)
    solution = encoder.encode_and_solve(wiki_puzzle, check_uniqueness=True)
    assert solution.grid == canonical_grid
    assert solution.is_unique()
    assert encoder.num_variables > 729


def test_conflicting_givens_have_no_solution():
    puzzle = Puzzle()
    puzzle.set_cell(0, 0, 5)
    puzzle.set_cell(0, 1, 5)
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert not solution.solved
    assert solution.error_message == NO_SOLUTION_MESSAGE


def test_unknown_backend_rejected():
    with pytest.raises(ValueError):
        ConstraintEncoder("not-a-solver")


# ---------- killer ----------
def test_two_cell_cage_sum_three():
    puzzle = Puzzle()
    puzzle.add_cage(Cage([(0, 0), (0, 1)], 3))
    assert puzzle.type is SudokuType.KILLER
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert solution.solved
    assert {solution.grid[0][0], solution.grid[0][1]} == {1, 2}
    assert verify_solution(puzzle, solution)


def test_row_of_cages():
    puzzle = Puzzle()
    puzzle.add_cage(Cage([(0, 0), (0, 1)], 3))    # 1+2
    puzzle.add_cage(Cage([(0, 2), (0, 3)], 7))    # 3+4
    puzzle.add_cage(Cage([(0, 4), (0, 5)], 11))   # 5+6
    puzzle.add_cage(Cage([(0, 6), (0, 7)], 15))   # 7+8
    puzzle.add_cage(Cage([(0, 8)], 9))
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert solution.solved
    assert verify_solution(puzzle, solution)
    assert solution.grid[0][8] == 9
    assert sorted(solution.grid[0][:2]) == [1, 2]


def test_multi_combination_cage_sums_and_distinct():
    puzzle = Puzzle()
    cages = [
        Cage([(0, 0), (0, 1), (1, 0)], 15),
        Cage([(4, 4), (4, 5), (5, 4), (5, 5)], 22),
        Cage([(8, 0), (8, 1)], 10),
        Cage([(2, 6), (3, 6), (4, 6), (5, 6), (6, 6)], 20),
    ]
    for cage in cages:
        puzzle.add_cage(cage)
    encoder = ConstraintEncoder()
    solution = encoder.encode_and_solve(puzzle)
    assert solution.solved
    for cage in cages:
        values = [solution.grid[r][c] for r, c in cage.cells]
        assert sum(values) == cage.target_sum
        assert len(set(values)) == len(values)
    # one selector per combination on top of the 729 cell variables
    assert encoder.num_variables > 729


def test_cage_channels_given_into_partner():
    puzzle = Puzzle()
    puzzle.add_cage(Cage([(0, 0), (0, 1)], 10))
    puzzle.set_cell(0, 0, 1)
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert solution.solved
    assert solution.grid[0][1] == 9


def test_cage_cannot_repeat_digit():
    # 5 + 5 would be the only way with this given
    puzzle = Puzzle()
    puzzle.add_cage(Cage([(0, 0), (1, 1)], 10))
    puzzle.set_cell(0, 0, 5)
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert not solution.solved


@pytest.mark.parametrize("target", [2, 18, 1])
def test_unreachable_cage_sum_is_unsat(target):
    puzzle = Puzzle()
    puzzle.add_cage(Cage([(0, 0), (0, 1)], target))
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert not solution.solved
    assert solution.error_message == NO_SOLUTION_MESSAGE


def test_full_row_cage():
    puzzle = Puzzle()
    puzzle.add_cage(Cage([(3, c) for c in range(9)], 45))
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert solution.solved
    assert verify_solution(puzzle, solution)


def test_malformed_cage_is_skipped():
    puzzle = Puzzle()
    puzzle.add_cage(Cage([(0, 0), (0, 0)], 3))
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert solution.solved


# ---------- inequality ----------
def test_inequality_chain():
    puzzle = Puzzle()
    puzzle.add_inequality(InequalityConstraint(Cell(0, 0), Cell(0, 1), GT))
    puzzle.add_inequality(InequalityConstraint(Cell(0, 1), Cell(0, 2), GT))
    puzzle.add_inequality(InequalityConstraint(Cell(1, 0), Cell(2, 0), LT))
    assert puzzle.type is SudokuType.INEQUALITY
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert solution.solved
    g = solution.grid
    assert g[0][0] > g[0][1] > g[0][2]
    assert g[1][0] < g[2][0]
    assert verify_solution(puzzle, solution)


def test_inequality_forces_extremes():
    # eight cells of row 0 all less than (0, 0) -> it must be 9
    puzzle = Puzzle()
    for c in range(1, 9):
        puzzle.add_inequality(InequalityConstraint(Cell(0, c), Cell(0, 0), LT))
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert solution.solved
    assert solution.grid[0][0] == 9


def test_contradictory_inequalities():
    puzzle = Puzzle()
    puzzle.add_inequality(InequalityConstraint(Cell(0, 0), Cell(0, 1), GT))
    puzzle.add_inequality(InequalityConstraint(Cell(0, 0), Cell(0, 1), LT))
    assert not ConstraintEncoder().encode_and_solve(puzzle).solved


def test_inequality_against_given():
    puzzle = Puzzle()
    puzzle.set_cell(4, 4, 9)
    puzzle.add_inequality(InequalityConstraint(Cell(4, 4), Cell(4, 5), LT))
    assert not ConstraintEncoder().encode_and_solve(puzzle).solved


def test_self_inequality_is_skipped():
    puzzle = Puzzle()
    puzzle.add_inequality(InequalityConstraint(Cell(2, 2), Cell(2, 2), GT))
    assert ConstraintEncoder().encode_and_solve(puzzle).solved


# ---------- mixed ----------
def test_mixed_puzzle(wiki_puzzle, canonical_grid):
    puzzle = wiki_puzzle.copy()
    puzzle.add_cage(Cage([(0, 2), (0, 3)], 10))   # 4 + 6
    puzzle.add_inequality(InequalityConstraint(Cell(0, 0), Cell(0, 1), GT))   # 5 > 3
    assert puzzle.type is SudokuType.KILLER_INEQUALITY
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert solution.grid == canonical_grid
    assert verify_solution(puzzle, solution)


def test_mixed_without_givens():
    puzzle = Puzzle()
    puzzle.add_cage(Cage([(0, 0), (0, 1), (1, 0), (1, 1)], 10))   # 1+2+3+4 only
    puzzle.add_inequality(InequalityConstraint(Cell(0, 0), Cell(0, 1), GT))
    puzzle.add_inequality(InequalityConstraint(Cell(0, 1), Cell(1, 1), GT))
    puzzle.add_inequality(InequalityConstraint(Cell(1, 1), Cell(1, 0), GT))
    solution = ConstraintEncoder().encode_and_solve(puzzle)
    assert solution.solved
    g = solution.grid
    assert (g[0][0], g[0][1], g[1][1], g[1][0]) == (4, 3, 2, 1)
