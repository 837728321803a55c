# tests/test_uniqueness.py
import pytest

from conftest import WIKI_PUZZLE
from sudoku_types import (
    Cage,
    Cell,
    InequalityConstraint,
    InequalityType,
    Puzzle,
    UniquenessStatus,
)

# Cells (3,5)=1 (3,8)=3 (4,5)=3 (4,8)=1 of the canonical grid form a swappable rectangle.
DEADLY = [(3, 5), (3, 8), (4, 5), (4, 8)]


def _puzzle_from_grid(grid, blanks=()):
    puzzle = Puzzle()
    for r in range(9):
        for c in range(9):
            puzzle.set_cell(r, c, grid[r][c])
    for r, c in blanks:
        puzzle.set_cell(r, c, 0)
    return puzzle


def test_classic_puzzle_is_unique(solver):
    solution = solver.solve_from_string(WIKI_PUZZLE, check_uniqueness=True)
    assert solution.solved
    assert solution.uniqueness is UniquenessStatus.UNIQUE
    assert solution.is_unique()


def test_not_checked_unless_requested(solver):
    solution = solver.solve_from_string(WIKI_PUZZLE)
    assert solution.solved
    assert solution.uniqueness is UniquenessStatus.NOT_CHECKED
    assert not solution.uniqueness_checked()
    assert not solution.is_unique()


def test_empty_grid_is_not_unique(solver):
    solution = solver.solve(Puzzle(), check_uniqueness=True)
    assert solution.solved
    assert solution.uniqueness is UniquenessStatus.NOT_UNIQUE


def test_single_row_is_not_unique(solver):
    text = "0" * 72 + "123456780"
    solution = solver.solve_from_string(text, check_uniqueness=True)
    assert solution.solved
    assert solution.grid[8] == [1, 2, 3, 4, 5, 6, 7, 8, 9]
    assert solution.uniqueness is UniquenessStatus.NOT_UNIQUE


def test_one_blank_cell_is_unique(solver, canonical_grid):
    puzzle = _puzzle_from_grid(canonical_grid, blanks=[(0, 0)])
    solution = solver.solve(puzzle, check_uniqueness=True)
    assert solution.grid == canonical_grid
    assert solution.is_unique()


def test_swappable_rectangle_is_not_unique(solver, canonical_grid):
    puzzle = _puzzle_from_grid(canonical_grid, blanks=DEADLY)
    solution = solver.solve(puzzle, check_uniqueness=True)
    assert solution.solved
    assert solution.uniqueness is UniquenessStatus.NOT_UNIQUE


def test_cage_resolves_rectangle(solver, canonical_grid):
    puzzle = _puzzle_from_grid(canonical_grid, blanks=DEADLY)
    puzzle.add_cage(Cage([(3, 5)], 1))
    solution = solver.solve(puzzle, check_uniqueness=True)
    assert solution.grid == canonical_grid
    assert solution.uniqueness is UniquenessStatus.UNIQUE


def test_inequality_resolves_rectangle(solver, canonical_grid):
    puzzle = _puzzle_from_grid(canonical_grid, blanks=DEADLY)
    puzzle.add_inequality(InequalityConstraint(Cell(3, 5), Cell(3, 8), InequalityType.LESS_THAN))
    solution = solver.solve(puzzle, check_uniqueness=True)
    assert solution.grid == canonical_grid
    assert solution.uniqueness is UniquenessStatus.UNIQUE


def test_unsolvable_puzzle_is_not_checked(solver):
    solution = solver.solve_from_string("55" + "0" * 79, check_uniqueness=True)
    assert not solution.solved
    assert solution.uniqueness is UniquenessStatus.NOT_CHECKED
    assert solution.error_message


@pytest.mark.parametrize("backend", ["m22", "z3"])
def test_uniqueness_on_other_backends(backend, canonical_grid):
    from sudoku_solver import SudokuSolver

    solver = SudokuSolver(backend)
    unique = solver.solve(_puzzle_from_grid(canonical_grid, blanks=[(8, 8)]), check_uniqueness=True)
    ambiguous = solver.solve(_puzzle_from_grid(canonical_grid, blanks=DEADLY), check_uniqueness=True)
    assert unique.is_unique()
    assert ambiguous.uniqueness is UniquenessStatus.NOT_UNIQUE


def test_solve_time_recorded(solver):
    solution = solver.solve_from_string(WIKI_PUZZLE, check_uniqueness=True)
    assert solution.solve_time_ms > 0
