# sudoku_solver.py
# High-level entry points: solve a puzzle through the SAT encoder and
# verify a solution independently of the encoding.

import logging
from typing import List, Sequence

from sudoku_encoder import ConstraintEncoder
from sudoku_format import parse_file, parse_puzzle
from sudoku_oracle import DEFAULT_BACKEND
from sudoku_types import (
    BOX_SIZE,
    GRID_SIZE,
    MAX_VALUE,
    MIN_VALUE,
    Puzzle,
    Solution,
)

logger = logging.getLogger(__name__)


class SudokuSolver:
    """Solves standard, killer, inequality and mixed puzzles via SAT."""

    def __init__(self, backend: str = DEFAULT_BACKEND, *, amo_encoding: str = "pairwise"):
        self.encoder = ConstraintEncoder(backend, amo_encoding=amo_encoding)

    def solve(self, puzzle: Puzzle, check_uniqueness: bool = False) -> Solution:
        return self.encoder.encode_and_solve(puzzle, check_uniqueness)

    def solve_from_string(self, text: str, check_uniqueness: bool = False) -> Solution:
        return self.solve(parse_puzzle(text), check_uniqueness)

    def solve_from_file(self, path: str, check_uniqueness: bool = False) -> Solution:
        return self.solve(parse_file(path), check_uniqueness)

    # statistics of the last encode
    @property
    def num_variables(self) -> int:
        return self.encoder.num_variables

    @property
    def num_clauses(self) -> int:
        return self.encoder.num_clauses

    @staticmethod
    def verify_solution(puzzle: Puzzle, solution: Solution) -> bool:
        return verify_solution(puzzle, solution)


def solve(puzzle: Puzzle, check_uniqueness: bool = False, *, backend: str = DEFAULT_BACKEND) -> Solution:
    return SudokuSolver(backend).solve(puzzle, check_uniqueness)


# ---------- verification (no SAT involved) ----------
def _all_distinct(values: Sequence[int]) -> bool:
    return len(set(values)) == len(values)


def _verify_basic(grid: List[List[int]]) -> bool:
    if len(grid) != GRID_SIZE or any(len(row) != GRID_SIZE for row in grid):
        return False
    for row in grid:
        for v in row:
            if not (MIN_VALUE <= v <= MAX_VALUE):
                return False
    for r in range(GRID_SIZE):
        if not _all_distinct(grid[r]):
            return False
    for c in range(GRID_SIZE):
        if not _all_distinct([grid[r][c] for r in range(GRID_SIZE)]):
            return False
    for br in range(0, GRID_SIZE, BOX_SIZE):
        for bc in range(0, GRID_SIZE, BOX_SIZE):
            box = [grid[br + dr][bc + dc] for dr in range(BOX_SIZE) for dc in range(BOX_SIZE)]
            if not _all_distinct(box):
                return False
    return True


def _verify_givens(puzzle: Puzzle, grid: List[List[int]]) -> bool:
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            given = puzzle.grid[r][c]
            if MIN_VALUE <= given <= MAX_VALUE and grid[r][c] != given:
                return False
    return True


def _verify_cages(puzzle: Puzzle, grid: List[List[int]]) -> bool:
    for cage in puzzle.cages:
        if not cage.is_well_formed():
            continue   # never encoded either
        values = [grid[r][c] for r, c in cage.cells]
        if not _all_distinct(values) or sum(values) != cage.target_sum:
            return False
    return True


def _verify_inequalities(puzzle: Puzzle, grid: List[List[int]]) -> bool:
    for ineq in puzzle.inequalities:
        if not ineq.is_valid():
            continue
        (r1, c1), (r2, c2) = ineq.cell1, ineq.cell2
        if not ineq.holds(grid[r1][c1], grid[r2][c2]):
            return False
    return True


def verify_solution(puzzle: Puzzle, solution: Solution) -> bool:
    """
    Re-check a solution against every rule of the puzzle without the SAT encoding:
    rows/columns/boxes, givens, cage sums and distinctness, inequalities.
    """
    if not solution.solved:
        return False
    grid = solution.grid
    if not _verify_basic(grid):
        logger.debug("verification failed: row/column/box rules")
        return False
    if not _verify_givens(puzzle, grid):
        logger.debug("verification failed: givens")
        return False
    if puzzle.has_killer_constraints() and not _verify_cages(puzzle, grid):
        logger.debug("verification failed: cages")
        return False
    if puzzle.has_inequality_constraints() and not _verify_inequalities(puzzle, grid):
        logger.debug("verification failed: inequalities")
        return False
    return True
