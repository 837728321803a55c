# sudoku_types.py
# Value types shared by the encoder, solver and generator:
# cells, cages, inequalities, puzzles and solutions.

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Tuple

# ---------- grid constants ----------
GRID_SIZE = 9
BOX_SIZE = 3
MIN_VALUE = 1
MAX_VALUE = 9
EMPTY_CELL = 0

Grid = List[List[int]]


def empty_grid() -> Grid:
    return [[EMPTY_CELL] * GRID_SIZE for _ in range(GRID_SIZE)]


class Cell(NamedTuple):
    """Grid position; tuple ordering gives row-major order."""
    row: int
    col: int

    def is_valid(self) -> bool:
        return 0 <= self.row < GRID_SIZE and 0 <= self.col < GRID_SIZE


def cage_sum_range(n: int) -> Tuple[int, int]:
    """Smallest and largest sum of n distinct digits 1..9."""
    return n * (n + 1) // 2, n * (19 - n) // 2


@dataclass(frozen=True)
class Cage:
    """
    Killer cage: the cells must hold distinct digits adding up to target_sum.
    Valid iff the sum is reachable by len(cells) distinct digits.
    """
    cells: Tuple[Cell, ...]
    target_sum: int

    def __post_init__(self):
        object.__setattr__(self, "cells", tuple(Cell(r, c) for r, c in self.cells))
        object.__setattr__(self, "target_sum", int(self.target_sum))

    def is_valid(self) -> bool:
        if not self.cells or self.target_sum < 1:
            return False
        lo, hi = cage_sum_range(len(self.cells))
        return lo <= self.target_sum <= hi

    def is_well_formed(self) -> bool:
        """Non-empty, on the grid, no repeated cell (sum not considered)."""
        return (
            bool(self.cells)
            and all(cell.is_valid() for cell in self.cells)
            and len(set(self.cells)) == len(self.cells)
        )


class InequalityType(Enum):
    GREATER_THAN = ">"   # cell1 > cell2
    LESS_THAN = "<"      # cell1 < cell2


@dataclass(frozen=True)
class InequalityConstraint:
    cell1: Cell
    cell2: Cell
    type: InequalityType = InequalityType.GREATER_THAN

    def __post_init__(self):
        object.__setattr__(self, "cell1", Cell(*self.cell1))
        object.__setattr__(self, "cell2", Cell(*self.cell2))

    def is_valid(self) -> bool:
        return self.cell1.is_valid() and self.cell2.is_valid() and self.cell1 != self.cell2

    def holds(self, v1: int, v2: int) -> bool:
        if self.type is InequalityType.GREATER_THAN:
            return v1 > v2
        return v1 < v2


class SudokuType(Enum):
    STANDARD = "Standard Sudoku"
    KILLER = "Killer Sudoku"
    INEQUALITY = "Inequality Sudoku"
    KILLER_INEQUALITY = "Killer + Inequality Sudoku"

    @property
    def has_cages(self) -> bool:
        return self in (SudokuType.KILLER, SudokuType.KILLER_INEQUALITY)

    @property
    def has_inequalities(self) -> bool:
        return self in (SudokuType.INEQUALITY, SudokuType.KILLER_INEQUALITY)


def _check_position(row: int, col: int) -> bool:
    return 0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE


@dataclass
class Puzzle:
    """
    A 9x9 grid of givens (0 = empty) plus optional cages and inequalities.
    The puzzle type is derived from which constraint kinds are present.
    """
    grid: Grid = field(default_factory=empty_grid)
    cages: List[Cage] = field(default_factory=list)
    inequalities: List[InequalityConstraint] = field(default_factory=list)

    @property
    def type(self) -> SudokuType:
        if self.cages and self.inequalities:
            return SudokuType.KILLER_INEQUALITY
        if self.cages:
            return SudokuType.KILLER
        if self.inequalities:
            return SudokuType.INEQUALITY
        return SudokuType.STANDARD

    def has_killer_constraints(self) -> bool:
        return bool(self.cages)

    def has_inequality_constraints(self) -> bool:
        return bool(self.inequalities)

    def add_cage(self, cage: Cage) -> None:
        self.cages.append(cage)

    def add_inequality(self, ineq: InequalityConstraint) -> None:
        self.inequalities.append(ineq)

    def get_cell(self, row: int, col: int) -> int:
        if _check_position(row, col):
            return self.grid[row][col]
        return EMPTY_CELL

    def set_cell(self, row: int, col: int, value: int) -> None:
        if _check_position(row, col):
            self.grid[row][col] = value

    def given_cells(self) -> List[Cell]:
        return [
            Cell(r, c)
            for r in range(GRID_SIZE)
            for c in range(GRID_SIZE)
            if self.grid[r][c] != EMPTY_CELL
        ]

    def copy(self) -> "Puzzle":
        return Puzzle(
            grid=[row[:] for row in self.grid],
            cages=list(self.cages),
            inequalities=list(self.inequalities),
        )


class UniquenessStatus(Enum):
    NOT_CHECKED = "not_checked"
    UNIQUE = "unique"
    NOT_UNIQUE = "not_unique"


@dataclass
class Solution:
    grid: Grid = field(default_factory=empty_grid)
    solved: bool = False
    error_message: str = ""
    solve_time_ms: float = 0.0
    uniqueness: UniquenessStatus = UniquenessStatus.NOT_CHECKED

    def is_unique(self) -> bool:
        return self.uniqueness is UniquenessStatus.UNIQUE

    def uniqueness_checked(self) -> bool:
        return self.uniqueness is not UniquenessStatus.NOT_CHECKED

    def get_cell(self, row: int, col: int) -> int:
        if _check_position(row, col):
            return self.grid[row][col]
        return EMPTY_CELL

    def set_cell(self, row: int, col: int, value: int) -> None:
        if _check_position(row, col):
            self.grid[row][col] = value
