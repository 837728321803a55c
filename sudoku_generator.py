# sudoku_generator.py
# Generate standard / killer / inequality / mixed puzzles with the SAT solver:
#   1) random complete grid
#   2) cages, inequalities and givens read off that grid
#   3) add constraints until the solution is unique
#   4) greedily drop constraints that uniqueness does not need

import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

from sudoku_solver import SudokuSolver
from sudoku_types import (
    BOX_SIZE,
    EMPTY_CELL,
    GRID_SIZE,
    MAX_VALUE,
    MIN_VALUE,
    Cage,
    Cell,
    Grid,
    InequalityConstraint,
    InequalityType,
    Puzzle,
    Solution,
    SudokuType,
    UniquenessStatus,
)

logger = logging.getLogger(__name__)

SEED_DIGITS = 11               # random givens placed before completing a grid
MAX_CONSTRAINT_ATTEMPTS = 10   # batches of extra inequalities/givens
MAX_GIVENS_TO_ADD = GRID_SIZE * GRID_SIZE
MAX_CAGE_GROWTH_STEPS = 100
INEQUALITY_BATCH = 5
GIVEN_BATCH = 3

KIND_NAMES = {
    "standard": SudokuType.STANDARD,
    "killer": SudokuType.KILLER,
    "inequality": SudokuType.INEQUALITY,
    "mixed": SudokuType.KILLER_INEQUALITY,
}


@dataclass
class GeneratorConfig:
    """
    What to generate.
    - type: which constraint kinds the puzzle carries
    - min/max_*: inclusive ranges drawn from with the generator's RNG
    - seed: None for a fresh random seed, otherwise runs are reproducible
    - ensure_unique: add constraints until the solution is unique, then minimize
    - fill_all_cells: cages tile the whole grid (min/max_cages ignored)
    - difficulty: 0-100, share of constraints tried for removal during minimization
    """
    type: SudokuType = SudokuType.KILLER_INEQUALITY
    min_cages: int = 15
    max_cages: int = 25
    min_cage_size: int = 2
    max_cage_size: int = 5
    min_inequalities: int = 20
    max_inequalities: int = 40
    min_givens: int = 0
    max_givens: int = 0
    seed: Optional[int] = None
    ensure_unique: bool = True
    fill_all_cells: bool = False
    difficulty: int = 100

    def __post_init__(self):
        for lo, hi in (
            ("min_cages", "max_cages"),
            ("min_cage_size", "max_cage_size"),
            ("min_inequalities", "max_inequalities"),
            ("min_givens", "max_givens"),
        ):
            a, b = getattr(self, lo), getattr(self, hi)
            if a < 0 or b < 0:
                raise ValueError(f"{lo}/{hi} must be non-negative (got {a}, {b})")
            if a > b:
                raise ValueError(f"{lo} must not exceed {hi} (got {a} > {b})")
        if not (1 <= self.min_cage_size and self.max_cage_size <= MAX_VALUE):
            raise ValueError(f"Cage sizes must be within 1..{MAX_VALUE}")
        if self.max_givens > GRID_SIZE * GRID_SIZE:
            raise ValueError("max_givens cannot exceed 81")
        if not (0 <= self.difficulty <= 100):
            raise ValueError(f"difficulty must be within 0..100 (got {self.difficulty})")

    @classmethod
    def preset(cls, kind: str = "mixed", difficulty: int = 50, seed: Optional[int] = None,
               **overrides) -> "GeneratorConfig":
        """
        Config for a kind name ("standard", "killer", "inequality", "mixed").
        Standard puzzles take their givens range from the difficulty:
        40 givens at 0 down to 20 at 100, never below 17.
        """
        if kind not in KIND_NAMES:
            raise ValueError(f"Unknown puzzle kind: {kind!r}")
        difficulty = max(0, min(100, difficulty))
        params = dict(type=KIND_NAMES[kind], difficulty=difficulty, seed=seed)
        if kind == "standard":
            base = 40 - int(20 * difficulty / 100)
            params.update(min_cages=0, max_cages=0, min_inequalities=0, max_inequalities=0,
                          min_givens=max(17, base - 5), max_givens=base)
        elif kind == "killer":
            params.update(min_inequalities=0, max_inequalities=0)
        elif kind == "inequality":
            params.update(min_cages=0, max_cages=0)
        params.update(overrides)
        return cls(**params)


# ---------- step 1: complete grid ----------
def _placeable(grid: Grid, row: int, col: int, value: int) -> bool:
    if any(grid[row][c] == value for c in range(GRID_SIZE)):
        return False
    if any(grid[r][col] == value for r in range(GRID_SIZE)):
        return False
    br, bc = row - row % BOX_SIZE, col - col % BOX_SIZE
    for r in range(br, br + BOX_SIZE):
        for c in range(bc, bc + BOX_SIZE):
            if grid[r][c] == value:
                return False
    return True


def random_seed_puzzle(rng: random.Random, count: int = SEED_DIGITS) -> Puzzle:
    """Empty puzzle with `count` random digits that break no row/column/box rule."""
    puzzle = Puzzle()
    candidates = [
        (r, c, v)
        for r in range(GRID_SIZE)
        for c in range(GRID_SIZE)
        for v in range(MIN_VALUE, MAX_VALUE + 1)
    ]
    rng.shuffle(candidates)
    placed = 0
    for r, c, v in candidates:
        if placed >= count:
            break
        if puzzle.grid[r][c] != EMPTY_CELL:
            continue
        if _placeable(puzzle.grid, r, c, v):
            puzzle.grid[r][c] = v
            placed += 1
    return puzzle


def random_complete_grid(solver: SudokuSolver, rng: random.Random) -> Solution:
    """
    A random valid filled grid. The solver is deterministic, so the
    randomness comes from the seeded digits it has to complete.
    """
    solution = solver.solve(random_seed_puzzle(rng))
    if not solution.solved:
        logger.warning("random seed digits were unsatisfiable, completing an empty grid")
        solution = solver.solve(Puzzle())
    return solution


# ---------- step 2: constraints from the grid ----------
def adjacent_cells(cell: Cell) -> List[Cell]:
    out = []
    for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
        nxt = Cell(cell.row + dr, cell.col + dc)
        if nxt.is_valid():
            out.append(nxt)
    return out


def grow_cage(grid: Grid, used: Set[Cell], target_size: int, rng: random.Random) -> List[Cell]:
    """
    Grow a 4-connected cage from a random unused cell.

    Each step picks a random unused neighbour of the cage and keeps it only if
    its digit is not already in the cage. Cells taken are added to `used`.
    """
    available = [
        Cell(r, c) for r in range(GRID_SIZE) for c in range(GRID_SIZE) if Cell(r, c) not in used
    ]
    if not available:
        return []

    start = rng.choice(available)
    cage = [start]
    used.add(start)
    digits = {grid[start.row][start.col]}

    steps = 0
    while len(cage) < target_size and steps < MAX_CAGE_GROWTH_STEPS:
        steps += 1
        neighbors: List[Cell] = []
        for cell in cage:
            for adj in adjacent_cells(cell):
                if adj not in used and adj not in neighbors:
                    neighbors.append(adj)
        if not neighbors:
            break
        nxt = rng.choice(neighbors)
        value = grid[nxt.row][nxt.col]
        if value in digits:
            # left free for a later cage
            continue
        cage.append(nxt)
        used.add(nxt)
        digits.add(value)
    return cage


def cage_sum(grid: Grid, cells: Sequence[Cell]) -> int:
    return sum(grid[r][c] for r, c in cells)


def generate_cages(puzzle: Puzzle, grid: Grid, num_cages: int, min_size: int, max_size: int,
                   rng: random.Random) -> None:
    """Add up to `num_cages` disjoint cages; cages that end up smaller than 2 cells are dropped."""
    used: Set[Cell] = {cell for cage in puzzle.cages for cell in cage.cells}
    for _ in range(num_cages):
        target_size = rng.randint(min_size, max_size)
        cells = grow_cage(grid, used, target_size, rng)
        if len(cells) >= 2:
            puzzle.add_cage(Cage(cells, cage_sum(grid, cells)))


def generate_cages_filling_all(puzzle: Puzzle, grid: Grid, min_size: int, max_size: int,
                               rng: random.Random) -> None:
    """Keep adding cages until every cell is covered; leftovers become single-cell cages."""
    used: Set[Cell] = {cell for cage in puzzle.cages for cell in cage.cells}
    total = GRID_SIZE * GRID_SIZE
    while len(used) < total:
        target_size = rng.randint(min_size, max_size)
        remaining = total - len(used)
        if target_size > remaining:
            target_size = remaining
        cells = grow_cage(grid, used, target_size, rng)
        if not cells:
            break
        puzzle.add_cage(Cage(cells, cage_sum(grid, cells)))


def adjacent_pairs() -> List[Tuple[Cell, Cell]]:
    pairs = []
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            if c + 1 < GRID_SIZE:
                pairs.append((Cell(r, c), Cell(r, c + 1)))
            if r + 1 < GRID_SIZE:
                pairs.append((Cell(r, c), Cell(r + 1, c)))
    return pairs


def generate_inequalities(puzzle: Puzzle, grid: Grid, count: int, rng: random.Random) -> None:
    """Add up to `count` new inequalities between neighbouring cells, oriented by the grid."""
    existing = {frozenset((i.cell1, i.cell2)) for i in puzzle.inequalities}
    pairs = adjacent_pairs()
    rng.shuffle(pairs)
    added = 0
    for c1, c2 in pairs:
        if added >= count:
            break
        if frozenset((c1, c2)) in existing:
            continue
        v1, v2 = grid[c1.row][c1.col], grid[c2.row][c2.col]
        if v1 == v2:
            continue
        kind = InequalityType.GREATER_THAN if v1 > v2 else InequalityType.LESS_THAN
        puzzle.add_inequality(InequalityConstraint(c1, c2, kind))
        added += 1


def add_givens(puzzle: Puzzle, grid: Grid, count: int, rng: random.Random) -> int:
    """Reveal up to `count` random empty cells; returns how many were revealed."""
    empty = [
        Cell(r, c)
        for r in range(GRID_SIZE)
        for c in range(GRID_SIZE)
        if puzzle.grid[r][c] == EMPTY_CELL
    ]
    rng.shuffle(empty)
    chosen = empty[:count]
    for r, c in chosen:
        puzzle.grid[r][c] = grid[r][c]
    return len(chosen)


# ---------- step 3: uniqueness ----------
def has_unique_solution(solver: SudokuSolver, puzzle: Puzzle) -> bool:
    result = solver.solve(puzzle, check_uniqueness=True)
    return result.solved and result.is_unique()


def enforce_uniqueness(solver: SudokuSolver, puzzle: Puzzle, grid: Grid, kind: SudokuType,
                       rng: random.Random) -> bool:
    """
    Add constraints derived from `grid` until the puzzle has one solution.
    Returns False only if the attempt ceilings ran out first.
    """
    result = solver.solve(puzzle, check_uniqueness=True)

    attempts = 0
    while result.solved and not result.is_unique() and attempts < MAX_CONSTRAINT_ATTEMPTS:
        if kind.has_inequalities:
            generate_inequalities(puzzle, grid, INEQUALITY_BATCH, rng)
        else:
            add_givens(puzzle, grid, GIVEN_BATCH, rng)
        result = solver.solve(puzzle, check_uniqueness=True)
        attempts += 1
        logger.debug("uniqueness batch %d: %s", attempts, result.uniqueness.value)

    givens_added = 0
    while result.solved and not result.is_unique() and givens_added < MAX_GIVENS_TO_ADD:
        if not add_givens(puzzle, grid, 1, rng):
            break
        result = solver.solve(puzzle, check_uniqueness=True)
        givens_added += 1
    if givens_added:
        logger.debug("added %d single givens to reach uniqueness", givens_added)

    return result.solved and result.is_unique()


# ---------- step 4: minimization ----------
def _attempt_count(n: int, difficulty: int) -> int:
    return min(n, math.ceil(n * difficulty / 100))


def _minimize_list(solver: SudokuSolver, puzzle: Puzzle, attr: str, difficulty: int,
                   rng: random.Random) -> int:
    original = list(getattr(puzzle, attr))
    order = list(range(len(original)))
    rng.shuffle(order)
    removed = [False] * len(original)

    def keep(skip: int = -1) -> list:
        return [x for i, x in enumerate(original) if not removed[i] and i != skip]

    for idx in order[:_attempt_count(len(order), difficulty)]:
        setattr(puzzle, attr, keep(idx))
        if has_unique_solution(solver, puzzle):
            removed[idx] = True
        else:
            setattr(puzzle, attr, keep())
    setattr(puzzle, attr, keep())
    return sum(removed)


def minimize_constraints(solver: SudokuSolver, puzzle: Puzzle, rng: random.Random,
                         difficulty: int = 100) -> None:
    """
    One randomized greedy pass: try dropping each inequality, then each cage,
    then each given, keeping a removal only if the puzzle stays uniquely solvable.

    The pass is not repeated, so the result is locally minimal with respect to
    the order tried: a constraint kept early is not re-examined after later
    removals. With difficulty < 100 only that share of each kind is tried.
    """
    dropped_ineq = _minimize_list(solver, puzzle, "inequalities", difficulty, rng)
    dropped_cages = _minimize_list(solver, puzzle, "cages", difficulty, rng)

    givens = puzzle.given_cells()
    rng.shuffle(givens)
    dropped_givens = 0
    for r, c in givens[:_attempt_count(len(givens), difficulty)]:
        value = puzzle.grid[r][c]
        puzzle.grid[r][c] = EMPTY_CELL
        if has_unique_solution(solver, puzzle):
            dropped_givens += 1
        else:
            puzzle.grid[r][c] = value

    logger.info(
        "minimized: dropped %d inequalities, %d cages, %d givens",
        dropped_ineq, dropped_cages, dropped_givens,
    )


# ---------- driver ----------
class PuzzleGenerator:
    """Builds puzzles through a SudokuSolver; every random choice goes through one RNG."""

    def __init__(self, solver: Optional[SudokuSolver] = None):
        self.solver = solver if solver is not None else SudokuSolver()

    def generate(self, config: Optional[GeneratorConfig] = None,
                 rng: Optional[random.Random] = None) -> Tuple[Puzzle, Solution]:
        config = config if config is not None else GeneratorConfig()
        if rng is None:
            rng = random.Random(config.seed)
        solver = self.solver

        solution = random_complete_grid(solver, rng)
        grid = solution.grid
        puzzle = Puzzle()

        if config.type.has_cages:
            if config.fill_all_cells:
                generate_cages_filling_all(puzzle, grid, config.min_cage_size, config.max_cage_size, rng)
            else:
                num_cages = rng.randint(config.min_cages, config.max_cages)
                generate_cages(puzzle, grid, num_cages, config.min_cage_size, config.max_cage_size, rng)

        if config.type.has_inequalities:
            num_ineq = rng.randint(config.min_inequalities, config.max_inequalities)
            generate_inequalities(puzzle, grid, num_ineq, rng)

        if config.max_givens > 0:
            add_givens(puzzle, grid, rng.randint(config.min_givens, config.max_givens), rng)

        logger.info(
            "generated %s: %d cages, %d inequalities, %d givens",
            config.type.value, len(puzzle.cages), len(puzzle.inequalities), len(puzzle.given_cells()),
        )

        if config.ensure_unique:
            unique = enforce_uniqueness(solver, puzzle, grid, config.type, rng)
            if unique:
                minimize_constraints(solver, puzzle, rng, config.difficulty)
                solution.uniqueness = UniquenessStatus.UNIQUE
            else:
                logger.warning("could not reach a unique solution, returning puzzle as is")
                solution.uniqueness = UniquenessStatus.NOT_UNIQUE

        return puzzle, solution


def generate(config: Optional[GeneratorConfig] = None, *, backend: Optional[str] = None
             ) -> Tuple[Puzzle, Solution]:
    solver = SudokuSolver(backend) if backend else None
    return PuzzleGenerator(solver).generate(config)
