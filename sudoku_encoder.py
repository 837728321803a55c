# sudoku_encoder.py
# Translate a puzzle (givens + cages + inequalities) into CNF on a BooleanOracle,
# solve it and read the digit grid back out of the model.

import logging
import time
from typing import Callable, Dict, List, Optional, Sequence

from pysat.card import CardEnc, EncType

from cage_sums import sum_combinations
from sudoku_oracle import BooleanOracle, DEFAULT_BACKEND, check_model_uniqueness, make_oracle
from sudoku_types import (
    BOX_SIZE,
    GRID_SIZE,
    MAX_VALUE,
    MIN_VALUE,
    Cage,
    InequalityConstraint,
    InequalityType,
    Puzzle,
    Solution,
)

logger = logging.getLogger(__name__)

NO_SOLUTION_MESSAGE = "No solution exists for the given puzzle."

NUM_PRIMARY = GRID_SIZE * GRID_SIZE * GRID_SIZE   # 729 (row, col, digit) variables

# ---------- encoding helpers ----------
_ENC_MAP = {
    "pairwise": EncType.pairwise,     # O(k^2) AMO, no aux vars
    "seq": EncType.seqcounter,        # sequential/ladder AMO, linear + aux vars
    "cardnet": EncType.cardnetwrk,    # sorting/cardinality networks, strong + aux vars
}


def var_index(row: int, col: int, digit: int) -> int:
    """
    0-based indices: row, col in [0..8], digit in [1..9]
    Maps (row, col, digit) -> {0..728}
    """
    return row * GRID_SIZE * GRID_SIZE + col * GRID_SIZE + (digit - 1)


def lit(row: int, col: int, digit: int, positive: bool = True) -> int:
    """DIMACS literal of "cell (row, col) holds digit"."""
    v = var_index(row, col, digit) + 1
    return v if positive else -v


def at_most_one(oracle: BooleanOracle, lits: Sequence[int], enc: EncType = EncType.pairwise) -> None:
    """ sum(lits) <= 1 """
    if enc == EncType.pairwise:
        for i in range(len(lits)):
            for j in range(i + 1, len(lits)):
                oracle.add_clause([-lits[i], -lits[j]])
        return
    amo = CardEnc.atmost(lits=list(lits), bound=1, top_id=oracle.top, encoding=enc)
    oracle.reserve(amo.nv)
    for clause in amo.clauses:
        oracle.add_clause(clause)


def exactly_one(oracle: BooleanOracle, lits: Sequence[int], enc: EncType = EncType.pairwise) -> None:
    """ sum(lits) == 1  (ALO + AMO via chosen encoding) """
    oracle.add_clause(list(lits))  # ALO
    at_most_one(oracle, lits, enc)


class ConstraintEncoder:
    """
    Compiles puzzles to CNF and solves them.

    Variable x(r, c, d) "cell (r, c) holds d" has index r*81 + c*9 + (d-1),
    i.e. DIMACS variable index+1. The 729 primaries are always created first,
    so cage auxiliaries start at 730.

    A fresh oracle is built for every call; `num_variables` and `num_clauses`
    describe the most recent encoding.
    """

    def __init__(
        self,
        backend: str = DEFAULT_BACKEND,
        *,
        amo_encoding: str = "pairwise",
        oracle_factory: Optional[Callable[[], BooleanOracle]] = None,
    ):
        self.backend = backend
        self.enc = _ENC_MAP.get(amo_encoding, EncType.pairwise)
        if oracle_factory is None:
            make_oracle(backend).close()   # reject unknown names up front
            oracle_factory = lambda: make_oracle(backend)
        self._oracle_factory = oracle_factory
        self._oracle: Optional[BooleanOracle] = None
        self.num_variables = 0
        self.num_clauses = 0

    # ---------- public ----------
    def encode_and_solve(self, puzzle: Puzzle, check_uniqueness: bool = False) -> Solution:
        solution = Solution()
        start = time.perf_counter()

        with self._oracle_factory() as oracle:
            self._oracle = oracle
            try:
                self._encode(puzzle)
                sat = oracle.solve()
                if sat:
                    solution.solved = True
                    solution.grid = self._extract_grid()
                    if check_uniqueness:
                        solution.uniqueness = check_model_uniqueness(
                            oracle, cell_literals(solution.grid)
                        )
                else:
                    solution.error_message = NO_SOLUTION_MESSAGE
                self.num_variables = oracle.top
                self.num_clauses = oracle.num_clauses
            finally:
                self._oracle = None

        solution.solve_time_ms = (time.perf_counter() - start) * 1000.0
        logger.debug(
            "solve: sat=%s uniqueness=%s vars=%d clauses=%d %.1fms",
            solution.solved, solution.uniqueness.value,
            self.num_variables, self.num_clauses, solution.solve_time_ms,
        )
        return solution

    # ---------- encoding ----------
    def _encode(self, puzzle: Puzzle) -> None:
        oracle = self._oracle
        for _ in range(NUM_PRIMARY):
            oracle.new_variable()

        self._encode_cells()
        self._encode_rows()
        self._encode_columns()
        self._encode_boxes()
        self._encode_givens(puzzle)

        if puzzle.has_killer_constraints():
            for cage in puzzle.cages:
                if not cage.is_well_formed():
                    logger.warning("skipping malformed cage %s", cage)
                    continue
                self._encode_cage_sum(cage)
                self._encode_cage_uniqueness(cage)

        if puzzle.has_inequality_constraints():
            for ineq in puzzle.inequalities:
                if not ineq.is_valid():
                    logger.warning("skipping invalid inequality %s", ineq)
                    continue
                self._encode_inequality(ineq)

    def _encode_cells(self) -> None:
        # 1) exactly one digit per cell
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                exactly_one(self._oracle, [lit(r, c, d) for d in range(MIN_VALUE, MAX_VALUE + 1)], self.enc)

    def _encode_rows(self) -> None:
        # 2) for each row r and digit d, exactly one column c
        for r in range(GRID_SIZE):
            for d in range(MIN_VALUE, MAX_VALUE + 1):
                exactly_one(self._oracle, [lit(r, c, d) for c in range(GRID_SIZE)], self.enc)

    def _encode_columns(self) -> None:
        # 3) for each column c and digit d, exactly one row r
        for c in range(GRID_SIZE):
            for d in range(MIN_VALUE, MAX_VALUE + 1):
                exactly_one(self._oracle, [lit(r, c, d) for r in range(GRID_SIZE)], self.enc)

    def _encode_boxes(self) -> None:
        # 4) for each 3x3 box and digit d, exactly one cell
        for br in range(BOX_SIZE):
            for bc in range(BOX_SIZE):
                rows = range(br * BOX_SIZE, br * BOX_SIZE + BOX_SIZE)
                cols = range(bc * BOX_SIZE, bc * BOX_SIZE + BOX_SIZE)
                for d in range(MIN_VALUE, MAX_VALUE + 1):
                    exactly_one(self._oracle, [lit(r, c, d) for r in rows for c in cols], self.enc)

    def _encode_givens(self, puzzle: Puzzle) -> None:
        # 5) clues as unit clauses
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                d = puzzle.grid[r][c]
                if MIN_VALUE <= d <= MAX_VALUE:
                    self._oracle.add_clause([lit(r, c, d)])

    def _encode_cage_sum(self, cage: Cage) -> None:
        oracle = self._oracle
        cells = cage.cells
        combos = sum_combinations(len(cells), cage.target_sum)

        if not combos:
            # unreachable sum: the whole puzzle is UNSAT
            oracle.add_clause([])
            return

        digits = range(MIN_VALUE, MAX_VALUE + 1)

        if len(combos) == 1:
            # Pin the digit set; cage uniqueness spreads it over the cells.
            members = set(combos[0])
            for d in digits:
                if d in members:
                    oracle.add_clause([lit(r, c, d) for r, c in cells])
                else:
                    for r, c in cells:
                        oracle.add_clause([lit(r, c, d, False)])
            return

        # One selector per combination, index -> variable, owned by this cage only.
        selectors: Dict[int, int] = {i: oracle.new_variable() for i in range(len(combos))}
        exactly_one(oracle, list(selectors.values()), self.enc)

        for i, combo in enumerate(combos):
            s = selectors[i]
            members = set(combo)
            for d in digits:
                if d in members:
                    # s -> some cage cell holds d
                    oracle.add_clause([-s] + [lit(r, c, d) for r, c in cells])
                else:
                    # s -> no cage cell holds d
                    for r, c in cells:
                        oracle.add_clause([-s, lit(r, c, d, False)])

        # cell holds d -> some selected combination contains d
        for d in digits:
            support = [selectors[i] for i, combo in enumerate(combos) if d in combo]
            for r, c in cells:
                oracle.add_clause([lit(r, c, d, False)] + support)

    def _encode_cage_uniqueness(self, cage: Cage) -> None:
        # for each digit, at most one cage cell holds it
        for d in range(MIN_VALUE, MAX_VALUE + 1):
            at_most_one(self._oracle, [lit(r, c, d) for r, c in cage.cells], self.enc)

    def _encode_inequality(self, ineq: InequalityConstraint) -> None:
        (r1, c1), (r2, c2) = ineq.cell1, ineq.cell2
        for v1 in range(MIN_VALUE, MAX_VALUE + 1):
            for v2 in range(MIN_VALUE, MAX_VALUE + 1):
                if ineq.type is InequalityType.GREATER_THAN:
                    forbidden = v1 <= v2
                else:
                    forbidden = v1 >= v2
                if forbidden:
                    self._oracle.add_clause([lit(r1, c1, v1, False), lit(r2, c2, v2, False)])

    # ---------- decoding ----------
    def _extract_grid(self) -> List[List[int]]:
        out = [[0] * GRID_SIZE for _ in range(GRID_SIZE)]
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                for d in range(MIN_VALUE, MAX_VALUE + 1):
                    if self._oracle.value_of(lit(r, c, d)):
                        out[r][c] = d
                        break
        return out


def cell_literals(grid: Sequence[Sequence[int]]) -> List[int]:
    """Primary literals asserted by a (possibly partial) digit grid."""
    return [
        lit(r, c, grid[r][c])
        for r in range(GRID_SIZE)
        for c in range(GRID_SIZE)
        if MIN_VALUE <= grid[r][c] <= MAX_VALUE
    ]
