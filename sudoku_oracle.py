# sudoku_oracle.py
# Narrow SAT "oracle" interface used by the encoder, with python-sat and z3 back ends.
# Literals are DIMACS-style ints: v means "v is true", -v means "v is false".

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence

import z3
from pysat.solvers import Solver, SolverNames

from sudoku_types import UniquenessStatus

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "g3"   # Glucose 3, same default as pysat examples


class BooleanOracle(ABC):
    """
    Variable creation, clause assertion, solve and model query.
    One instance per encode-and-solve cycle; use as a context manager.
    """

    def __init__(self):
        self._top = 0
        self._num_clauses = 0
        self._inconsistent = False   # an empty clause was asserted

    @property
    def top(self) -> int:
        """Highest variable id handed out so far."""
        return self._top

    @property
    def num_clauses(self) -> int:
        return self._num_clauses

    def new_variable(self) -> int:
        self._top += 1
        return self._top

    def reserve(self, top: int) -> None:
        """Mark ids up to `top` as used (auxiliaries allocated by an external encoder)."""
        if top > self._top:
            self._top = top

    def add_clause(self, literals: Iterable[int]) -> None:
        clause = list(literals)
        self._num_clauses += 1
        if not clause:
            self._inconsistent = True
            return
        self._add_clause(clause)

    def solve(self) -> bool:
        if self._inconsistent:
            return False
        return self._solve()

    @abstractmethod
    def _add_clause(self, clause: List[int]) -> None:
        ...

    @abstractmethod
    def _solve(self) -> bool:
        ...

    @abstractmethod
    def value_of(self, var: int) -> bool:
        """Truth value of `var` in the last model (only valid after solve() returned True)."""

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class PySatOracle(BooleanOracle):
    """Oracle backed by any python-sat solver (g3, g4, cd15, m22, ...)."""

    def __init__(self, name: str = DEFAULT_BACKEND):
        super().__init__()
        self.name = name
        self._solver = Solver(name=name)
        self._model_pos: set = set()

    def _add_clause(self, clause: List[int]) -> None:
        self._solver.add_clause(clause)

    def _solve(self) -> bool:
        sat = self._solver.solve()
        if sat:
            self._model_pos = {l for l in self._solver.get_model() if l > 0}
        else:
            self._model_pos = set()
        return bool(sat)

    def value_of(self, var: int) -> bool:
        return var in self._model_pos

    def close(self) -> None:
        if self._solver is not None:
            self._solver.delete()
            self._solver = None


class Z3Oracle(BooleanOracle):
    """Oracle backed by z3's propositional core, one Bool per variable."""

    name = "z3"

    def __init__(self):
        super().__init__()
        self._solver = z3.Solver()
        self._bools = {}
        self._model: Optional[z3.ModelRef] = None

    def _bool(self, var: int):
        b = self._bools.get(var)
        if b is None:
            b = z3.Bool(f"v_{var}")
            self._bools[var] = b
        return b

    def _lit(self, lit: int):
        b = self._bool(abs(lit))
        return b if lit > 0 else z3.Not(b)

    def _add_clause(self, clause: List[int]) -> None:
        if len(clause) == 1:
            self._solver.add(self._lit(clause[0]))
        else:
            self._solver.add(z3.Or([self._lit(l) for l in clause]))

    def _solve(self) -> bool:
        if self._solver.check() != z3.sat:
            self._model = None
            return False
        self._model = self._solver.model()
        return True

    def value_of(self, var: int) -> bool:
        if self._model is None or var not in self._bools:
            return False
        return z3.is_true(self._model.eval(self._bools[var], model_completion=True))


def _pysat_names() -> List[str]:
    names: List[str] = []
    for attr in dir(SolverNames):
        value = getattr(SolverNames, attr)
        if not attr.startswith("_") and isinstance(value, tuple):
            names.extend(value)
    return names


def make_oracle(backend: str = DEFAULT_BACKEND) -> BooleanOracle:
    """Fresh oracle for a backend name: "z3" or any python-sat solver name."""
    if backend == "z3":
        return Z3Oracle()
    if backend not in _pysat_names():
        raise ValueError(f"Unknown SAT backend: {backend!r}")
    return PySatOracle(backend)


# ---------- uniqueness protocol ----------
def blocking_clause(true_literals: Sequence[int]) -> List[int]:
    """Clause excluding the assignment where all of `true_literals` hold."""
    return [-l for l in true_literals]


def check_model_uniqueness(oracle: BooleanOracle, true_literals: Sequence[int]) -> UniquenessStatus:
    """
    Decide whether the model just found is the only one, projected onto `true_literals`.

    Adds one blocking clause and re-solves: UNSAT means unique.
    Only pass primary literals; blocking auxiliaries would let equivalent
    solutions through as "different".
    """
    oracle.add_clause(blocking_clause(true_literals))
    if oracle.solve():
        logger.debug("second model found, solution is not unique")
        return UniquenessStatus.NOT_UNIQUE
    return UniquenessStatus.UNIQUE
