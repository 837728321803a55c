# tests/conftest.py
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so the top-level modules import without installing
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sudoku_format import parse_simple_grid  # noqa: E402
from sudoku_solver import SudokuSolver  # noqa: E402

WIKI_PUZZLE = "530070000600195000098000060800060003400803001700020006060000280000419005000080079"

WIKI_SOLUTION = [
    "534678912",
    "672195348",
    "198342567",
    "859761423",
    "426853791",
    "713924856",
    "961537284",
    "287419635",
    "345286179",
]


@pytest.fixture
def solver():
    return SudokuSolver()


@pytest.fixture
def wiki_puzzle():
    return parse_simple_grid(WIKI_PUZZLE)


@pytest.fixture
def canonical_grid():
    return [[int(ch) for ch in row] for row in WIKI_SOLUTION]
