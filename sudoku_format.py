# sudoku_format.py
# Reading and writing puzzles as text:
#   - simple grid: 81 cells, digits 1-9 with 0 . _ * for blanks
#   - sectioned format: GRID / CAGES / INEQUALITIES (/ SOLUTION)

from pathlib import Path
from typing import List, Optional, Tuple, Union

from sudoku_types import (
    BOX_SIZE,
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
)

BLANKS = "0._*"
SECTIONS = ("GRID", "CAGES", "INEQUALITIES", "SOLUTION")

_OPS = {
    ">": InequalityType.GREATER_THAN,
    "gt": InequalityType.GREATER_THAN,
    "<": InequalityType.LESS_THAN,
    "lt": InequalityType.LESS_THAN,
}


class PuzzleFormatError(ValueError):
    """Raised for text that does not describe a puzzle."""


# ---------- parsing ----------
def _cell_values(s: str) -> List[int]:
    out = []
    for ch in s:
        if ch in BLANKS:
            out.append(0)
        elif ch.isdigit():
            out.append(int(ch))
    return out


def parse_simple_grid(text: str) -> Puzzle:
    """81 cell characters, anything else (spaces, newlines, bars) is ignored."""
    values = _cell_values(text)
    if len(values) < GRID_SIZE * GRID_SIZE:
        raise PuzzleFormatError(f"Grid must have 81 cells, got {len(values)}")
    puzzle = Puzzle()
    for i in range(GRID_SIZE * GRID_SIZE):
        puzzle.grid[i // GRID_SIZE][i % GRID_SIZE] = values[i]
    return puzzle


def _ints(tokens: List[str], lineno: int) -> List[int]:
    try:
        return [int(t) for t in tokens]
    except ValueError:
        raise PuzzleFormatError(f"line {lineno}: expected integers, got {' '.join(tokens)!r}") from None


def _parse_cage(tokens: List[str], lineno: int) -> Cage:
    # sum r1 c1 r2 c2 ...
    if len(tokens) < 3 or (len(tokens) - 1) % 2:
        raise PuzzleFormatError(f"line {lineno}: cage needs 'sum r1 c1 [r2 c2 ...]'")
    nums = _ints(tokens, lineno)
    cells = [Cell(nums[i], nums[i + 1]) for i in range(1, len(nums), 2)]
    return Cage(cells, nums[0])


def _parse_inequality(tokens: List[str], lineno: int) -> InequalityConstraint:
    # r1 c1 > r2 c2
    if len(tokens) != 5 or tokens[2] not in _OPS:
        raise PuzzleFormatError(f"line {lineno}: inequality needs 'r1 c1 >|< r2 c2'")
    r1, c1, r2, c2 = _ints(tokens[:2] + tokens[3:], lineno)
    return InequalityConstraint(Cell(r1, c1), Cell(r2, c2), _OPS[tokens[2]])


def _parse_grid_row(line: str, lineno: int) -> List[int]:
    row = _cell_values(line)
    if len(row) != GRID_SIZE:
        raise PuzzleFormatError(f"line {lineno}: grid row must have 9 cells, got {len(row)}")
    return row


def parse_sections(text: str) -> Tuple[Puzzle, Optional[Grid]]:
    """Sectioned format; returns the puzzle and the SOLUTION grid if one is present."""
    puzzle = Puzzle()
    solution_rows: List[List[int]] = []
    grid_rows: List[List[int]] = []
    section = None

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.upper() in SECTIONS:
            section = line.upper()
            continue

        tokens = line.split()
        if section is None:
            # bare grid rows before any header
            section = "GRID"
        if section == "GRID":
            if len(grid_rows) >= GRID_SIZE:
                raise PuzzleFormatError(f"line {lineno}: more than 9 grid rows")
            grid_rows.append(_parse_grid_row(line, lineno))
        elif section == "CAGES":
            puzzle.add_cage(_parse_cage(tokens, lineno))
        elif section == "INEQUALITIES":
            puzzle.add_inequality(_parse_inequality(tokens, lineno))
        elif section == "SOLUTION":
            if len(solution_rows) >= GRID_SIZE:
                raise PuzzleFormatError(f"line {lineno}: more than 9 solution rows")
            solution_rows.append(_parse_grid_row(line, lineno))

    if grid_rows:
        if len(grid_rows) != GRID_SIZE:
            raise PuzzleFormatError(f"Expected 9 grid rows, got {len(grid_rows)}")
        puzzle.grid = grid_rows
    if solution_rows and len(solution_rows) != GRID_SIZE:
        raise PuzzleFormatError(f"Expected 9 solution rows, got {len(solution_rows)}")
    if not (grid_rows or puzzle.cages or puzzle.inequalities):
        raise PuzzleFormatError("No puzzle content found")
    return puzzle, (solution_rows or None)


def parse_puzzle(text: str) -> Puzzle:
    """Detect the format and parse it."""
    upper = text.upper()
    if any(name in upper for name in SECTIONS):
        return parse_sections(text)[0]
    cells = [ch for ch in text if ch in BLANKS or ch.isdigit()]
    if len(cells) == GRID_SIZE * GRID_SIZE and len(text.split()) in (1, GRID_SIZE):
        return parse_simple_grid(text)
    return parse_sections(text)[0]


def parse_file(path: Union[str, Path]) -> Puzzle:
    try:
        text = Path(path).read_text()
    except OSError as e:
        raise PuzzleFormatError(f"Cannot open file: {path}") from e
    return parse_puzzle(text)


# ---------- writing ----------
def _grid_lines(grid: Grid) -> List[str]:
    return [" ".join(str(v) for v in row) for row in grid]


def to_custom_format(puzzle: Puzzle, solution: Optional[Solution] = None) -> str:
    lines = ["GRID"]
    lines += _grid_lines(puzzle.grid)
    if puzzle.cages:
        lines += ["", "CAGES"]
        for cage in puzzle.cages:
            cells = " ".join(f"{r} {c}" for r, c in cage.cells)
            lines.append(f"{cage.target_sum} {cells}")
    if puzzle.inequalities:
        lines += ["", "INEQUALITIES"]
        for ineq in puzzle.inequalities:
            (r1, c1), (r2, c2) = ineq.cell1, ineq.cell2
            lines.append(f"{r1} {c1} {ineq.type.value} {r2} {c2}")
    if solution is not None and solution.solved:
        lines += ["", "SOLUTION"]
        lines += _grid_lines(solution.grid)
    return "\n".join(lines) + "\n"


def _symbol(v: int) -> str:
    return str(v) if MIN_VALUE <= v <= MAX_VALUE else "."


def format_grid(grid: Grid) -> str:
    """Boxed grid with '.' for blanks."""
    hsep = "+-------+-------+-------+"
    out = [hsep]
    for r in range(GRID_SIZE):
        if r % BOX_SIZE == 0 and r != 0:
            out.append(hsep)
        parts = ["|"]
        for c in range(GRID_SIZE):
            if c % BOX_SIZE == 0 and c != 0:
                parts.append("|")
            parts.append(_symbol(grid[r][c]))
        parts.append("|")
        out.append(" ".join(parts))
    out.append(hsep)
    return "\n".join(out) + "\n"


def describe_puzzle(puzzle: Puzzle) -> str:
    lines = [f"Type: {puzzle.type.value}", "", "Grid:", format_grid(puzzle.grid).rstrip("\n")]
    if puzzle.cages:
        lines += ["", f"Cages ({len(puzzle.cages)}):"]
        for i, cage in enumerate(puzzle.cages, start=1):
            cells = ", ".join(f"({r},{c})" for r, c in cage.cells)
            lines.append(f"  Cage {i}: sum={cage.target_sum}, cells=[{cells}]")
    if puzzle.inequalities:
        lines += ["", f"Inequalities ({len(puzzle.inequalities)}):"]
        for ineq in puzzle.inequalities:
            (r1, c1), (r2, c2) = ineq.cell1, ineq.cell2
            lines.append(f"  ({r1},{c1}) {ineq.type.value} ({r2},{c2})")
    return "\n".join(lines) + "\n"


def describe_solution(solution: Solution) -> str:
    if solution.solved:
        return f"Solution found in {solution.solve_time_ms:.2f} ms:\n\n" + format_grid(solution.grid)
    msg = "No solution found.\n"
    if solution.error_message:
        msg += f"Error: {solution.error_message}\n"
    return msg

