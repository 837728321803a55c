#!/usr/bin/env python3
# sudoku_cli.py
# Command line front end:
#   sat-sudoku solve puzzle.txt [--unique]
#   sat-sudoku solve --string 530070000600195000...
#   sat-sudoku generate --type killer --difficulty 60 --seed 7

import argparse
import logging
import sys
from typing import List, Optional

from sudoku_format import (
    describe_puzzle,
    describe_solution,
    parse_file,
    parse_puzzle,
    to_custom_format,
)
from sudoku_generator import KIND_NAMES, GeneratorConfig, PuzzleGenerator
from sudoku_oracle import DEFAULT_BACKEND
from sudoku_solver import SudokuSolver, verify_solution

logger = logging.getLogger("sat-sudoku")

INPUT_HELP = """\
Input formats:
  1. Simple grid (81 characters, use . or 0 for empty cells):
     530070000600195000098000060800060003400803001700020006060000280000419005000080079

  2. Sectioned text format:
     GRID
     5 3 0 0 7 0 0 0 0
     ... (9 lines)
     CAGES
     10 0 0 0 1       (sum r1 c1 r2 c2 ...)
     INEQUALITIES
     0 0 > 0 1        (r1 c1 > r2 c2)
"""


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="count", default=0,
                        help="more logging (-v info, -vv debug)")
    common.add_argument("--backend", default=DEFAULT_BACKEND,
                        help="SAT backend: any python-sat solver name or 'z3' (default: %(default)s)")
    common.add_argument("--encoding", default="pairwise", choices=["pairwise", "seq", "cardnet"],
                        help="at-most-one encoding (default: %(default)s)")

    parser = argparse.ArgumentParser(
        prog="sat-sudoku",
        description="Solve and generate standard, killer and inequality Sudoku with a SAT solver.",
        epilog=INPUT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_solve = sub.add_parser("solve", parents=[common], help="solve a puzzle")
    src = p_solve.add_mutually_exclusive_group(required=True)
    src.add_argument("file", nargs="?", help="puzzle file")
    src.add_argument("-s", "--string", help="puzzle text, e.g. an 81-character grid")
    p_solve.add_argument("-u", "--unique", action="store_true", help="also check that the solution is unique")

    p_gen = sub.add_parser("generate", parents=[common], help="generate a puzzle")
    p_gen.add_argument("-t", "--type", default="mixed", choices=sorted(KIND_NAMES))
    p_gen.add_argument("-d", "--difficulty", type=int, default=50, help="0-100 (default: %(default)s)")
    p_gen.add_argument("--seed", type=int, default=None)
    p_gen.add_argument("--fill-all", action="store_true", help="cages cover every cell")
    p_gen.add_argument("--no-unique", action="store_true", help="skip uniqueness enforcement")
    p_gen.add_argument("--with-solution", action="store_true", help="append the SOLUTION section")
    return parser


def _run_solve(args, solver: SudokuSolver) -> int:
    puzzle = parse_puzzle(args.string) if args.string else parse_file(args.file)

    print(describe_puzzle(puzzle))
    print("Solving...\n")
    solution = solver.solve(puzzle, check_uniqueness=args.unique)
    print(describe_solution(solution))

    if not solution.solved:
        return 1
    if not verify_solution(puzzle, solution):
        print("Solution verification failed!")
        return 1
    print("Solution verified correct!")
    if solution.uniqueness_checked():
        print(f"Uniqueness: {solution.uniqueness.value}")
    print("\nStatistics:")
    print(f"  Variables: {solver.num_variables}")
    print(f"  Clauses: {solver.num_clauses}")
    print(f"  Solve time: {solution.solve_time_ms:.2f} ms")
    return 0


def _run_generate(args, solver: SudokuSolver) -> int:
    config = GeneratorConfig.preset(
        args.type,
        difficulty=args.difficulty,
        seed=args.seed,
        fill_all_cells=args.fill_all,
        ensure_unique=not args.no_unique,
    )
    puzzle, solution = PuzzleGenerator(solver).generate(config)
    print(to_custom_format(puzzle, solution if args.with_solution else None), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        solver = SudokuSolver(args.backend, amo_encoding=args.encoding)
        if args.command == "solve":
            return _run_solve(args, solver)
        return _run_generate(args, solver)
    except ValueError as e:   # includes PuzzleFormatError
        logger.debug("aborting", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
