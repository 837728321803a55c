# cage_sums.py
# Enumerate the digit sets a killer cage can hold.

from typing import List, Tuple

from sudoku_types import MAX_VALUE, MIN_VALUE


def _min_tail(count: int, floor: int) -> int:
    # floor + (floor+1) + ... (count terms)
    return count * floor + count * (count - 1) // 2


def _max_tail(count: int) -> int:
    # 9 + 8 + ... (count terms)
    return count * MAX_VALUE - count * (count - 1) // 2


def sum_combinations(num_cells: int, target_sum: int) -> List[Tuple[int, ...]]:
    """
    All strictly increasing tuples of num_cells distinct digits 1..9 summing to target_sum.

    Backtracking over (cells left, sum left, smallest next digit); a branch is
    cut as soon as the remaining cells can no longer reach the remaining sum
    with either the smallest or the largest digits still available.
    Returns [] when the sum is out of reach (an infeasible cage).
    """
    result: List[Tuple[int, ...]] = []
    if num_cells < 1 or num_cells > MAX_VALUE - MIN_VALUE + 1:
        return result

    current: List[int] = []

    def extend(cells_left: int, sum_left: int, floor: int) -> None:
        if cells_left == 0:
            if sum_left == 0:
                result.append(tuple(current))
            return
        for v in range(floor, MAX_VALUE + 1):
            if v > sum_left:
                break
            rest = cells_left - 1
            if _min_tail(rest, v + 1) > sum_left - v:
                # larger v only makes it worse
                break
            if _max_tail(rest) < sum_left - v:
                continue
            current.append(v)
            extend(rest, sum_left - v, v + 1)
            current.pop()

    extend(num_cells, target_sum, MIN_VALUE)
    return result
