"""
Worked solutions for missed problems.

Each evaluation step of a problem is explained with a teaching method picked
from the tier and the numbers involved: the tens strategies for the tier 2
addition/subtraction range, times tables and decomposition for tier 4 and 5
products, and checking a quotient by multiplying back for tier 4 and 5
divisions. Everything else gets the plain "a op b = c" line.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Optional

from problems import Operator, Problem, evaluation_steps
from tiers import DifficultyTier

TEN = 10
SMALL_RANGE = 20  # the tens strategies only make sense within 20

ADD_SUB_TIER = 2
TABLE_TIER = 4
LARGE_TABLE_TIER = 5


class SolutionMethod(str, Enum):
    STANDARD = "standard"
    MAKING_TEN = "making_ten"
    BREAKING_TEN = "breaking_ten"
    BORROWING_TEN = "borrowing_ten"
    LEVELING_TEN = "leveling_ten"
    MULTIPLICATION_TABLE = "multiplication_table"
    DECOMPOSITION = "decomposition"
    DIVISION_CHECK = "division_check"


def pair_method(left: int, op: Operator, right: int, tier_id: Optional[int]) -> SolutionMethod:
    """Method for a single ``left op right`` step in the given tier."""
    small = left <= SMALL_RANGE and right <= SMALL_RANGE

    if op is Operator.ADD and tier_id == ADD_SUB_TIER and small:
        larger, smaller = max(left, right), min(left, right)
        if TEN < left + right <= SMALL_RANGE and larger < TEN and TEN - larger <= smaller:
            return SolutionMethod.MAKING_TEN

    if op is Operator.SUB and tier_id == ADD_SUB_TIER and small and left > TEN:
        ones = left % TEN
        if right < TEN and ones < right:
            return SolutionMethod.BREAKING_TEN
        if right == TEN:
            return SolutionMethod.BORROWING_TEN
        if right > TEN and left - right < TEN:
            return SolutionMethod.LEVELING_TEN

    if op is Operator.MUL and tier_id in (TABLE_TIER, LARGE_TABLE_TIER) and small:
        if tier_id == LARGE_TABLE_TIER and max(left, right) > TEN:
            return SolutionMethod.DECOMPOSITION
        return SolutionMethod.MULTIPLICATION_TABLE

    if (
        op is Operator.DIV
        and tier_id in (TABLE_TIER, LARGE_TABLE_TIER)
        and left <= SMALL_RANGE
        and right <= TEN
    ):
        return SolutionMethod.DIVISION_CHECK

    return SolutionMethod.STANDARD


# --- Step writers -----------------------------------------------------------------


def _standard(left: int, op: Operator, right: int, result: int) -> List[str]:
    return [f"{left} {op.symbol} {right} = {result}"]


def _making_ten(left: int, op: Operator, right: int, result: int) -> List[str]:
    larger, smaller = max(left, right), min(left, right)
    needed = TEN - larger
    rest = smaller - needed
    return [
        f"{larger} needs {needed} to make {TEN}",
        f"Split {smaller} into {needed} and {rest}",
        f"{larger} + {needed} = {TEN}",
        f"{TEN} + {rest} = {result}",
    ]


def _breaking_ten(left: int, op: Operator, right: int, result: int) -> List[str]:
    ones = left % TEN
    from_ten = TEN - right
    if from_ten + ones != result:
        # 20 - 7 and friends do not split into a single ten
        return _standard(left, op, right, result)
    return [
        f"Split {left} into {TEN} and {ones}",
        f"{TEN} - {right} = {from_ten}",
        f"{from_ten} + {ones} = {result}",
    ]


def _borrowing_ten(left: int, op: Operator, right: int, result: int) -> List[str]:
    tens, ones = left // TEN * TEN, left % TEN
    borrowed = ones + TEN
    return [
        f"Split {left} into {tens} and {ones}",
        f"{ones} is less than {right}, so borrow a ten: {borrowed}",
        f"{borrowed} - {right} = {borrowed - right}",
        f"{tens - TEN} + {borrowed - right} = {result}",
    ]


def _leveling_ten(left: int, op: Operator, right: int, result: int) -> List[str]:
    rest = right - TEN
    level = left - TEN
    return [
        f"Split {right} into {TEN} and {rest}",
        f"{left} - {TEN} = {level}",
        f"{level} - {rest} = {result}",
    ]


def _multiplication_table(left: int, op: Operator, right: int, result: int) -> List[str]:
    smaller, larger = min(left, right), max(left, right)
    return [
        f"Use the {smaller} times table: {smaller} × {larger} = {result}",
        f"So {left} × {right} = {result}",
    ]


def _decomposition(left: int, op: Operator, right: int, result: int) -> List[str]:
    larger, smaller = max(left, right), min(left, right)
    tens, ones = larger // TEN * TEN, larger % TEN
    return [
        f"Split {larger} into {tens} and {ones}",
        f"{tens} × {smaller} = {tens * smaller}",
        f"{ones} × {smaller} = {ones * smaller}",
        f"{tens * smaller} + {ones * smaller} = {result}",
    ]


def _division_check(left: int, op: Operator, right: int, result: int) -> List[str]:
    return [
        f"{left} ÷ {right} = {result}",
        f"Check: {result} × {right} = {result * right}",
    ]


_WRITERS: Dict[SolutionMethod, Callable[[int, Operator, int, int], List[str]]] = {
    SolutionMethod.STANDARD: _standard,
    SolutionMethod.MAKING_TEN: _making_ten,
    SolutionMethod.BREAKING_TEN: _breaking_ten,
    SolutionMethod.BORROWING_TEN: _borrowing_ten,
    SolutionMethod.LEVELING_TEN: _leveling_ten,
    SolutionMethod.MULTIPLICATION_TABLE: _multiplication_table,
    SolutionMethod.DECOMPOSITION: _decomposition,
    SolutionMethod.DIVISION_CHECK: _division_check,
}


# --- Public API -------------------------------------------------------------------


def solution_method(problem: Problem, tier: Optional[DifficultyTier] = None) -> SolutionMethod:
    """Method used for a two-operand problem; three-operand problems are stepped."""
    if tier is None or len(problem.operands) != 2:
        return SolutionMethod.STANDARD
    a, b = problem.operands
    return pair_method(a, problem.operators[0], b, tier.id)


def solution_steps(problem: Problem, tier: Optional[DifficultyTier] = None) -> List[str]:
    """
    Worked steps for ``problem`` as seen in ``tier``.

    Two operands get the tier's method. Three operands in tier 2 explain each
    evaluation step with its own method; in other tiers they get the standard
    step list.
    """
    tier_id = tier.id if tier is not None else None
    if len(problem.operands) == 3 and tier_id != ADD_SUB_TIER:
        return problem.solution_steps()

    lines: List[str] = []
    for left, op, right, result in evaluation_steps(problem.operands, problem.operators):
        lines.extend(_WRITERS[pair_method(left, op, right, tier_id)](left, op, right, result))
    return lines
