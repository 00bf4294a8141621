"""
Constrained random generation of practice problems.

Every public entry point is a bounded rejection-sampling loop around a pure
``attempt_*`` function that returns either a valid candidate or ``None``.
When the attempts run out a fixed, easy addition is returned instead, so
generation never fails.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from problems import Operator, Problem, evaluation_steps
from tiers import DifficultyTier

logger = logging.getLogger("arith-practice.generator")

MIN_OPERAND = 2
MIN_MINUEND = 10
MIN_DIFFERENCE = 2
MIN_ADDITION_SUM = 11  # tiers above 1 want sums past ten
MAX_DIVISOR = 10
UNIT_FACTOR_PROBABILITY = 0.05
FALLBACK_MAX = 10

TWO_OPERAND_ATTEMPTS = 10
THREE_OPERAND_ATTEMPTS = 20
THREE_OPERAND_ATTEMPTS_SMALL_RANGE = 10

Pair = Tuple[int, int]

_CANCELLING = (
    frozenset({Operator.ADD, Operator.SUB}),
    frozenset({Operator.MUL, Operator.DIV}),
)


# --- Two operands -----------------------------------------------------------------


def _addition(tier: DifficultyTier, rng: random.Random) -> Optional[Pair]:
    ub = tier.upper_bound
    if tier.id == 1:
        a = rng.randint(tier.lower_bound, ub)
        b = rng.randint(tier.lower_bound, ub)
        if a + b > ub:
            b = ub - a
        return (a, b) if b >= tier.lower_bound else None

    a = rng.randint(MIN_OPERAND, ub)
    lo = max(MIN_OPERAND, MIN_ADDITION_SUM - a)
    hi = ub - a
    if lo > hi:
        return None
    return a, rng.randint(lo, hi)


def _subtraction(tier: DifficultyTier, rng: random.Random) -> Optional[Pair]:
    ub = tier.upper_bound
    if tier.id == 1:
        smallest = tier.lower_bound
        a = rng.randint(smallest, ub)
    else:
        smallest = MIN_OPERAND
        a = rng.randint(max(MIN_MINUEND, tier.lower_bound), ub)
    hi = a - MIN_DIFFERENCE
    if hi < smallest:
        return None
    return a, rng.randint(smallest, hi)


def _multiplication(tier: DifficultyTier, rng: random.Random) -> Optional[Pair]:
    ub = tier.upper_bound
    max_factor = max(MIN_OPERAND, math.isqrt(ub))
    a = rng.randint(MIN_OPERAND, max_factor)
    if rng.random() < UNIT_FACTOR_PROBABILITY:
        return a, 1
    hi = min(ub // a, max_factor)
    if hi < MIN_OPERAND:
        return None
    return a, rng.randint(MIN_OPERAND, hi)


def _division(tier: DifficultyTier, rng: random.Random) -> Optional[Pair]:
    ub = tier.upper_bound
    # a quotient of at least 2 must still fit under the bound
    divisor = rng.randint(MIN_OPERAND, max(MIN_OPERAND, min(MAX_DIVISOR, ub // MIN_OPERAND)))
    max_quotient = ub // divisor
    if max_quotient < MIN_OPERAND:
        return None
    dividend = divisor * rng.randint(MIN_OPERAND, max_quotient)
    if dividend == divisor or dividend > ub:
        return None
    return dividend, divisor


_PAIR_RULES: Dict[Operator, Callable[[DifficultyTier, random.Random], Optional[Pair]]] = {
    Operator.ADD: _addition,
    Operator.SUB: _subtraction,
    Operator.MUL: _multiplication,
    Operator.DIV: _division,
}


def attempt_two_operand(
    tier: DifficultyTier, op: Operator, rng: random.Random
) -> Optional[Problem]:
    pair = _PAIR_RULES[op](tier, rng)
    if pair is None:
        return None
    problem = Problem(operands=pair, operators=(op,))
    return problem if problem.is_valid() else None


def fallback_two_operand(tier: DifficultyTier, rng: random.Random) -> Problem:
    hi = max(MIN_OPERAND, min(FALLBACK_MAX, tier.upper_bound) // 2)
    return Problem(
        operands=(rng.randint(MIN_OPERAND, hi), rng.randint(MIN_OPERAND, hi)),
        operators=(Operator.ADD,),
    )


# --- Three operands ---------------------------------------------------------------


def divisors_of(n: int, limit: int = MAX_DIVISOR) -> List[int]:
    """Divisors of ``n`` in [2, limit], excluding ``n`` itself."""
    if n <= MIN_OPERAND:
        return []
    return [d for d in range(MIN_OPERAND, min(limit, n - 1) + 1) if n % d == 0]


def _draw_operands(tier: DifficultyTier, rng: random.Random) -> List[int]:
    cap = max(MIN_OPERAND, tier.upper_bound // 3)
    return [rng.randint(MIN_OPERAND, cap) for _ in range(3)]


def _draw_operators(tier: DifficultyTier, rng: random.Random) -> List[Operator]:
    menu = tier.operator_menu()
    return [rng.choice(menu), rng.choice(menu)]


def repair_divisions(
    operands: List[int], operators: List[Operator], rng: random.Random
) -> Tuple[List[int], List[Operator]]:
    """
    Rewrite operands so that every division in the expression is exact.

    A leading division always runs first, so its dividend is rounded to a
    multiple of its divisor. A trailing division either applies to the middle
    operand (when it binds tighter than the first operator) or to the value of
    the left sub-expression; in the latter case the last operand becomes a
    random small divisor of that value, or the operator turns into ``+`` when
    there is none.
    """
    a, b, c = operands
    op1, op2 = operators

    if op1 is Operator.DIV:
        divisor = max(MIN_OPERAND, b)
        a = max(MIN_OPERAND, a // divisor) * divisor
        b = divisor

    if op2 is Operator.DIV:
        if op1.precedence < op2.precedence:
            divisor = max(MIN_OPERAND, c)
            b = max(MIN_OPERAND, b // divisor) * divisor
            c = divisor
        else:
            candidates = divisors_of(op1.apply(a, b))
            if candidates:
                c = rng.choice(candidates)
            else:
                op2 = Operator.ADD

    return [a, b, c], [op1, op2]


def is_degenerate(problem: Problem) -> bool:
    """Patterns too trivial to practise: A op B op B that cancels, X-X, all equal."""
    a, b, c = problem.operands
    op1, op2 = problem.operators
    if a == b == c:
        return True
    if b == c and frozenset((op1, op2)) in _CANCELLING:
        return True
    return any(
        op is Operator.SUB and left == right
        for left, op, right, _ in evaluation_steps(problem.operands, problem.operators)
    )


def attempt_three_operand(tier: DifficultyTier, rng: random.Random) -> Optional[Problem]:
    operands, operators = repair_divisions(
        _draw_operands(tier, rng), _draw_operators(tier, rng), rng
    )
    if max(operands) > tier.upper_bound:
        return None

    problem = Problem(operands=operands, operators=operators)
    if not problem.is_valid() or is_degenerate(problem):
        return None
    if problem.correct_answer > tier.upper_bound:
        return None
    return problem


def fallback_three_operand(tier: DifficultyTier, rng: random.Random) -> Problem:
    hi = max(MIN_OPERAND, min(FALLBACK_MAX, tier.upper_bound // 3))
    return Problem(
        operands=tuple(rng.randint(MIN_OPERAND, hi) for _ in range(3)),
        operators=(Operator.ADD, Operator.ADD),
    )


# --- Driver -----------------------------------------------------------------------


class ProblemSynthesizer:
    """Generates problems for a tier from an injected random source."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, tier: DifficultyTier) -> Problem:
        if tier.three_operand_probability > 0 and self.rng.random() < tier.three_operand_probability:
            return self.three_operand(tier)
        return self.two_operand(tier)

    def two_operand(self, tier: DifficultyTier) -> Problem:
        op = self.rng.choice(tier.operator_menu())
        for _ in range(TWO_OPERAND_ATTEMPTS):
            problem = attempt_two_operand(tier, op, self.rng)
            if problem is not None:
                return problem
        logger.debug("two-operand %s attempts exhausted for tier %s", op.name, tier.id)
        return fallback_two_operand(tier, self.rng)

    def three_operand(self, tier: DifficultyTier) -> Problem:
        attempts = (
            THREE_OPERAND_ATTEMPTS_SMALL_RANGE
            if tier.upper_bound <= FALLBACK_MAX
            else THREE_OPERAND_ATTEMPTS
        )
        for _ in range(attempts):
            problem = attempt_three_operand(tier, self.rng)
            if problem is not None:
                return problem
        logger.debug("three-operand attempts exhausted for tier %s", tier.id)
        return fallback_three_operand(tier, self.rng)

    def padding(self, tier: DifficultyTier) -> Iterator[Problem]:
        """
        Endless stream of distinct simple additions.

        Starts from operands in [2, min(10, upper bound)] and widens the band by
        ten each time it is used up, so a caller skipping duplicates always
        reaches its target.
        """
        high = max(MIN_OPERAND + 1, min(FALLBACK_MAX, tier.upper_bound))
        covered = MIN_OPERAND - 1
        while True:
            band = [
                (a, b)
                for a in range(MIN_OPERAND, high + 1)
                for b in range(MIN_OPERAND, high + 1)
                if max(a, b) > covered
            ]
            self.rng.shuffle(band)
            for pair in band:
                yield Problem(operands=pair, operators=(Operator.ADD,))
            covered = high
            high += FALLBACK_MAX
