from __future__ import annotations

from typing import Dict, FrozenSet, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from problems import Operator, Problem

ADD_SUB = frozenset({Operator.ADD, Operator.SUB})
MUL_DIV = frozenset({Operator.MUL, Operator.DIV})
ALL_OPERATORS = ADD_SUB | MUL_DIV


class DifficultyTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    upper_bound: int
    operators: FrozenSet[Operator]
    problem_count: int
    points_per_problem: int
    three_operand_probability: float = Field(ge=0.0, le=1.0)

    @property
    def lower_bound(self) -> int:
        return 1

    @property
    def max_score(self) -> int:
        return self.problem_count * self.points_per_problem

    def operator_menu(self) -> List[Operator]:
        # stable order so seeded draws are reproducible
        return [op for op in Operator if op in self.operators]

    def admits(self, problem: Problem) -> bool:
        """
        True when ``problem`` is one this tier could have served.

        The problem must be valid, use the tier's operators and stay within
        its range. Plain additions only need to be valid, since fallback and
        padding problems are additions whatever the tier.
        """
        if not problem.is_valid():
            return False
        if all(op is Operator.ADD for op in problem.operators):
            return True
        # a division repair may have swapped in "+"
        if not set(problem.operators) <= self.operators | {Operator.ADD}:
            return False
        return (
            all(self.lower_bound <= n <= self.upper_bound for n in problem.operands)
            and problem.correct_answer <= self.upper_bound
        )


def _tier(id, upper_bound, operators, problem_count, points, p3) -> DifficultyTier:
    return DifficultyTier(
        id=id,
        upper_bound=upper_bound,
        operators=operators,
        problem_count=problem_count,
        points_per_problem=points,
        three_operand_probability=p3,
    )


# | tier | range  | ops        | count | points | 3-operand |
TIERS: Dict[int, DifficultyTier] = {
    t.id: t
    for t in (
        _tier(1, 10, ADD_SUB, 20, 5, 0.0),
        _tier(2, 20, ADD_SUB, 25, 4, 0.4),
        _tier(3, 50, ADD_SUB, 50, 2, 0.6),
        _tier(4, 10, MUL_DIV, 20, 5, 0.4),
        _tier(5, 20, MUL_DIV, 25, 4, 0.8),
        _tier(6, 100, ALL_OPERATORS, 100, 1, 0.9),
    )
}


def get_tier(tier_id: int) -> DifficultyTier:
    try:
        return TIERS[tier_id]
    except KeyError:
        raise KeyError(f"unknown difficulty tier: {tier_id}") from None


# (lowest score, label) from best to worst
_RATINGS: Tuple[Tuple[int, str], ...] = (
    (90, "excellent"),
    (80, "good"),
    (70, "pass"),
)


def performance_rating(score: int) -> str:
    for floor, label in _RATINGS:
        if score >= floor:
            return label
    return "needs_improvement"
