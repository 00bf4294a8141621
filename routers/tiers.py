from __future__ import annotations

from typing import List

from fastapi import APIRouter

from deps.practice import tier_or_404
from schemas.problems import TierOut
from tiers import TIERS, DifficultyTier

router = APIRouter(prefix="/tiers", tags=["tiers"])


def _tier_out(t: DifficultyTier) -> TierOut:
    return TierOut(
        id=t.id,
        lower_bound=t.lower_bound,
        upper_bound=t.upper_bound,
        operators=t.operator_menu(),
        problem_count=t.problem_count,
        points_per_problem=t.points_per_problem,
        max_score=t.max_score,
        three_operand_probability=t.three_operand_probability,
    )


@router.get("", response_model=List[TierOut])
def list_tiers():
    return [_tier_out(TIERS[k]) for k in sorted(TIERS)]


@router.get("/{tier_id}", response_model=TierOut)
def get_tier_detail(tier_id: int):
    return _tier_out(tier_or_404(tier_id))
