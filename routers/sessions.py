from __future__ import annotations

from fastapi import APIRouter, Depends

from deps.practice import get_practice, tier_or_404
from practice import Practice
from schemas.problems import ProblemOut, SessionRequest, SessionResponse

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionResponse)
def create_session(req: SessionRequest, practice: Practice = Depends(get_practice)):
    tier = tier_or_404(req.tier)
    problems = practice.build_session(tier.id, req.count)
    return {
        "ok": True,
        "tier": tier.id,
        "count": len(problems),
        "points_per_problem": tier.points_per_problem,
        "max_score": len(problems) * tier.points_per_problem,
        "problems": [ProblemOut.from_problem(p) for p in problems],
    }
