from typing import Iterator

from fastapi import HTTPException

from db import SessionLocal
from practice import Practice
from problems import Problem
from review_store import ReviewStore, SqlReviewPersistence
from schemas.problems import ProblemIn
from tiers import DifficultyTier, get_tier


def get_practice() -> Iterator[Practice]:
    """One review store per request, bound to its own DB session."""
    with SessionLocal() as db:
        yield Practice(ReviewStore(SqlReviewPersistence(db)))


def tier_or_404(tier_id: int) -> DifficultyTier:
    try:
        return get_tier(tier_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"unknown tier {tier_id}")


def problem_or_422(item: ProblemIn, tier: DifficultyTier) -> Problem:
    # only problems the tier could have served may reach marking and review
    problem = item.to_problem()
    if not tier.admits(problem):
        raise HTTPException(
            status_code=422,
            detail=f"{problem.key} is not a valid tier {tier.id} problem",
        )
    return problem
