from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from deps.practice import get_practice, tier_or_404
from practice import Practice
from schemas.review import ReviewListOut, ReviewRecordOut, ReviewStatsOut

router = APIRouter(prefix="/review", tags=["review"])


@router.get("", response_model=ReviewListOut)
def list_review(
    tier: int,
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    practice: Practice = Depends(get_practice),
):
    tier_or_404(tier)
    records = practice.store.records_for_tier(tier, limit)
    items = [ReviewRecordOut.model_validate(r) for r in records]
    return {"ok": True, "tier": tier, "count": len(items), "items": items}


@router.get("/stats", response_model=ReviewStatsOut)
def review_stats(tier: Optional[int] = None, practice: Practice = Depends(get_practice)):
    if tier is not None:
        tier_or_404(tier)
    stats = practice.get_stats(tier)
    return {"ok": True, "total": stats.total, "by_tier": stats.by_tier}
