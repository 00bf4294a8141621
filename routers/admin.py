from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from deps.auth import require_admin
from deps.practice import get_practice, tier_or_404
from practice import Practice
from review_store import MASTERY_CORRECT_RATE, MASTERY_MIN_ATTEMPTS

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.delete("/review/{record_id}")
def delete_review_record(record_id: int, practice: Practice = Depends(get_practice)):
    if not practice.store.delete_by_id(record_id):
        raise HTTPException(status_code=404, detail="review record not found")
    return {"ok": True}


@router.delete("/review")
def clear_review(tier: Optional[int] = None, practice: Practice = Depends(get_practice)):
    if tier is not None:
        tier_or_404(tier)
    return {"ok": practice.store.delete_for_tier(tier)}


@router.post("/review/evict-mastered")
def evict_mastered(
    threshold: float = MASTERY_CORRECT_RATE,
    min_attempts: int = MASTERY_MIN_ATTEMPTS,
    practice: Practice = Depends(get_practice),
):
    n = practice.store.evict_mastered(threshold, min_attempts)
    return {"ok": True, "evicted": n}
