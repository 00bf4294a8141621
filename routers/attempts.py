from fastapi import APIRouter, Depends, HTTPException

from db import SessionLocal
from deps.auth import require_client
from models import Attempt
from schemas.attempts import AttemptOut

router = APIRouter(prefix="/attempts", tags=["attempts"])


@router.get("/recent-list", dependencies=[Depends(require_client)])
def attempts_recent(limit: int = 20, tier: int | None = None):
    limit = max(1, min(limit, 100))

    with SessionLocal() as db:
        q = db.query(Attempt)
        if tier is not None:
            q = q.filter(Attempt.tier == tier)
        items = q.order_by(Attempt.created_at.desc()).limit(limit).all()

    # Reuse schema; exclude potentially large JSON "items"
    rows = [AttemptOut.model_validate(a).model_dump(exclude={"items"}) for a in items]
    return {"ok": True, "items": rows, "count": len(rows)}


@router.get("/{attempt_id}", response_model=AttemptOut)
def get_attempt(attempt_id: int):
    # Public endpoint: no token required
    with SessionLocal() as db:
        a = db.get(Attempt, attempt_id)
        if not a:
            raise HTTPException(status_code=404, detail="Attempt not found")
        return AttemptOut.model_validate(a)
