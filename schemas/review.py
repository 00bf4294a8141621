from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict


class ReviewRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    canonical_key: str
    tier: int
    operands: List[int]
    operators: List[str]
    correct_answer: int
    created_at: datetime | None
    last_shown_at: datetime | None = None
    times_shown: int
    times_wrong: int


class ReviewListOut(BaseModel):
    ok: bool
    tier: int
    count: int
    items: List[ReviewRecordOut]


class ReviewStatsOut(BaseModel):
    ok: bool
    total: int
    by_tier: Dict[int, int]
