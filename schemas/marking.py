# schemas/marking.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from schemas.problems import ProblemIn

# ---------- Mark single ----------


class MarkRequest(ProblemIn):
    tier: int
    answer: str


class MarkResponse(BaseModel):
    ok: bool
    correct: bool
    score: int
    feedback: str
    expected: Optional[int] = None
    # teaching method and worked steps, only filled in for wrong answers
    method: Optional[str] = None
    steps: List[str] = Field(default_factory=list)


# ---------- Mark batch ----------


class MarkBatchEntry(ProblemIn):
    answer: str


class MarkBatchItem(BaseModel):
    key: str
    response: MarkResponse


class MarkBatchRequest(BaseModel):
    tier: int
    items: List[MarkBatchEntry]
    # Client may send it, but server computes its own duration anyway.
    duration_ms: Optional[int] = None


class MarkBatchResponse(BaseModel):
    ok: bool
    tier: int
    total: int
    correct: int
    score: int
    rating: str
    results: List[MarkBatchItem]
    attempt_id: Optional[int] = None
    duration_ms: Optional[int] = None
