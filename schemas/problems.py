# schemas/problems.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from problems import Operator, Problem


class ProblemIn(BaseModel):
    operands: List[int] = Field(min_length=2, max_length=3)
    operators: List[Operator] = Field(min_length=1, max_length=2)

    @model_validator(mode="after")
    def _arity(self) -> "ProblemIn":
        if len(self.operators) != len(self.operands) - 1:
            raise ValueError("operators must number one fewer than operands")
        return self

    def to_problem(self) -> Problem:
        return Problem(operands=self.operands, operators=self.operators)


class ProblemOut(BaseModel):
    key: str
    operands: List[int]
    operators: List[Operator]
    text: str

    @classmethod
    def from_problem(cls, p: Problem) -> "ProblemOut":
        return cls(key=p.key, operands=list(p.operands), operators=list(p.operators), text=p.text)


# ---------- Sessions ----------


class SessionRequest(BaseModel):
    tier: int
    # defaults to the tier's own problem count
    count: Optional[int] = Field(default=None, ge=1, le=200)


class SessionResponse(BaseModel):
    ok: bool
    tier: int
    count: int
    points_per_problem: int
    max_score: int
    problems: List[ProblemOut]


# ---------- Tiers ----------


class TierOut(BaseModel):
    id: int
    lower_bound: int
    upper_bound: int
    operators: List[Operator]
    problem_count: int
    points_per_problem: int
    max_score: int
    three_operand_probability: float
