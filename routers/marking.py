from __future__ import annotations

import logging
import math
import re
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from db import SessionLocal
from deps.practice import get_practice, problem_or_422, tier_or_404
from models import Attempt
from practice import Practice
from problems import Problem
from schemas.marking import (
    MarkBatchRequest,
    MarkBatchResponse,
    MarkRequest,
    MarkResponse,
)
from solutions import solution_method, solution_steps
from tiers import DifficultyTier, performance_rating

logger = logging.getLogger("arith-practice.marking")

router = APIRouter(tags=["marking"])

# --- Answer validation ------------------------------------------------------------
LEN_LIMIT = 100
_INVALID_CHARS_MSG = (
    "Only numeric expressions using digits, spaces, + - * / ^ . and parentheses are allowed."
)
_NON_FINITE_MSG = "Expression is not finite (e.g., division by zero)."
_ALLOWED_RE = re.compile(r"^[0-9+\-*/^().\s]{1,100}$")

TRANSFORMS = standard_transformations + (
    convert_xor,
    implicit_multiplication_application,
)


def _validate_answer_text(s: str) -> Optional[str]:
    if s is None or not isinstance(s, str) or not s.strip():
        return "Answer required."
    if len(s) > LEN_LIMIT:
        return "Answer too long (> 100)."
    if _ALLOWED_RE.fullmatch(s) is None:
        return _INVALID_CHARS_MSG
    return None


def _eval_numeric(expr: str) -> float:
    sym = parse_expr(expr, transformations=TRANSFORMS, evaluate=True)
    val = float(sym.evalf())
    if not math.isfinite(val):
        raise ValueError(_NON_FINITE_MSG)
    return val


# --- Core marking -----------------------------------------------------------------


def _mark_one(problem: Problem, tier: DifficultyTier, answer: str) -> Dict[str, Any]:
    expected = problem.correct_answer

    msg = _validate_answer_text(answer)
    if msg:
        return {"ok": False, "correct": False, "score": 0, "feedback": msg, "expected": expected}

    try:
        user_val = _eval_numeric(answer)
    except ValueError as e:
        return {"ok": False, "correct": False, "score": 0, "feedback": str(e), "expected": expected}
    except Exception:
        # sympy raises a zoo of parser errors (SyntaxError, TokenError, TypeError...)
        return {
            "ok": False,
            "correct": False,
            "score": 0,
            "feedback": _INVALID_CHARS_MSG,
            "expected": expected,
        }

    correct = math.isclose(user_val, expected, rel_tol=0, abs_tol=1e-9)
    if not correct:
        return {
            "ok": True,
            "correct": False,
            "score": 0,
            "feedback": "",
            "expected": expected,
            "method": solution_method(problem, tier).value,
            "steps": solution_steps(problem, tier),
        }

    # Gentle suggestion if they typed an expression instead of the number
    feedback = ""
    raw = answer.strip()
    if raw != str(expected) and any(op in raw for op in ("+", "-", "*", "/", "^", " ")):
        feedback = f"Correct; simplest form is {expected}."
    return {
        "ok": True,
        "correct": True,
        "score": tier.points_per_problem,
        "feedback": feedback,
        "expected": expected,
    }


# --- Endpoints --------------------------------------------------------------------


@router.post("/mark", response_model=MarkResponse)
def mark(req: MarkRequest, practice: Practice = Depends(get_practice)):
    tier = tier_or_404(req.tier)
    problem = problem_or_422(req, tier)
    res = _mark_one(problem, tier, req.answer)
    # unreadable answers are not held against the learner
    if res["ok"]:
        practice.record_answer(problem, tier.id, res["correct"])
    return res


@router.post("/mark-batch", response_model=MarkBatchResponse)
def mark_batch(req: MarkBatchRequest, practice: Practice = Depends(get_practice)):
    t0 = time.perf_counter()
    tier = tier_or_404(req.tier)
    # reject the whole batch before anything is recorded
    problems = [problem_or_422(it, tier) for it in req.items]

    results: List[Dict[str, Any]] = []
    correct_count = 0
    score = 0

    for it, problem in zip(req.items, problems):
        res = _mark_one(problem, tier, it.answer)
        if res["ok"]:
            practice.record_answer(problem, tier.id, res["correct"])
        results.append({"key": problem.key, "response": res})
        if res.get("correct"):
            correct_count += 1
            score += res["score"]

    total = len(results)
    measured_ms = int(round((time.perf_counter() - t0) * 1000))
    duration_ms = req.duration_ms if req.duration_ms is not None else measured_ms

    attempt_id: Optional[int] = None
    try:
        with SessionLocal() as db:
            attempt = Attempt(
                tier=tier.id,
                total=total,
                correct=correct_count,
                score=score,
                items=results,
                duration_ms=duration_ms,
            )
            db.add(attempt)
            db.commit()
            db.refresh(attempt)
            attempt_id = attempt.id
    except SQLAlchemyError:
        logger.exception("could not store attempt for tier %s", tier.id)
        attempt_id = None

    return {
        "ok": True,
        "tier": tier.id,
        "total": total,
        "correct": correct_count,
        "score": score,
        "rating": performance_rating(score),
        "results": results,
        "attempt_id": attempt_id,
        "duration_ms": duration_ms,
    }
