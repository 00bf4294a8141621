"""
Persistent pool of missed problems.

The store owns every ``ReviewRecord``. It talks to storage only through the
small ``ReviewPersistence`` contract, and it never lets a storage failure
escape: failures are logged, rolled back, and reported as ``False``, an empty
list or zeroed stats so practice can carry on without review items.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import ReviewRecord
from problems import Problem
from tiers import TIERS

logger = logging.getLogger("arith-practice.review")

MASTERY_CORRECT_RATE = 0.70
MASTERY_MIN_ATTEMPTS = 3

# errors a persistence backend may raise; anything else is a bug and propagates
PERSISTENCE_ERRORS = (SQLAlchemyError, OSError)


class Outcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNSCORED = "unscored"  # resurfaced into a session, not answered yet

    @classmethod
    def from_bool(cls, was_correct: Optional[bool]) -> "Outcome":
        if was_correct is None:
            return cls.UNSCORED
        return cls.CORRECT if was_correct else cls.INCORRECT


@dataclass(frozen=True)
class ReviewFilter:
    """Conjunction of optional equality tests on a record."""

    key: Optional[str] = None
    tier: Optional[int] = None
    record_id: Optional[int] = None


class ReviewPersistence(Protocol):
    def find(self, where: ReviewFilter) -> List[ReviewRecord]: ...

    def count(self, where: ReviewFilter) -> int: ...

    def insert(self, record: ReviewRecord) -> None: ...

    def update(self, record: ReviewRecord) -> None: ...

    def delete(self, record: ReviewRecord) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class SqlReviewPersistence:
    """ReviewPersistence over a SQLAlchemy session; changes land on commit()."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _clauses(where: ReviewFilter) -> list:
        clauses = []
        if where.key is not None:
            clauses.append(ReviewRecord.canonical_key == where.key)
        if where.tier is not None:
            clauses.append(ReviewRecord.tier == where.tier)
        if where.record_id is not None:
            clauses.append(ReviewRecord.id == where.record_id)
        return clauses

    def find(self, where: ReviewFilter) -> List[ReviewRecord]:
        stmt = select(ReviewRecord).where(*self._clauses(where)).order_by(ReviewRecord.id)
        return list(self.db.scalars(stmt))

    def count(self, where: ReviewFilter) -> int:
        stmt = select(func.count()).select_from(ReviewRecord).where(*self._clauses(where))
        return int(self.db.scalar(stmt) or 0)

    def insert(self, record: ReviewRecord) -> None:
        self.db.add(record)

    def update(self, record: ReviewRecord) -> None:
        # loaded records are already tracked; add() is a no-op for them
        self.db.add(record)

    def delete(self, record: ReviewRecord) -> None:
        self.db.delete(record)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()


class ReviewStats(BaseModel):
    total: int
    by_tier: Dict[int, int]


def correct_rate(record: ReviewRecord) -> float:
    if record.times_shown <= 0:
        return 0.0
    return (record.times_shown - record.times_wrong) / record.times_shown


def _as_utc(ts: datetime) -> datetime:
    # SQLite hands timezone-aware columns back naive
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=UTC)


_NEVER = datetime.min.replace(tzinfo=UTC)


def _priority(record: ReviewRecord):
    # most-missed first; then least recently shown, never-shown ahead of all
    shown = record.last_shown_at
    return (-record.times_wrong, shown is not None, _as_utc(shown) if shown else _NEVER)


def record_to_problem(record: ReviewRecord) -> Problem:
    return Problem(operands=record.operands, operators=record.operators)


class ReviewStore:
    def __init__(
        self,
        persistence: ReviewPersistence,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.persistence = persistence
        self.clock = clock

    # --- helpers ------------------------------------------------------------------

    def _fail(self, action: str) -> None:
        logger.exception("review store: %s failed", action)
        try:
            self.persistence.rollback()
        except PERSISTENCE_ERRORS:
            logger.warning("review store: rollback after failed %s also failed", action)

    def _find_one(self, problem: Problem) -> Optional[ReviewRecord]:
        found = self.persistence.find(ReviewFilter(key=problem.key))
        return found[0] if found else None

    # --- mutations ----------------------------------------------------------------

    def upsert_wrong(self, problem: Problem, tier: int) -> bool:
        """
        Register a wrong answer. New problems start at one showing and one miss;
        known ones only gain a miss (showings are counted by record_shown).
        """
        try:
            now = self.clock()
            record = self._find_one(problem)
            if record is None:
                self.persistence.insert(
                    ReviewRecord(
                        canonical_key=problem.key,
                        tier=tier,
                        operands=list(problem.operands),
                        operators=[op.value for op in problem.operators],
                        correct_answer=problem.correct_answer,
                        created_at=now,
                        last_shown_at=now,
                        times_shown=1,
                        times_wrong=1,
                    )
                )
                logger.info("review: tracking %s (tier %s)", problem.key, tier)
            else:
                record.times_wrong += 1
                record.last_shown_at = now
                self.persistence.update(record)
            self.persistence.commit()
            return True
        except PERSISTENCE_ERRORS:
            self._fail("upsert_wrong")
            return False

    def record_shown(self, problem: Problem, outcome: Outcome) -> bool:
        """
        Count one showing of a tracked problem.

        A correct answer after more than MASTERY_MIN_ATTEMPTS showings with a
        correct rate of at least MASTERY_CORRECT_RATE evicts the record.
        Returns False when the problem is not tracked or storage fails.
        """
        try:
            record = self._find_one(problem)
            if record is None:
                return False
            record.times_shown += 1
            record.last_shown_at = self.clock()
            if outcome is Outcome.INCORRECT:
                record.times_wrong += 1

            if (
                outcome is Outcome.CORRECT
                and record.times_shown > MASTERY_MIN_ATTEMPTS
                and correct_rate(record) >= MASTERY_CORRECT_RATE
            ):
                logger.info("review: %s mastered, evicting", problem.key)
                self.persistence.delete(record)
            else:
                self.persistence.update(record)
            self.persistence.commit()
            return True
        except PERSISTENCE_ERRORS:
            self._fail("record_shown")
            return False

    def delete_by_id(self, record_id: int) -> bool:
        try:
            found = self.persistence.find(ReviewFilter(record_id=record_id))
            if not found:
                return False
            self.persistence.delete(found[0])
            self.persistence.commit()
            return True
        except PERSISTENCE_ERRORS:
            self._fail("delete_by_id")
            return False

    def discard(self, problem: Problem) -> bool:
        """Drop the record for ``problem``; False when untracked or storage fails."""
        try:
            record = self._find_one(problem)
            if record is None:
                return False
            self.persistence.delete(record)
            self.persistence.commit()
            return True
        except PERSISTENCE_ERRORS:
            self._fail("discard")
            return False

    def delete_for_tier(self, tier: Optional[int] = None) -> bool:
        """Drop every record of ``tier``, or every record when tier is None."""
        try:
            for record in self.persistence.find(ReviewFilter(tier=tier)):
                self.persistence.delete(record)
            self.persistence.commit()
            return True
        except PERSISTENCE_ERRORS:
            self._fail("delete_for_tier")
            return False

    def evict_mastered(
        self,
        correct_rate_threshold: float = MASTERY_CORRECT_RATE,
        min_attempts: int = MASTERY_MIN_ATTEMPTS,
    ) -> int:
        """Batch sweep; returns how many records were removed (0 on failure)."""
        try:
            evicted = 0
            for record in self.persistence.find(ReviewFilter()):
                if record.times_shown >= min_attempts and correct_rate(record) >= correct_rate_threshold:
                    self.persistence.delete(record)
                    evicted += 1
            self.persistence.commit()
            if evicted:
                logger.info("review: evicted %d mastered records", evicted)
            return evicted
        except PERSISTENCE_ERRORS:
            self._fail("evict_mastered")
            return 0

    # --- queries ------------------------------------------------------------------

    def is_tracked(self, problem: Problem) -> bool:
        try:
            return self.persistence.count(ReviewFilter(key=problem.key)) > 0
        except PERSISTENCE_ERRORS:
            self._fail("is_tracked")
            return False

    def records_for_tier(self, tier: int, limit: Optional[int] = None) -> List[ReviewRecord]:
        """Records of a tier in review priority order."""
        try:
            records = sorted(self.persistence.find(ReviewFilter(tier=tier)), key=_priority)
        except PERSISTENCE_ERRORS:
            self._fail("records_for_tier")
            return []
        return records if limit is None else records[: max(0, limit)]

    def fetch_for_tier(self, tier: int, limit: int) -> List[Problem]:
        problems: List[Problem] = []
        for record in self.records_for_tier(tier):
            if len(problems) >= limit:
                break
            try:
                problems.append(record_to_problem(record))
            except ValueError:
                logger.warning("review: skipping malformed record %s", record.canonical_key)
        return problems

    def stats(self, tier: Optional[int] = None) -> ReviewStats:
        tiers = [tier] if tier is not None else sorted(TIERS)
        by_tier: Dict[int, int] = {}
        try:
            for t in tiers:
                by_tier[t] = self.persistence.count(ReviewFilter(tier=t))
        except PERSISTENCE_ERRORS:
            self._fail("stats")
            return ReviewStats(total=0, by_tier={})
        return ReviewStats(total=sum(by_tier.values()), by_tier=by_tier)
