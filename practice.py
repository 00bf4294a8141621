from __future__ import annotations

import random
from typing import List, Optional

from problems import Problem
from review_store import Outcome, ReviewStats, ReviewStore
from session_builder import SessionBuilder
from tiers import get_tier


class Practice:
    """What the application layer sees: sessions in, answers back, review stats."""

    def __init__(self, store: ReviewStore, rng: Optional[random.Random] = None):
        self.store = store
        self.builder = SessionBuilder(store, rng=rng)

    def build_session(self, tier_id: int, target_count: Optional[int] = None) -> List[Problem]:
        tier = get_tier(tier_id)
        count = tier.problem_count if target_count is None else target_count
        return self.builder.build_session(tier, count)

    def record_answer(self, problem: Problem, tier_id: int, was_correct: bool) -> None:
        outcome = Outcome.from_bool(was_correct)
        if outcome is Outcome.INCORRECT:
            self.store.upsert_wrong(problem, tier_id)
        else:
            self.store.record_shown(problem, outcome)

    def get_stats(self, tier_id: Optional[int] = None) -> ReviewStats:
        return self.store.stats(tier_id)
