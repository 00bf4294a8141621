from __future__ import annotations

import logging
import math
import random
from typing import List, Optional, Set

from generator import ProblemSynthesizer
from problems import Problem
from review_store import Outcome, ReviewStore
from tiers import DifficultyTier

logger = logging.getLogger("arith-practice.sessions")

REVIEW_RATIO = 0.3
MAX_FAILED_ATTEMPTS = 100


class SessionBuilder:
    """
    Assembles a practice session: due review items first, fresh problems for
    the rest, simple additions if generation keeps colliding.
    """

    def __init__(
        self,
        store: ReviewStore,
        synthesizer: Optional[ProblemSynthesizer] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.rng = rng or random.Random()
        self.synthesizer = synthesizer or ProblemSynthesizer(self.rng)

    def build_session(self, tier: DifficultyTier, target_count: int) -> List[Problem]:
        if target_count <= 0:
            return []

        problems: List[Problem] = []
        keys: Set[str] = set()

        def accept(problem: Problem) -> bool:
            if problem.key in keys or not tier.admits(problem):
                return False
            problems.append(problem)
            keys.add(problem.key)
            return True

        due = self.store.fetch_for_tier(tier.id, math.floor(target_count * REVIEW_RATIO))
        for problem in due:
            if accept(problem):
                self.store.record_shown(problem, Outcome.UNSCORED)
            elif not tier.admits(problem):
                # not servable in this tier; drop it from the pool
                logger.warning("tier %s: discarding unusable review item %s", tier.id, problem.key)
                self.store.discard(problem)
        seeded = len(problems)

        failed = 0
        while len(problems) < target_count and failed < MAX_FAILED_ATTEMPTS:
            if accept(self.synthesizer.generate(tier)):
                failed = 0
            else:
                failed += 1

        if len(problems) < target_count:
            logger.info(
                "tier %s: padding %d of %d problems with additions",
                tier.id,
                target_count - len(problems),
                target_count,
            )
            for problem in self.synthesizer.padding(tier):
                if len(problems) >= target_count:
                    break
                accept(problem)

        if len(problems) > target_count:
            problems = self.rng.sample(problems, target_count)

        self.rng.shuffle(problems)
        logger.debug("tier %s session: %d problems, %d from review", tier.id, len(problems), seeded)
        return problems
