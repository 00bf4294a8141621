import random

import pytest

from generator import ProblemSynthesizer
from problems import Operator, Problem
from review_store import Outcome, ReviewFilter
from session_builder import MAX_FAILED_ATTEMPTS, SessionBuilder
from tiers import TIERS, get_tier


@pytest.mark.parametrize("tier_id", sorted(TIERS))
def test_full_session_is_exact_size_and_unique(tier_id, store, rng):
    tier = get_tier(tier_id)
    session = SessionBuilder(store, rng=rng).build_session(tier, tier.problem_count)
    assert len(session) == tier.problem_count
    assert len({p.key for p in session}) == tier.problem_count
    assert all(p.is_valid() for p in session)


@pytest.mark.parametrize("count", [1, 7, 150])
def test_custom_sizes(count, store, rng):
    session = SessionBuilder(store, rng=rng).build_session(get_tier(4), count)
    assert len(session) == count
    assert len({p.key for p in session}) == count


def test_zero_target_is_empty(store, rng):
    assert SessionBuilder(store, rng=rng).build_session(get_tier(1), 0) == []


def test_review_items_seed_the_session(store, rng):
    tier = get_tier(2)
    missed = [Problem.of(15, "-", 7), Problem.of(9, "+", 8), Problem.of(4, "+", 9, "-", 2)]
    for p in missed:
        store.upsert_wrong(p, tier.id)

    session = SessionBuilder(store, rng=rng).build_session(tier, 10)
    keys = {p.key for p in session}
    # floor(10 * 0.3) = 3 review slots
    assert {p.key for p in missed} <= keys
    assert len(session) == 10

    # each resurfaced item counted as shown, without a verdict
    for p in missed:
        rec = store.persistence.find(ReviewFilter(key=p.key))[0]
        assert (rec.times_shown, rec.times_wrong) == (2, 1)


def test_review_slice_is_bounded(store, rng):
    tier = get_tier(3)
    for a in range(20, 40):
        store.upsert_wrong(Problem.of(a, "-", 3), tier.id)
    SessionBuilder(store, rng=rng).build_session(tier, 10)
    shown_again = [r for r in store.persistence.find(ReviewFilter(tier=tier.id)) if r.times_shown == 2]
    assert len(shown_again) == 3


def test_review_items_from_other_tiers_are_ignored(store, rng):
    store.upsert_wrong(Problem.of(6, "×", 7), 6)
    session = SessionBuilder(store, rng=rng).build_session(get_tier(1), 20)
    assert "6×7" not in {p.key for p in session}


class StuckSynthesizer(ProblemSynthesizer):
    """Always proposes the same problem, forcing the padding path."""

    def __init__(self, rng):
        super().__init__(rng)
        self.calls = 0

    def generate(self, tier):
        self.calls += 1
        return Problem.of(9, "-", 4)


def test_padding_when_generation_keeps_colliding(store):
    rng = random.Random(5)
    synth = StuckSynthesizer(rng)
    session = SessionBuilder(store, synthesizer=synth, rng=rng).build_session(get_tier(1), 20)
    assert len(session) == 20
    assert len({p.key for p in session}) == 20
    assert synth.calls == MAX_FAILED_ATTEMPTS + 1
    padded = [p for p in session if p.key != "9-4"]
    assert all(p.operators == (Operator.ADD,) for p in padded)


def test_padding_reaches_large_targets(store):
    rng = random.Random(5)
    session = SessionBuilder(store, synthesizer=StuckSynthesizer(rng), rng=rng).build_session(
        get_tier(4), 200
    )
    assert len({p.key for p in session}) == 200


class FlakyStore:
    """A store whose backend is down: nothing due, every write refused."""

    def __init__(self):
        self.shown = []

    def fetch_for_tier(self, tier, limit):
        return []

    def record_shown(self, problem, outcome):
        self.shown.append((problem, outcome))
        return False


def test_session_survives_store_outage(rng):
    store = FlakyStore()
    session = SessionBuilder(store, rng=rng).build_session(get_tier(5), 25)
    assert len(session) == 25
    assert store.shown == []


def test_oversized_seed_is_downsampled(store, rng, monkeypatch):
    tier = get_tier(2)
    missed = [Problem.of(a, "+", 9) for a in range(3, 11)]
    for p in missed:
        store.upsert_wrong(p, tier.id)
    # hand back more due items than the session holds
    monkeypatch.setattr(store, "fetch_for_tier", lambda tier_id, limit: list(missed))
    session = SessionBuilder(store, rng=rng).build_session(tier, 5)
    assert len(session) == 5
    assert {p.key for p in session} <= {p.key for p in missed}


def test_resurfaced_items_marked_unscored(store, rng, monkeypatch):
    calls = []
    original = store.record_shown
    monkeypatch.setattr(store, "record_shown", lambda p, o: calls.append(o) or original(p, o))
    store.upsert_wrong(Problem.of(13, "-", 6), 2)
    SessionBuilder(store, rng=rng).build_session(get_tier(2), 10)
    assert calls == [Outcome.UNSCORED]


def test_unservable_review_items_are_discarded(store, rng):
    tier = get_tier(1)
    bad = [Problem.of(7, "÷", 2), Problem.of(2, "-", 9)]
    good = Problem.of(8, "-", 5)
    for p in bad + [good]:
        store.upsert_wrong(p, tier.id)
    # the bad ones carry more misses, so they sort ahead of the good one
    for p in bad:
        store.upsert_wrong(p, tier.id)

    session = SessionBuilder(store, rng=rng).build_session(tier, 10)
    keys = {p.key for p in session}
    assert "8-5" in keys
    assert not keys & {p.key for p in bad}
    assert all(not store.is_tracked(p) for p in bad)
    rec = store.persistence.find(ReviewFilter(key=good.key))[0]
    assert rec.times_shown == 2
