import pytest

from problems import Operator, Problem
from tiers import TIERS, get_tier, performance_rating


def test_six_tiers_with_expected_table():
    table = {
        t.id: (t.upper_bound, t.problem_count, t.points_per_problem, t.three_operand_probability)
        for t in TIERS.values()
    }
    assert table == {
        1: (10, 20, 5, 0.0),
        2: (20, 25, 4, 0.4),
        3: (50, 50, 2, 0.6),
        4: (10, 20, 5, 0.4),
        5: (20, 25, 4, 0.8),
        6: (100, 100, 1, 0.9),
    }


@pytest.mark.parametrize("tier_id", sorted(TIERS))
def test_full_session_is_worth_100(tier_id):
    assert get_tier(tier_id).max_score == 100


def test_operator_menus():
    add_sub = {Operator.ADD, Operator.SUB}
    mul_div = {Operator.MUL, Operator.DIV}
    for tier_id in (1, 2, 3):
        assert get_tier(tier_id).operators == add_sub
    for tier_id in (4, 5):
        assert get_tier(tier_id).operators == mul_div
    assert get_tier(6).operators == add_sub | mul_div
    assert get_tier(6).operator_menu() == [Operator.ADD, Operator.SUB, Operator.MUL, Operator.DIV]


def test_lower_bound_is_one():
    assert all(t.lower_bound == 1 for t in TIERS.values())


def test_unknown_tier():
    with pytest.raises(KeyError):
        get_tier(7)


@pytest.mark.parametrize(
    "score,label",
    [(100, "excellent"), (90, "excellent"), (89, "good"), (80, "good"), (75, "pass"), (69, "needs_improvement"), (0, "needs_improvement")],
)
def test_performance_rating(score, label):
    assert performance_rating(score) == label


@pytest.mark.parametrize(
    "tier_id,parts,admitted",
    [
        (1, (7, "+", 3), True),
        (1, (2, "-", 9), False),  # negative answer
        (1, (7, "÷", 2), False),  # operator outside the tier, inexact too
        (1, (6, "×", 7), False),
        (4, (5, "÷", 0), False),
        (4, (8, "÷", 8), False),
        (4, (2, "×", 5), True),
        (4, (4, "×", 3), False),  # 12 is past the range
        (4, (2, "×", 3, "+", 4), True),  # repaired division
        (4, (3, "+", 9), True),  # fallback addition
        (2, (25, "-", 3), False),
        (6, (8, "÷", 2, "+", 3), True),
        (3, (30, "+", 40), True),  # widened padding
    ],
)
def test_admits(tier_id, parts, admitted):
    assert get_tier(tier_id).admits(Problem.of(*parts)) is admitted
