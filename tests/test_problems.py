import pytest
from pydantic import ValidationError
from sympy import Rational
from sympy.parsing.sympy_parser import parse_expr

from problems import Operator, Problem, canonical_key, evaluate


def test_two_operand_addition():
    p = Problem.of(7, "+", 3)
    assert p.correct_answer == 10
    assert p.key == "7+3"
    assert canonical_key(p) == "7+3"
    assert p.text == "7 + 3 = ?"


def test_division_then_addition_left_to_right():
    p = Problem.of(8, "÷", 2, "+", 3)
    assert p.correct_answer == 7
    assert p.key == "8÷2+3"
    assert p.solution_steps() == ["8 ÷ 2 = 4", "4 + 3 = 7"]


def test_multiplication_binds_tighter_on_the_right():
    p = Problem.of(2, "+", 3, "×", 4)
    assert p.correct_answer == 14
    assert p.solution_steps() == ["3 × 4 = 12", "2 + 12 = 14"]


def test_same_precedence_is_left_to_right():
    assert evaluate([10, 4, 3], [Operator.SUB, Operator.ADD]) == 9
    assert evaluate([12, 3, 2], [Operator.DIV, Operator.MUL]) == 8
    assert evaluate([2, 6, 3], [Operator.MUL, Operator.DIV]) == 4


@pytest.mark.parametrize(
    "parts",
    [
        (9, "-", 2, "×", 3),
        (20, "-", 12, "÷", 4),
        (5, "×", 4, "-", 6),
        (18, "÷", 3, "÷", 2),
        (4, "+", 6, "+", 7),
    ],
)
def test_evaluation_agrees_with_sympy(parts):
    p = Problem.of(*parts)
    expr = " ".join(str(x) for x in parts).replace("×", "*").replace("÷", "/")
    assert Rational(p.correct_answer) == parse_expr(expr)


def test_key_ignores_answer_but_respects_order():
    assert Problem.of(3, "+", 7).key != Problem.of(7, "+", 3).key
    assert Problem.of(3, "+", 7) == Problem.of(3, "+", 7)
    assert len({Problem.of(3, "+", 7), Problem.of(3, "+", 7)}) == 1


def test_problem_is_immutable():
    p = Problem.of(7, "+", 3)
    with pytest.raises(ValidationError):
        p.operands = (1, 2)


@pytest.mark.parametrize(
    "operands,operators",
    [
        ((1,), ()),
        ((1, 2), ()),
        ((1, 2, 3), ("+",)),
        ((1, 2, 3, 4), ("+", "+", "+")),
    ],
)
def test_bad_arity_fails_fast(operands, operators):
    with pytest.raises(ValidationError):
        Problem(operands=operands, operators=operators)
    with pytest.raises(ValueError):
        evaluate(operands, [Operator(o) for o in operators])


def test_zero_divisor_raises_on_evaluation():
    with pytest.raises(ZeroDivisionError):
        evaluate([6, 0], [Operator.DIV])


@pytest.mark.parametrize(
    "parts,valid",
    [
        ((12, "÷", 3), True),
        ((12, "÷", 5), False),
        ((6, "÷", 6), False),
        ((6, "÷", 0), False),
        ((3, "-", 5), False),
        ((4, "-", 4), False),
        ((2, "+", 12, "÷", 4), True),
        ((2, "+", 12, "÷", 5), False),
        ((3, "×", 4, "÷", 6), True),
        ((3, "×", 4, "÷", 5), False),
        ((3, "×", 4, "÷", 12), False),
        ((7, "÷", 2, "+", 1), False),
        ((2, "-", 3, "×", 4), False),
    ],
)
def test_is_valid(parts, valid):
    assert Problem.of(*parts).is_valid() is valid
